from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.exceptions import ConflictError, InvalidCredentialsError
from shared.forms import field_errors
from shared.security.jwt_handler import COOKIE_NAME
from shared.security.rate_limiter import limiter
from shared.templating import templates

from .schemas import LoginRequest, RegisterRequest
from .service import AuthService

router = APIRouter(prefix="/Auth", tags=["Authentication"])

LOGIN_RATE_LIMIT = "10/minute"


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


@router.get("/Register", response_class=HTMLResponse)
async def register_form(request: Request):
    return templates.TemplateResponse(request, "auth/register.html", {"form": {}, "errors": {}})


@router.post("/Register", response_class=HTMLResponse)
async def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    role: str = Form(""),
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    form = {"username": username, "role": role}
    try:
        payload = RegisterRequest(username=username, password=password, role=role)
    except ValidationError as exc:
        return templates.TemplateResponse(
            request,
            "auth/register.html",
            {"form": form, "errors": field_errors(exc)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    try:
        await service.register(db, payload)
    except ConflictError as e:
        return templates.TemplateResponse(
            request,
            "auth/register.html",
            {"form": form, "errors": {"__all__": str(e)}},
            status_code=status.HTTP_409_CONFLICT,
        )

    return RedirectResponse(url="/Auth/Login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/Login", response_class=HTMLResponse)
async def login_form(request: Request):
    return templates.TemplateResponse(request, "auth/login.html", {"form": {}, "errors": {}})


@router.post("/Login", response_class=HTMLResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    form = {"username": username}
    try:
        payload = LoginRequest(username=username, password=password)
    except ValidationError as exc:
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"form": form, "errors": field_errors(exc)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    try:
        token = await service.login(db, payload)
    except InvalidCredentialsError as e:
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"form": form, "errors": {"__all__": str(e)}},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = RedirectResponse(url="/Product/Index", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=service.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )
    return response


@router.post("/Logout")
async def logout():
    response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(COOKIE_NAME)
    return response
