from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.config.database import get_db
from shared.exceptions import InvalidSortFieldError
from shared.forms import field_errors
from shared.observability.metrics import warehouse_product_mutations_total
from shared.security.dependencies import CurrentUser, get_current_user, require_admin
from shared.templating import templates

from .schemas import INT32_MAX, ProductForm
from .service import ProductService

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/Product", tags=["Products"])

INDEX_URL = "/Product/Index"


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def _render_form(request: Request, template: str, user: CurrentUser, form: dict,
                 errors: dict, status_code: int = status.HTTP_200_OK):
    return templates.TemplateResponse(
        request,
        template,
        {"user": user, "form": form, "errors": errors},
        status_code=status_code,
    )


@router.get("/Index", response_class=HTMLResponse)
async def index(
    request: Request,
    page_number: int = Query(1, ge=1, le=INT32_MAX, alias="pageNumber"),
    sort_field: str = Query("Id", alias="sortField"),
    ascending: bool = Query(True),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    log.info("product_index", page_number=page_number, sort_field=sort_field, ascending=ascending)
    page_size = request.app.state.settings.PRODUCT_PAGE_SIZE
    try:
        products = await service.get_products_page(db, page_number, page_size, sort_field, ascending)
    except InvalidSortFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return templates.TemplateResponse(
        request,
        "product/index.html",
        {
            "user": user,
            "products": products,
            "current_page": page_number,
            "page_size": page_size,
            "sort_field": sort_field,
            "ascending": ascending,
        },
    )


@router.get("/Details/{product_id}", response_class=HTMLResponse)
async def details(
    request: Request,
    product_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product_by_id(db, product_id)
    if not product:
        log.warning("product_not_found", product_id=product_id)
        raise HTTPException(status_code=404, detail="Product not found")
    return templates.TemplateResponse(request, "product/details.html", {"user": user, "product": product})


@router.get("/Create", response_class=HTMLResponse)
async def create_form(request: Request, user: CurrentUser = Depends(require_admin)):
    log.info("product_create_page", username=user.username)
    return _render_form(request, "product/create.html", user, {}, {})


@router.post("/Create", response_class=HTMLResponse)
async def create(
    request: Request,
    name: str = Form(""),
    quantity: str = Form(""),
    description: str = Form(""),
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    form = {"name": name, "quantity": quantity, "description": description}
    try:
        data = ProductForm.model_validate(form)
    except ValidationError as exc:
        log.warning("product_create_invalid")
        return _render_form(request, "product/create.html", user, form, field_errors(exc),
                            status.HTTP_422_UNPROCESSABLE_ENTITY)

    try:
        product_id = await service.create_product(db, data)
    except SQLAlchemyError:
        await db.rollback()
        warehouse_product_mutations_total.labels(operation="create", status="failed").inc()
        log.exception("product_create_failed", name=data.name)
        return _render_form(
            request, "product/create.html", user, form,
            {"__all__": "An error occurred while creating the product."},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    warehouse_product_mutations_total.labels(operation="create", status="success").inc()
    log.info("product_created", product_id=product_id, name=data.name, username=user.username)
    return RedirectResponse(url=INDEX_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/Edit/{product_id}", response_class=HTMLResponse)
async def edit_form(
    request: Request,
    product_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product_by_id(db, product_id)
    if not product:
        log.warning("product_not_found", product_id=product_id)
        raise HTTPException(status_code=404, detail="Product not found")
    form = {
        "id": product.id,
        "name": product.name,
        "quantity": product.quantity,
        "description": product.description,
    }
    return _render_form(request, "product/edit.html", user, form, {})


@router.post("/Edit/{product_id}", response_class=HTMLResponse)
async def edit(
    request: Request,
    product_id: int,
    form_id: int = Form(0, alias="id"),
    name: str = Form(""),
    quantity: str = Form(""),
    description: str = Form(""),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    if product_id != form_id:
        log.warning("product_edit_id_mismatch", route_id=product_id, form_id=form_id)
        raise HTTPException(status_code=404, detail="Product not found")

    form = {"id": form_id, "name": name, "quantity": quantity, "description": description}
    try:
        data = ProductForm.model_validate(form)
    except ValidationError as exc:
        log.warning("product_edit_invalid", product_id=product_id)
        return _render_form(request, "product/edit.html", user, form, field_errors(exc),
                            status.HTTP_422_UNPROCESSABLE_ENTITY)

    try:
        await service.update_product(db, product_id, data)
    except SQLAlchemyError:
        await db.rollback()
        warehouse_product_mutations_total.labels(operation="update", status="failed").inc()
        log.exception("product_update_failed", product_id=product_id)
        return _render_form(
            request, "product/edit.html", user, form,
            {"__all__": "An error occurred while updating the product."},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    warehouse_product_mutations_total.labels(operation="update", status="success").inc()
    log.info("product_updated", product_id=product_id, name=data.name, username=user.username)
    return RedirectResponse(url=INDEX_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/Delete/{product_id}", response_class=HTMLResponse)
async def delete_form(
    request: Request,
    product_id: int,
    error: bool = False,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product_by_id(db, product_id)
    if not product:
        log.warning("product_not_found", product_id=product_id)
        raise HTTPException(status_code=404, detail="Product not found")
    return templates.TemplateResponse(
        request,
        "product/delete.html",
        {"user": user, "product": product, "error": error},
    )


@router.post("/DeleteConfirmed/{product_id}")
async def delete_confirmed(
    product_id: int,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    try:
        await service.delete_product(db, product_id)
    except SQLAlchemyError:
        await db.rollback()
        warehouse_product_mutations_total.labels(operation="delete", status="failed").inc()
        log.exception("product_delete_failed", product_id=product_id)
        return RedirectResponse(
            url=f"/Product/Delete/{product_id}?error=true",
            status_code=status.HTTP_303_SEE_OTHER,
        )

    warehouse_product_mutations_total.labels(operation="delete", status="success").inc()
    log.info("product_deleted", product_id=product_id, username=user.username)
    return RedirectResponse(url=INDEX_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/Search", response_class=HTMLResponse)
async def search(
    request: Request,
    name_part: str | None = Query(None, alias="namePart"),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    log.info("product_search", term=name_part)
    if not name_part or not name_part.strip():
        return RedirectResponse(url=INDEX_URL, status_code=status.HTTP_302_FOUND)

    products = await service.search_products_by_name(db, name_part)
    return templates.TemplateResponse(
        request,
        "product/search.html",
        {"user": user, "products": products, "name_part": name_part},
    )


@router.get("/Autocomplete", response_model=list[str])
async def autocomplete(
    term: str = Query(""),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    products = await service.search_products_by_name(db, term)
    return [p.name for p in products]
