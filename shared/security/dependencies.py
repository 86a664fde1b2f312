from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status

from .jwt_handler import COOKIE_NAME, verify_access_token
from .roles import Role


@dataclass(frozen=True)
class CurrentUser:
    id: int
    username: str
    role: Role


async def get_current_user(request: Request) -> CurrentUser:
    """Dependency to validate the ``jwt`` cookie and return the caller's identity."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise credentials_exception

    payload = verify_access_token(token, request.app.state.settings)
    if payload is None:
        raise credentials_exception

    try:
        user = CurrentUser(
            id=int(payload["sub"]),
            username=payload["name"],
            role=Role(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        raise credentials_exception

    return user


def require_role(*roles: Role):
    """Build a dependency that only lets callers holding one of ``roles`` through."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user

    return checker


require_admin = require_role(Role.ADMIN)
