from .jwt_handler import COOKIE_NAME, create_access_token, verify_access_token
from .dependencies import CurrentUser, get_current_user, require_admin, require_role
from .rate_limiter import limiter, user_id_or_ip
from .roles import Role

__all__ = [
    "COOKIE_NAME",
    "create_access_token",
    "verify_access_token",
    "CurrentUser",
    "get_current_user",
    "require_admin",
    "require_role",
    "limiter",
    "user_id_or_ip",
    "Role",
]
