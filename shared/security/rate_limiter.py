from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from .jwt_handler import COOKIE_NAME, verify_access_token


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Extracts the user ID from the jwt cookie if it holds a valid token.
    Falls back to the client's IP address if unauthenticated.
    """
    token = request.cookies.get(COOKIE_NAME)
    if token:
        payload = verify_access_token(token, request.app.state.settings)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


# Initialize the Limiter with our custom key function
limiter = Limiter(key_func=user_id_or_ip)
