from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings

def get_rate_limit_key(request: Request):
    """
    Limits per logged in user (username from the session cookie), falling
    back to the client address for anonymous requests.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            username = payload.get("sub")
            if username:
                return f"user:{username}"
        except JWTError:
            pass

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
