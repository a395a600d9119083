from fastapi import APIRouter, Request, Response
from utils.deps import db_dependency, user_dependency
from starlette import status
from schemas.auth_schemas import RegisterRequest, LoginRequest
from services.auth_service import AuthService
from services.token_service import TokenService
from core.config import settings
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)


def register(body: RegisterRequest, db) -> dict:
    user = AuthService.register_user(body, db)

    logger.info(
        "User registered successfully",
        extra={"user_id": user.id, "username": user.username}
    )

    return {
        "message": "User registered successfully",
        "user": {
            "userId": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role.value
        }
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register_user(request: Request, body: RegisterRequest, db: db_dependency):
    return register(body, db)


@router.post("/login", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
async def login(request: Request, response: Response, body: LoginRequest, db: db_dependency):
    """
    Checks the credentials and hands out the session token as an HttpOnly
    cookie. The token itself is never part of the response body.
    """
    user = AuthService.authenticate(body.username, body.password, db)
    token = TokenService.issue(user, db)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.TOKEN_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE
    )

    logger.info(
        "User logged in successfully",
        extra={"user_id": user.id, "username": user.username}
    )

    return {"message": "Login successful", "role": user.role.value, "username": user.username}


@router.post("/logout", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def logout(request: Request, response: Response, user: user_dependency, db: db_dependency):
    """
    Invalidates every stored token of the user and clears the cookie.
    """
    TokenService.invalidate(user.id, db)
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, path="/")

    logger.info("User logged out", extra={"user_id": user.id})

    return {"message": "Logout successful"}


@router.get("/verify", status_code=status.HTTP_200_OK)
async def verify(user: user_dependency):
    """
    Identity behind the current session cookie.
    """
    return {"userId": user.id, "username": user.username, "role": user.role.value}
