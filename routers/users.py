from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.auth_schemas import RegisterRequest
from middleware.rate_limiter import limiter
from routers.auth import register


router = APIRouter(
    prefix="/api/users",
    tags=["users"]
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register_user(request: Request, body: RegisterRequest, db: db_dependency):
    """
    Same as POST /api/auth/register, kept for older clients.
    """
    return register(body, db)


@router.get("/me", status_code=status.HTTP_200_OK)
async def get_user_info(user: user_dependency):
    return {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value
    }
