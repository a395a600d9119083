from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, user_dependency
from services.order_service import OrderService


router = APIRouter(
    prefix="/api/orders",
    tags=["orders"]
)


@router.get("", status_code=status.HTTP_200_OK)
async def get_orders(user: user_dependency, db: db_dependency):
    return {
        "username": user.username,
        "role": user.role.value,
        "orders": {"products": OrderService.get_order_history(db, user.id)}
    }


@router.get("/stats", status_code=status.HTTP_200_OK)
async def get_order_stats(user: user_dependency, db: db_dependency):
    return OrderService.get_order_stats(db, user.id)
