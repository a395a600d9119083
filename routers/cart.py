from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.cart_schemas import AddToCartRequest, UpdateCartRequest, DeleteCartItemRequest
from services.cart_service import CartService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/cart",
    tags=["cart"]
)


@router.post("/add", status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
async def add_to_cart(request: Request, body: AddToCartRequest, user: user_dependency, db: db_dependency):
    cart_count = CartService.add_to_cart(user.id, body.product_id, body.quantity, db)

    return {"message": "Product added to cart successfully", "cartCount": cart_count}


@router.get("/items/count", status_code=status.HTTP_200_OK)
async def get_cart_count(user: user_dependency, db: db_dependency):
    return {"username": user.username, "cartCount": CartService.count_items(user.id, db)}


@router.get("/items", status_code=status.HTTP_200_OK)
async def get_cart_items(user: user_dependency, db: db_dependency):
    return {
        "username": user.username,
        "role": user.role.value,
        "cart": CartService.get_items(user.id, db)
    }


@router.put("/update", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def update_cart_item(request: Request, body: UpdateCartRequest, user: user_dependency, db: db_dependency):
    CartService.update_quantity(user.id, body.product_id, body.quantity, db)

    return {"message": "Cart item quantity updated successfully"}


@router.delete("/delete", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def delete_cart_item(request: Request, body: DeleteCartItemRequest, user: user_dependency, db: db_dependency):
    """
    Removes a product from the cart. Removing a product that is not in the
    cart succeeds as well.
    """
    removed = CartService.delete_item(user.id, body.product_id, db)

    if not removed:
        logger.debug(
            "Cart delete for product not in cart",
            extra={"user_id": user.id, "product_id": body.product_id}
        )

    return {"message": "Cart item deleted successfully"}
