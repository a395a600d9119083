from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, user_dependency
from services.product_service import ProductService


router = APIRouter(
    prefix="/api/products",
    tags=["products"]
)


def user_info(user) -> dict:
    return {"name": user.username, "role": user.role.value}


@router.get("", status_code=status.HTTP_200_OK)
async def list_products(user: user_dependency, db: db_dependency, category: str | None = None):
    """
    Catalog, optionally filtered by category name.
    """
    products = ProductService.list_products(db, category)

    return {
        "user": user_info(user),
        "products": [ProductService.to_dict(product) for product in products]
    }


# Declared before /{product_id} so "categories" is not parsed as an id
@router.get("/categories", status_code=status.HTTP_200_OK)
async def list_categories(user: user_dependency, db: db_dependency):
    return [
        {"categoryId": category.id, "name": category.name}
        for category in ProductService.list_categories(db)
    ]


@router.get("/{product_id}", status_code=status.HTTP_200_OK)
async def get_product(product_id: int, user: user_dependency, db: db_dependency):
    product = ProductService.get_product(db, product_id)

    return {"user": user_info(user), "product": ProductService.to_dict(product)}
