from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.admin_schemas import AddProductRequest, DeleteProductRequest
from services.admin_product_service import AdminProductService
from services.product_service import ProductService
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/admin/products",
    tags=["admin"]
)


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_product(body: AddProductRequest, user: user_dependency, db: db_dependency):
    product = AdminProductService.add_product(body, db)

    logger.info("Admin added product", extra={"admin_id": user.id, "product_id": product.id})

    return {"message": "Product added successfully", "product": ProductService.to_dict(product)}


@router.delete("/delete", status_code=status.HTTP_200_OK)
async def delete_product(body: DeleteProductRequest, user: user_dependency, db: db_dependency):
    AdminProductService.delete_product(body.product_id, db)

    logger.info("Admin deleted product", extra={"admin_id": user.id, "product_id": body.product_id})

    return {"message": "Product deleted successfully"}
