from decimal import Decimal
from sqlalchemy.orm import Session
from models.products import Product
from models.product_images import ProductImage
from models.categories import Category
from models.cart_items import CartItem
from schemas.admin_schemas import AddProductRequest
from core.exceptions import ValidationError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class AdminProductService:

    @staticmethod
    def add_product(request: AddProductRequest, db: Session) -> Product:
        """
        Creates a product together with its first image.

        Checks:
        - Category exists
        - Name is not blank
        - Price is greater than 0
        - Stock is not negative
        - Image URL is not blank
        """
        category = db.get(Category, request.category_id)
        if category is None:
            raise ValidationError(f"Invalid category ID: {request.category_id}")

        if request.name is None or not request.name.strip():
            raise ValidationError("Product name cannot be empty")

        if request.price is None or request.price <= 0:
            raise ValidationError("Product price must be greater than 0")

        if request.stock is None or request.stock < 0:
            raise ValidationError("Product stock cannot be negative")

        if request.image_url is None or not request.image_url.strip():
            raise ValidationError("Product image URL cannot be empty")

        product = Product(
            name=request.name.strip(),
            description=(request.description or "").strip(),
            price=request.price.quantize(Decimal("0.01")),
            stock=request.stock,
            category=category
        )
        product.images.append(ProductImage(image_url=request.image_url.strip()))

        db.add(product)
        db.commit()
        db.refresh(product)

        logger.info("Product added", extra={"product_id": product.id, "category_id": category.id})

        return product

    @staticmethod
    def delete_product(product_id: int, db: Session) -> None:
        """
        Deletes a product. Its images and any cart lines pointing at it are
        removed first so no foreign key is left dangling. Order items keep
        their snapshot.
        """
        product = db.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product not found with ID: {product_id}")

        db.query(ProductImage).filter(ProductImage.product_id == product_id).delete()
        db.query(CartItem).filter(CartItem.product_id == product_id).delete()
        db.delete(product)
        db.commit()

        logger.info("Product deleted", extra={"product_id": product_id})
