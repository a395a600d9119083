from sqlalchemy.orm import Session, joinedload, selectinload
from models.products import Product
from models.categories import Category
from core.exceptions import NotFoundError


class ProductService:

    @staticmethod
    def list_products(db: Session, category: str | None = None) -> list[Product]:
        """
        All products, optionally restricted to a category name.

        An unknown category yields an empty list.
        """
        query = db.query(Product).options(selectinload(Product.images), joinedload(Product.category))

        if category:
            query = query.join(Product.category).filter(Category.name == category)

        return query.order_by(Product.id).all()

    @staticmethod
    def get_product(db: Session, product_id: int) -> Product:
        product = db.query(Product).options(selectinload(Product.images)).filter(
            Product.id == product_id
        ).one_or_none()

        if product is None:
            raise NotFoundError(f"Product not found with ID: {product_id}")

        return product

    @staticmethod
    def list_categories(db: Session) -> list[Category]:
        return db.query(Category).order_by(Category.name).all()

    @staticmethod
    def to_dict(product: Product) -> dict:
        return {
            "product_id": product.id,
            "name": product.name,
            "description": product.description,
            "price": product.price,
            "stock": product.stock,
            "category": product.category.name if product.category else None,
            "images": [image.image_url for image in product.images],
        }
