from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from models.cart_items import CartItem
from models.products import Product
from models.users import User
from core.exceptions import NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400?text=No+Image"


class CartService:

    @staticmethod
    def _get_cart_item(db: Session, user_id: int, product_id: int) -> CartItem | None:
        return db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).one_or_none()

    @staticmethod
    def _increment(db: Session, user_id: int, product_id: int, quantity: int) -> int:
        """
        Adds to an existing line in a single UPDATE so concurrent adds
        never overwrite each other. Returns the number of lines touched.
        """
        return db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).update({CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False)

    @staticmethod
    def add_to_cart(user_id: int, product_id: int, quantity: int, db: Session) -> int:
        """
        Adds a product to the user's cart.

        An existing line for the same product is incremented rather than
        duplicated. Returns the new total item count of the cart.
        """
        if db.get(User, user_id) is None:
            raise NotFoundError(f"User not found with ID: {user_id}")

        if db.get(Product, product_id) is None:
            raise NotFoundError(f"Product not found with ID: {product_id}")

        if not CartService._increment(db, user_id, product_id, quantity):
            db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
            try:
                db.commit()
            except IntegrityError:
                # A concurrent add created the line first
                db.rollback()
                logger.debug(
                    "Cart line created concurrently, merging",
                    extra={"user_id": user_id, "product_id": product_id}
                )
                CartService._increment(db, user_id, product_id, quantity)
                db.commit()
        else:
            db.commit()

        logger.info(
            "Product added to cart",
            extra={"user_id": user_id, "product_id": product_id, "quantity": quantity}
        )

        return CartService.count_items(user_id, db)

    @staticmethod
    def count_items(user_id: int, db: Session) -> int:
        total = db.query(func.coalesce(func.sum(CartItem.quantity), 0)).filter(
            CartItem.user_id == user_id
        ).scalar()
        return int(total)

    @staticmethod
    def update_quantity(user_id: int, product_id: int, quantity: int, db: Session) -> None:
        """
        Overwrites the quantity of a cart line; a quantity of 0 removes it.
        """
        item = CartService._get_cart_item(db, user_id, product_id)

        if item is None:
            raise NotFoundError("Cart item not found for user and product")

        if quantity == 0:
            db.delete(item)
        else:
            item.quantity = quantity

        db.commit()

    @staticmethod
    def delete_item(user_id: int, product_id: int, db: Session) -> bool:
        """
        Removes a cart line. Deleting a line that is not there is a no-op.

        Returns:
            True if a line was removed
        """
        deleted = db.query(CartItem).filter(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        ).delete()
        db.commit()

        return deleted > 0

    @staticmethod
    def get_cart_lines(user_id: int, db: Session) -> list[CartItem]:
        return db.query(CartItem).options(
            joinedload(CartItem.product).selectinload(Product.images)
        ).filter(CartItem.user_id == user_id).order_by(CartItem.id).all()

    @staticmethod
    def get_items(user_id: int, db: Session) -> dict:
        """
        Cart contents priced with the live product price.

        Returns:
            {"products": [...], "overall_total_price": Decimal}
        """
        products = []
        overall_total = Decimal("0")

        for item in CartService.get_cart_lines(user_id, db):
            product = item.product
            image_url = product.images[0].image_url if product.images else PLACEHOLDER_IMAGE_URL
            line_total = product.price * item.quantity

            products.append({
                "product_id": product.id,
                "image_url": image_url,
                "name": product.name,
                "description": product.description,
                "price_per_unit": product.price,
                "quantity": item.quantity,
                "total_price": line_total,
            })
            overall_total += line_total

        return {"products": products, "overall_total_price": overall_total}
