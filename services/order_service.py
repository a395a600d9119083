from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session
from models.orders import Order
from models.order_items import OrderItem
from models.products import Product
from models.enums import OrderStatus
from utils.logger import get_logger

logger = get_logger(__name__)


class OrderService:

    @staticmethod
    def _successful_items(db: Session, user_id: int) -> list[OrderItem]:
        return db.query(OrderItem).join(Order).filter(
            Order.user_id == user_id,
            Order.status == OrderStatus.SUCCESS
        ).order_by(Order.created_at.desc(), OrderItem.id).all()

    @staticmethod
    def get_order_history(db: Session, user_id: int) -> list[dict]:
        """
        Purchased lines of the user's successful orders, newest first.

        Prices come from the order snapshot; name, description and image
        from the live product. Lines whose product was deleted since are
        skipped.
        """
        products = []

        for item in OrderService._successful_items(db, user_id):
            product = db.get(Product, item.product_id)
            if product is None:
                logger.debug(
                    "Order line refers to a deleted product",
                    extra={"order_id": item.order_id, "product_id": item.product_id}
                )
                continue

            products.append({
                "order_id": item.order_id,
                "product_id": product.id,
                "name": product.name,
                "description": product.description,
                "image_url": product.images[0].image_url if product.images else None,
                "quantity": item.quantity,
                "price_per_unit": item.price_per_unit,
                "total_price": item.total_price,
            })

        return products

    @staticmethod
    def get_order_stats(db: Session, user_id: int) -> dict:
        order_count, total_spent = db.query(
            func.count(Order.order_id),
            func.coalesce(func.sum(Order.total_amount), 0)
        ).filter(
            Order.user_id == user_id,
            Order.status == OrderStatus.SUCCESS
        ).one()

        return {
            "orderCount": order_count,
            "totalSpending": round(Decimal(total_spent), 2),
        }
