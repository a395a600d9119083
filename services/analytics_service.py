from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session
from models.orders import Order
from models.order_items import OrderItem
from models.products import Product
from models.enums import OrderStatus
from core.exceptions import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"


def round_money(value: Decimal) -> float:
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _top_category(totals: dict) -> str:
    if not totals:
        return NOT_AVAILABLE
    return max(totals.items(), key=lambda entry: entry[1])[0]


class AnalyticsService:
    """
    Read-only business reports over successful orders.

    Category breakdowns use the order item snapshots (quantity and
    total_price) and the product's current category. A line item that
    cannot be processed (its product is gone, or loading it fails) is
    skipped, logged and counted in unprocessedItems.
    """

    @staticmethod
    def _successful_orders(db: Session, start: datetime | None = None, end: datetime | None = None) -> list[Order]:
        query = db.query(Order).filter(Order.status == OrderStatus.SUCCESS)
        if start is not None:
            query = query.filter(Order.created_at >= start)
        if end is not None:
            query = query.filter(Order.created_at < end)
        return query.order_by(Order.created_at).all()

    @staticmethod
    def _item_category(db: Session, item: OrderItem) -> str | None:
        product = db.get(Product, item.product_id)
        if product is None:
            raise LookupError(f"Product {item.product_id} no longer exists")
        return product.category.name if product.category else None

    @staticmethod
    def calculate_metrics(db: Session, orders: list[Order]) -> dict:
        total_revenue = Decimal("0")
        category_sales = defaultdict(int)
        category_revenue = defaultdict(Decimal)
        total_items_sold = 0
        unprocessed_items = 0

        for order in orders:
            total_revenue += order.total_amount

            items = db.query(OrderItem).filter(OrderItem.order_id == order.order_id).all()
            for item in items:
                try:
                    category_name = AnalyticsService._item_category(db, item)
                    if category_name is None:
                        continue

                    category_sales[category_name] += item.quantity
                    category_revenue[category_name] += item.total_price
                    total_items_sold += item.quantity

                except Exception as e:
                    unprocessed_items += 1
                    logger.warning(
                        f"Skipping order item in report: {str(e)}",
                        extra={
                            "order_id": order.order_id,
                            "order_item_id": item.id,
                            "product_id": item.product_id,
                            "error_type": type(e).__name__
                        }
                    )

        return {
            "totalRevenue": round_money(total_revenue),
            "totalOrders": len(orders),
            "categorySales": dict(category_sales),
            "categoryRevenue": {name: round_money(value) for name, value in category_revenue.items()},
            "totalItemsSold": total_items_sold,
            "uniqueCategories": len(category_sales),
            "topPerformingCategory": _top_category(category_sales),
            "topRevenueCategory": _top_category(category_revenue),
            "unprocessedItems": unprocessed_items,
        }

    @staticmethod
    def daily(db: Session, day: date) -> dict:
        start = datetime.combine(day, datetime.min.time())
        orders = AnalyticsService._successful_orders(db, start, start + timedelta(days=1))

        metrics = AnalyticsService.calculate_metrics(db, orders)
        metrics.update({"period": "Daily", "date": day.isoformat()})
        return metrics

    @staticmethod
    def monthly(db: Session, month: int, year: int) -> dict:
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        start = datetime(year, month, 1)
        end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
        orders = AnalyticsService._successful_orders(db, start, end)

        metrics = AnalyticsService.calculate_metrics(db, orders)
        metrics.update({"period": "Monthly", "month": month, "year": year})
        return metrics

    @staticmethod
    def yearly(db: Session, year: int) -> dict:
        orders = AnalyticsService._successful_orders(db, datetime(year, 1, 1), datetime(year + 1, 1, 1))

        metrics = AnalyticsService.calculate_metrics(db, orders)
        metrics.update({"period": "Yearly", "year": year})
        return metrics

    @staticmethod
    def overall(db: Session) -> dict:
        orders = AnalyticsService._successful_orders(db)

        metrics = AnalyticsService.calculate_metrics(db, orders)
        total_business = sum((order.total_amount for order in orders), Decimal("0"))
        metrics.update({
            "period": "Overall",
            "totalBusiness": round_money(total_business),
            "averageOrderValue": round_money(total_business / len(orders)) if orders else 0.0,
        })
        return metrics
