import time
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from sqlalchemy.orm import Session
from models.orders import Order
from models.order_items import OrderItem
from models.cart_items import CartItem
from models.enums import OrderStatus
from services.cart_service import CartService
from services.payment_gateway import PaymentGateway
from core.config import settings
from core.exceptions import NotFoundError
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)


class PaymentService:
    """
    Two phase checkout correlated by the gateway's order id.

    Phase 1 (create_order) reserves a remote payment intent and records a
    PENDING order. Phase 2 (verify_payment) checks the gateway signature and
    moves the order to SUCCESS or FAILED exactly once.
    """

    @staticmethod
    def create_order(user_id: int, total_amount: Decimal, db: Session, gateway: PaymentGateway) -> str:
        """
        Creates the remote payment intent, then the local PENDING order.

        The order row is only written after the gateway call succeeded, so a
        gateway failure leaves nothing behind locally.

        Returns:
            The gateway order id the client pays against
        """
        receipt = f"txn_{int(time.time() * 1000)}"

        gateway_order_id = gateway.create_intent(total_amount, settings.PAYMENT_CURRENCY, receipt)

        order = Order(
            order_id=gateway_order_id,
            user_id=user_id,
            total_amount=total_amount,
            status=OrderStatus.PENDING
        )
        db.add(order)
        db.commit()

        logger.info(
            "Order created",
            extra={"order_id": gateway_order_id, "user_id": user_id, "total_amount": str(total_amount)}
        )

        return gateway_order_id

    @staticmethod
    def _lock_order(db: Session, order_id: str) -> Order | None:
        # The row lock serializes concurrent verifications of one order
        return db.query(Order).filter(Order.order_id == order_id).with_for_update().one_or_none()

    @staticmethod
    def verify_payment(order_id: str, payment_id: str, signature: str, user_id: int,
                       db: Session, gateway: PaymentGateway) -> bool:
        """
        Verifies a completed payment and finalizes the order.

        Valid signature: the order becomes SUCCESS, every cart line is copied
        into an OrderItem and the cart is emptied, all in one transaction.
        Invalid signature: the order becomes FAILED and the cart is untouched.
        An order that is already SUCCESS or FAILED is left as is.

        Returns:
            True if the order is (now or already) SUCCESS

        Raises:
            NotFoundError: no order with this id belongs to the user
        """
        order = PaymentService._lock_order(db, order_id)

        if order is None or order.user_id != user_id:
            db.rollback()
            logger.warning(
                "Payment verification for unknown order",
                extra={"order_id": order_id, "user_id": user_id}
            )
            raise NotFoundError("Order not found")

        if order.status.is_terminal:
            succeeded = order.status == OrderStatus.SUCCESS
            db.rollback()
            logger.info(
                "Payment verification for finalized order ignored",
                extra={"order_id": order_id, "succeeded": succeeded}
            )
            return succeeded

        if not gateway.verify_signature(order_id, payment_id, signature):
            order.status = OrderStatus.FAILED
            db.commit()
            logger.warning(
                "Payment signature invalid, order failed",
                extra=sanitize_log_data({
                    "order_id": order_id,
                    "payment_id": payment_id,
                    "signature": signature
                })
            )
            return False

        try:
            item_count = PaymentService._complete_order(order, user_id, db)
            db.commit()

        except Exception as e:
            db.rollback()
            logger.error(
                f"Order completion failed: {str(e)}",
                extra={"order_id": order_id, "user_id": user_id, "error_type": type(e).__name__},
                exc_info=True
            )
            PaymentService._mark_failed(order_id, db)
            return False

        logger.info(
            "Payment verified, order completed",
            extra={"order_id": order_id, "user_id": user_id, "items": item_count}
        )

        return True

    @staticmethod
    def _complete_order(order: Order, user_id: int, db: Session) -> int:
        """
        Marks the order SUCCESS, snapshots the cart into order items and
        clears the cart. Does not commit.
        """
        order.status = OrderStatus.SUCCESS

        lines = CartService.get_cart_lines(user_id, db)
        for line in lines:
            price = line.product.price
            db.add(OrderItem(
                order_id=order.order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_per_unit=price,
                total_price=price * line.quantity
            ))

        db.query(CartItem).filter(CartItem.user_id == user_id).delete()

        return len(lines)

    @staticmethod
    def _mark_failed(order_id: str, db: Session) -> None:
        """
        Compensating write after a failed completion.

        Runs in its own transaction after the rollback, so it is not atomic
        with the failure. If it fails too, the order stays PENDING and is
        picked up by find_stale_pending_orders.
        """
        try:
            order = PaymentService._lock_order(db, order_id)
            if order is not None and order.status == OrderStatus.PENDING:
                order.status = OrderStatus.FAILED
                db.commit()
                logger.info("Order marked failed after completion error", extra={"order_id": order_id})
            else:
                db.rollback()

        except Exception as e:
            db.rollback()
            logger.critical(
                f"Could not mark order failed, order left PENDING: {str(e)}",
                extra={"order_id": order_id, "error_type": type(e).__name__},
                exc_info=True
            )

    @staticmethod
    def find_stale_pending_orders(older_than: timedelta, db: Session) -> list[Order]:
        """
        PENDING orders created before now - older_than, oldest first.

        Input for a reconciliation sweep against the gateway.
        """
        # created_at is stored as naive UTC
        cutoff = datetime.now(timezone.utc).replace(tzinfo=None) - older_than

        return db.query(Order).filter(
            Order.status == OrderStatus.PENDING,
            Order.created_at < cutoff
        ).order_by(Order.created_at).all()
