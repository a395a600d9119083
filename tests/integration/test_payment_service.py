from datetime import datetime, timedelta, timezone
from decimal import Decimal
import pytest
from core.exceptions import NotFoundError, PaymentGatewayError
from models import CartItem, Order, OrderItem, OrderStatus
from services.cart_service import CartService
from services.payment_service import PaymentService
from tests.conftest import make_user


@pytest.fixture
def filled_cart(session, customer, phone, cable):
    CartService.add_to_cart(customer.id, phone.id, 2, session)
    CartService.add_to_cart(customer.id, cable.id, 3, session)


@pytest.fixture
def pending_order(session, customer, gateway) -> Order:
    order_id = PaymentService.create_order(customer.id, Decimal("416.48"), session, gateway)
    return session.get(Order, order_id)


def order_items(session, order_id):
    return session.query(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.id).all()


def cart_lines(session, user):
    return session.query(CartItem).filter(CartItem.user_id == user.id).count()


def test_create_order_records_pending_order(session, customer, gateway, gateway_recorder):
    order_id = PaymentService.create_order(customer.id, Decimal("199.99"), session, gateway)

    order = session.get(Order, order_id)
    assert order_id == "order_test0001"
    assert order.status == OrderStatus.PENDING
    assert order.user_id == customer.id
    assert order.total_amount == Decimal("199.99")

    sent = gateway_recorder.requests[0]
    assert sent["amount"] == 19999
    assert sent["currency"] == "INR"
    assert sent["receipt"].startswith("txn_")


def test_gateway_failure_writes_no_order(session, customer, gateway, gateway_recorder):
    gateway_recorder.fail_with = 503

    with pytest.raises(PaymentGatewayError):
        PaymentService.create_order(customer.id, Decimal("10.00"), session, gateway)

    assert session.query(Order).count() == 0


def test_valid_signature_completes_order(session, customer, gateway, filled_cart, pending_order, phone, cable):
    signature = gateway.compute_signature(pending_order.order_id, "pay_001")

    result = PaymentService.verify_payment(
        pending_order.order_id, "pay_001", signature, customer.id, session, gateway
    )

    assert result is True
    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.SUCCESS

    items = order_items(session, pending_order.order_id)
    assert len(items) == 2
    assert [(item.product_id, item.quantity) for item in items] == [(phone.id, 2), (cable.id, 3)]
    assert items[0].price_per_unit == Decimal("199.99")
    assert items[0].total_price == Decimal("399.98")
    assert items[1].total_price == Decimal("16.50")

    assert cart_lines(session, customer) == 0


def test_order_items_are_snapshots(session, customer, gateway, filled_cart, pending_order, phone):
    signature = gateway.compute_signature(pending_order.order_id, "pay_001")
    PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, customer.id, session, gateway)

    phone.price = Decimal("249.00")
    session.commit()

    assert order_items(session, pending_order.order_id)[0].price_per_unit == Decimal("199.99")


def test_invalid_signature_fails_order_and_keeps_cart(session, customer, gateway, filled_cart, pending_order):
    result = PaymentService.verify_payment(
        pending_order.order_id, "pay_001", "forged-signature", customer.id, session, gateway
    )

    assert result is False
    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.FAILED
    assert order_items(session, pending_order.order_id) == []
    assert cart_lines(session, customer) == 2


def test_repeated_verification_is_idempotent(session, customer, gateway, filled_cart, pending_order, phone):
    signature = gateway.compute_signature(pending_order.order_id, "pay_001")

    assert PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, customer.id, session, gateway)

    # A new cart must not leak into the finished order
    CartService.add_to_cart(customer.id, phone.id, 1, session)

    assert PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, customer.id, session, gateway)
    assert PaymentService.verify_payment(pending_order.order_id, "pay_001", "forged", customer.id, session, gateway)

    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.SUCCESS
    assert len(order_items(session, pending_order.order_id)) == 2
    assert cart_lines(session, customer) == 1


def test_failed_order_is_never_revisited(session, customer, gateway, filled_cart, pending_order):
    PaymentService.verify_payment(pending_order.order_id, "pay_001", "forged", customer.id, session, gateway)

    signature = gateway.compute_signature(pending_order.order_id, "pay_001")
    result = PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, customer.id, session, gateway)

    assert result is False
    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.FAILED
    assert order_items(session, pending_order.order_id) == []
    assert cart_lines(session, customer) == 2


def test_unknown_order(session, customer, gateway):
    with pytest.raises(NotFoundError):
        PaymentService.verify_payment("order_missing", "pay_001", "sig", customer.id, session, gateway)


def test_order_of_another_user(session, customer, gateway, pending_order):
    intruder = make_user(session, "intruder")
    signature = gateway.compute_signature(pending_order.order_id, "pay_001")

    with pytest.raises(NotFoundError):
        PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, intruder.id, session, gateway)

    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.PENDING


def test_completion_error_rolls_back_and_fails_order(session, customer, gateway, filled_cart, pending_order, monkeypatch):
    original = PaymentService._complete_order

    def explode_after_writing(order, user_id, db):
        original(order, user_id, db)
        raise RuntimeError("disk full")

    monkeypatch.setattr(PaymentService, "_complete_order", staticmethod(explode_after_writing))
    signature = gateway.compute_signature(pending_order.order_id, "pay_001")

    result = PaymentService.verify_payment(pending_order.order_id, "pay_001", signature, customer.id, session, gateway)

    assert result is False
    session.refresh(pending_order)
    assert pending_order.status == OrderStatus.FAILED
    # Nothing of the half-finished completion survives
    assert order_items(session, pending_order.order_id) == []
    assert cart_lines(session, customer) == 2


def test_find_stale_pending_orders(session, customer, gateway):
    old_id = PaymentService.create_order(customer.id, Decimal("10.00"), session, gateway)
    PaymentService.create_order(customer.id, Decimal("20.00"), session, gateway)

    old = session.get(Order, old_id)
    old.created_at = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(hours=2)
    session.commit()

    stale = PaymentService.find_stale_pending_orders(timedelta(minutes=30), session)

    assert [order.order_id for order in stale] == [old_id]
