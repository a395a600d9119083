from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, user_dependency, gateway_dependency
from schemas.payment_schemas import CreatePaymentRequest, VerifyPaymentRequest
from services.payment_service import PaymentService
from core.exceptions import ValidationError
from middleware.rate_limiter import limiter


router = APIRouter(
    prefix="/api/payment",
    tags=["payment"]
)


# Plain def: the blocking gateway call runs in the threadpool
@router.post("/create", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def create_payment_order(request: Request, body: CreatePaymentRequest, user: user_dependency,
                         db: db_dependency, gateway: gateway_dependency):
    """
    Phase 1 of checkout: returns the gateway order id the client pays against.
    """
    order_id = PaymentService.create_order(user.id, body.total_amount, db, gateway)

    return {"orderId": order_id}


@router.post("/verify", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
def verify_payment(request: Request, body: VerifyPaymentRequest, user: user_dependency,
                   db: db_dependency, gateway: gateway_dependency):
    """
    Phase 2 of checkout: confirms the payment and turns the cart into the
    order's items.
    """
    verified = PaymentService.verify_payment(
        body.order_id, body.payment_id, body.signature, user.id, db, gateway
    )

    if not verified:
        raise ValidationError("Payment verification failed")

    return {"message": "Payment verified successfully"}
