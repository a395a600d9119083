from core.database import SessionLocal
from core.config import settings
from core.exceptions import UnauthorizedError
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from schemas.auth_schemas import AuthenticatedUser
from services.payment_gateway import PaymentGateway

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


def get_current_user(request: Request) -> AuthenticatedUser:
    """
    Identity resolved by AuthenticationMiddleware for this request.
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthorizedError("Not authenticated")
    return user

user_dependency = Annotated[AuthenticatedUser, Depends(get_current_user)]


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(
        base_url=settings.PAYMENT_API_URL,
        key_id=settings.PAYMENT_KEY_ID,
        key_secret=settings.PAYMENT_KEY_SECRET,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS
    )

gateway_dependency = Annotated[PaymentGateway, Depends(get_payment_gateway)]
