from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreatePaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_amount: Decimal = Field(alias="totalAmount", gt=0, max_digits=10, decimal_places=2)


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="razorpayOrderId")
    payment_id: str = Field(alias="razorpayPaymentId")
    signature: str = Field(alias="razorpaySignature")

    @field_validator('order_id', 'payment_id', 'signature')
    @classmethod
    def not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError('must not be empty')
        return value.strip()
