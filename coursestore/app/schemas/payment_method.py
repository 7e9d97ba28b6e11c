"""
Payment method schemas.
"""

from pydantic import BaseModel, Field


class PaymentMethodResponse(BaseModel):
    id: int
    payment_method_name: str
    payment_method_logo: str
    is_active: bool

    class Config:
        from_attributes = True


class PaymentMethodWrite(BaseModel):
    """Create or fully replace a payment method. Inactive methods are hidden from checkout."""
    payment_method_name: str = Field(..., min_length=1, max_length=100)
    payment_method_logo: str = Field("", max_length=255)
    is_active: bool = True
