"""Payment and SMS verification schemas."""

from typing import Optional

from pydantic import Field

from grinfood.schemas.base import CamelModel


class PaymentIntentRequest(CamelModel):
    """Amount in the smallest currency unit (kopiyka, cent)."""

    amount: int = Field(..., gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class SendOtpRequest(CamelModel):
    phone: str = Field(..., min_length=5)


class VerifyOtpRequest(CamelModel):
    phone: str = Field(..., min_length=5)
    code: str = Field(..., min_length=1)
