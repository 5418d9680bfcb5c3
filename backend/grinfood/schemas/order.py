"""Order schemas."""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import Field, field_validator

from grinfood.schemas.base import CamelModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class OrderItem(CamelModel):
    """One line of an order."""

    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    price: float = Field(..., ge=0)


class OrderCreate(CamelModel):
    """Order creation payload. Every field is required."""

    items: List[OrderItem] = Field(..., min_length=1)
    total: float = Field(..., gt=0)
    customer: Union[str, Dict[str, Any]]
    address: Union[str, Dict[str, Any]]
    payment_method: str = Field(..., min_length=1)

    @field_validator("customer", "address")
    @classmethod
    def not_empty(cls, v):
        if isinstance(v, str):
            v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class OrderStatusUpdate(CamelModel):
    # Deliberately a plain string: the target is checked by the state machine
    status: Optional[str] = None
