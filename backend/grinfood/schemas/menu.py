"""Menu item schemas."""

from typing import Optional

from pydantic import Field

from grinfood.schemas.base import CamelModel


class MenuItemPayload(CamelModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    image: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: Optional[str] = ""
