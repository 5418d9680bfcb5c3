"""Promotion schemas."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from grinfood.schemas.base import CamelModel, coerce_bool, parse_instant


class PromotionPayload(CamelModel):
    """Create/update payload. The active window is ``[startDate, endDate]``."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    active: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_instant(v)

    @field_validator("active", mode="before")
    @classmethod
    def parse_active(cls, v):
        return coerce_bool(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self
