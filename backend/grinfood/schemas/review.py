"""Review schemas."""

from typing import Optional, Union

from pydantic import StrictFloat, StrictInt, field_validator

from grinfood.schemas.base import CamelModel

# Strict: "5" and true are rejected, only JSON numbers pass
Rating = Union[StrictInt, StrictFloat]


class ReviewCreate(CamelModel):
    comment: Optional[str] = ""
    rating_menu: Rating
    rating_staff: Rating
    rating_delivery: Rating

    @field_validator("comment")
    @classmethod
    def default_comment(cls, v: Optional[str]) -> str:
        return v or ""
