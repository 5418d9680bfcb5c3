"""Shared schema helpers."""

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class CamelModel(BaseModel):
    """Request model whose JSON keys are camelCase (``paymentMethod``, ``startDate``)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )


def parse_instant(value: Any) -> datetime:
    """Parse a client-supplied date into an aware UTC datetime.

    Accepts datetime/date objects, ISO-8601 strings (date-only or date-time,
    with or without offset, ``Z`` suffix allowed) and epoch milliseconds.
    Naive values are taken as UTC, so "2025-01-01" is midnight UTC.
    """
    if isinstance(value, bool):
        raise ValueError("Invalid date")
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Invalid date: {value}")
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Date is required")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date: {value}")
    else:
        raise ValueError("Invalid date")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise ValueError(f"Invalid date: {value}")


def coerce_bool(value: Any) -> bool:
    """Coerce a loosely typed flag to bool. Missing means false."""
    if value is None:
        return False
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Invalid boolean: {value}")
    return bool(value)
