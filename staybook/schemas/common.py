"""Shared schema types."""

from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator


def coerce_calendar_date(value: Any) -> Any:
    """Normalise the date shapes callers send into a plain ``date``.

    Accepts ``date``, ``datetime``, ISO date or datetime strings, epoch seconds
    and serialized timestamps of the form ``{"seconds": n}``. Anything else is
    handed to pydantic unchanged so it can report a proper error.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, Mapping) and "seconds" in value:
        value = value["seconds"]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc).date()
    if isinstance(value, str) and len(value) > 10:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


CalendarDate = Annotated[date, BeforeValidator(coerce_calendar_date)]
