"""Shared API dependencies: single import point for all routers::

    from staybook.api.deps import get_booking_engine, get_current_user_id
"""

from staybook.auth.dependencies import get_current_user_id
from staybook.database import async_session_factory
from staybook.services.engine import BookingEngine


def get_booking_engine() -> BookingEngine:
    """Engine bound to the application's session factory (overridden in tests)."""
    return BookingEngine.from_session_factory(async_session_factory)


__all__ = [
    "get_booking_engine",
    "get_current_user_id",
]
