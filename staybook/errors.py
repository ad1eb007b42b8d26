"""Error taxonomy raised by the booking engine.

Callers distinguish "these dates are taken" (:class:`ConflictError`) from
"something went wrong, try again" (:class:`PersistenceError` with
``transient=True``). The engine never converts one into the other.
"""


class BookingEngineError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BookingEngineError):
    """Malformed input: bad date range, stay length, or guest count. Never retried."""


class NotFoundError(BookingEngineError):
    """A referenced property or booking does not exist."""


class ConflictError(BookingEngineError):
    """Dates are no longer available, or the status transition is not allowed."""


class AuthorizationError(BookingEngineError):
    """The caller lacks the role required for the requested action."""


class PersistenceError(BookingEngineError):
    """Storage failure. ``transient`` failures are safe to retry later."""

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient
