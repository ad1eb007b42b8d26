"""SQLAlchemy models for StayBook.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_schema`` runs. If you add a new model, import it in this file.
"""

from staybook.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from staybook.models.property import Property, PropertyBlockedDate, PropertyCustomPrice

__all__ = [
    "ACTIVE_STATUSES",
    "Booking",
    "BookingStatus",
    "Property",
    "PropertyBlockedDate",
    "PropertyCustomPrice",
]
