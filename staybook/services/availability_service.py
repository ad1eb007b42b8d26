"""Availability checks against blocked dates and active bookings.

Read-only. These answers are advisory: the authoritative check is repeated
inside ``BookingRepository.create_if_available`` at write time.
"""

import logging
import uuid
from datetime import date

from staybook.database import utcnow
from staybook.errors import ValidationError
from staybook.models.booking import ACTIVE_STATUSES, Booking
from staybook.repositories.base import BookingRepository, PropertyRepository
from staybook.services.pricing_service import iter_nights

logger = logging.getLogger(__name__)


async def is_available(
    properties: PropertyRepository,
    bookings: BookingRepository,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
) -> bool:
    """Return True if every night in ``[check_in, check_out)`` can be reserved.

    A missing property is reported as unavailable. Storage failures propagate
    as ``PersistenceError``.

    Raises:
        ValidationError: If ``check_out`` is not after ``check_in``.
    """
    if check_out <= check_in:
        raise ValidationError("check_out must be after check_in")

    prop = await properties.get_by_id(property_id)
    if prop is None:
        logger.info("Availability check for unknown property %s", property_id)
        return False

    blocked = prop.blocked_date_set
    if any(night in blocked for night in iter_nights(check_in, check_out)):
        return False

    active = await bookings.list_by_property(property_id, ACTIVE_STATUSES)
    return not any(b.overlaps(check_in, check_out) for b in active)


async def list_unavailable_dates(
    properties: PropertyRepository,
    bookings: BookingRepository,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> list[date]:
    """Nights in ``[start, end)`` that are blocked or covered by an active booking.

    Raises:
        ValidationError: If ``end`` is not after ``start``.
    """
    if end <= start:
        raise ValidationError("end must be after start")

    prop = await properties.get_by_id(property_id)
    if prop is None:
        return []

    taken = {night for night in prop.blocked_date_set if start <= night < end}
    for booking in await bookings.list_by_property(property_id, ACTIVE_STATUSES):
        if booking.overlaps(start, end):
            taken.update(iter_nights(max(booking.check_in, start), min(booking.check_out, end)))
    return sorted(taken)


async def find_active_booking_for_guest(
    bookings: BookingRepository,
    guest_id: uuid.UUID,
    property_id: uuid.UUID,
    *,
    today: date | None = None,
) -> Booking | None:
    """The guest's earliest-created active booking on the property that has not checked out."""
    today = today or utcnow().date()
    candidates = await bookings.list_ordered_by_creation(
        guest_id=guest_id,
        property_id=property_id,
        statuses=ACTIVE_STATUSES,
        newest_first=False,
    )
    for booking in candidates:
        if booking.check_out > today:
            return booking
    return None
