"""Booking lifecycle: creation and status transitions.

    (create) --instant_book=False--> pending --host_accept--> confirmed
    (create) --instant_book=True---> confirmed
    pending | confirmed --cancel--> cancelled   (terminal)

Bookings are never deleted; cancellation is a status change.
"""

import logging
import uuid
from datetime import date

from staybook.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from staybook.models.booking import Booking, BookingStatus
from staybook.repositories.base import BookingRepository, PropertyRepository
from staybook.schemas.booking import BookingDraft
from staybook.services.pricing_service import validate_request

logger = logging.getLogger(__name__)

HOST_ACCEPT = "host_accept"
CANCEL = "cancel"

# (from, to) -> event name. Anything not listed is rejected, including every
# move out of ``cancelled``.
TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], str] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): HOST_ACCEPT,
    (BookingStatus.PENDING, BookingStatus.CANCELLED): CANCEL,
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): CANCEL,
}


def initial_status(instant_book: bool) -> BookingStatus:
    return BookingStatus.CONFIRMED if instant_book else BookingStatus.PENDING


async def create_booking(
    properties: PropertyRepository,
    bookings: BookingRepository,
    draft: BookingDraft,
    *,
    today: date | None = None,
) -> uuid.UUID:
    """Create a booking from a quoted draft and return its id.

    Availability is re-validated atomically by the repository at write time,
    so a stale ``is_available`` answer cannot produce overlapping bookings.
    Replaying a draft with a known ``request_token`` returns the original id.

    Raises:
        NotFoundError: If the property does not exist.
        ValidationError: If the request breaks the property's stay or guest
            limits, or the pricing does not match the requested nights.
        ConflictError: If the dates are taken or blocked, or the guest already
            holds an active booking for the property.
    """
    prop = await properties.get_by_id(draft.property_id)
    if prop is None:
        raise NotFoundError(f"Property '{draft.property_id}' not found")

    validate_request(prop, draft.request)
    if draft.pricing.nights != draft.request.nights:
        raise ValidationError(
            f"Pricing covers {draft.pricing.nights} nights but the stay is {draft.request.nights} nights"
        )

    status = initial_status(prop.instant_book)
    booking_id, replayed = await bookings.create_if_available(
        draft, host_id=prop.host_id, status=status, today=today
    )
    if not replayed:
        logger.info(
            "Created booking %s on property %s for guest %s (%s, %s to %s)",
            booking_id,
            draft.property_id,
            draft.guest_id,
            status.value,
            draft.request.check_in,
            draft.request.check_out,
        )
    return booking_id


async def transition_booking(
    bookings: BookingRepository,
    booking_id: uuid.UUID,
    new_status: BookingStatus | str,
    *,
    actor_id: uuid.UUID,
    reason: str | None = None,
) -> Booking:
    """Move a booking to ``new_status`` and return the stored result.

    Raises:
        ValidationError: If ``new_status`` is not a known status.
        NotFoundError: If the booking does not exist.
        AuthorizationError: If the actor is not a party to the booking, or a
            guest tries to accept.
        ConflictError: If the transition is not allowed from the current
            status, or another writer changed the status first.
    """
    try:
        target = BookingStatus(new_status)
    except ValueError:
        raise ValidationError(f"Unknown booking status '{new_status}'") from None

    booking = await bookings.get_by_id(booking_id)
    if booking is None:
        raise NotFoundError(f"Booking '{booking_id}' not found")

    if actor_id not in (booking.guest_id, booking.host_id):
        raise AuthorizationError("Only the guest or the host can change this booking")

    current = BookingStatus(booking.status)
    event = TRANSITIONS.get((current, target))
    if event is None:
        raise ConflictError(f"Cannot move booking from {current.value} to {target.value}")
    if event == HOST_ACCEPT and actor_id != booking.host_id:
        raise AuthorizationError("Only the host can accept a reservation request")

    if not await bookings.update_status(booking_id, expected=current, new=target, reason=reason):
        raise ConflictError("Booking status changed concurrently; reload and try again")

    logger.info("Booking %s: %s -> %s by %s", booking_id, current.value, target.value, actor_id)
    updated = await bookings.get_by_id(booking_id)
    if updated is None:
        raise NotFoundError(f"Booking '{booking_id}' not found")
    return updated


async def accept_booking(bookings: BookingRepository, booking_id: uuid.UUID, *, actor_id: uuid.UUID) -> Booking:
    return await transition_booking(bookings, booking_id, BookingStatus.CONFIRMED, actor_id=actor_id)


async def cancel_booking(
    bookings: BookingRepository,
    booking_id: uuid.UUID,
    *,
    actor_id: uuid.UUID,
    reason: str | None = None,
) -> Booking:
    return await transition_booking(bookings, booking_id, BookingStatus.CANCELLED, actor_id=actor_id, reason=reason)
