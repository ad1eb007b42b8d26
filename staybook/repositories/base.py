"""Storage interfaces the engine depends on.

Implementations normalise dates to ``datetime.date`` and statuses to plain
strings before handing records to the engine.
"""

import uuid
from collections.abc import Iterable
from datetime import date
from typing import Protocol

from staybook.models.booking import Booking, BookingStatus
from staybook.models.property import Property
from staybook.schemas.booking import BookingDraft


class PropertyRepository(Protocol):
    async def get_by_id(self, property_id: uuid.UUID) -> Property | None: ...


class BookingRepository(Protocol):
    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None: ...

    async def list_by_property(
        self, property_id: uuid.UUID, statuses: Iterable[BookingStatus] | None = None
    ) -> list[Booking]: ...

    async def list_by_guest(self, guest_id: uuid.UUID) -> list[Booking]: ...

    async def list_by_host(self, host_id: uuid.UUID) -> list[Booking]: ...

    async def list_ordered_by_creation(
        self,
        *,
        guest_id: uuid.UUID | None = None,
        host_id: uuid.UUID | None = None,
        property_id: uuid.UUID | None = None,
        statuses: Iterable[BookingStatus] | None = None,
        newest_first: bool = True,
    ) -> list[Booking]:
        """Bookings matching every given filter, sorted by ``created_at``.

        The ordering is part of the contract: a backend that cannot sort
        server-side must sort the fetched rows itself before returning.
        """
        ...

    async def list_upcoming_by_guest(self, guest_id: uuid.UUID, today: date) -> list[Booking]: ...

    async def list_past_by_guest(self, guest_id: uuid.UUID, today: date) -> list[Booking]: ...

    async def create_if_available(
        self,
        draft: BookingDraft,
        *,
        host_id: uuid.UUID,
        status: BookingStatus,
        today: date | None = None,
    ) -> tuple[uuid.UUID, bool]:
        """Insert the booking only if its nights are still free.

        Returns ``(booking_id, replayed)`` where ``replayed`` is True when an
        earlier booking by the same guest with the same ``request_token`` was
        returned instead.

        Raises:
            NotFoundError: If the property no longer exists.
            ConflictError: If a blocked date or an active booking overlaps,
                the guest already holds an active booking for the property, or the
                guest reused ``request_token`` for a different stay.
        """
        ...

    async def update_status(
        self,
        booking_id: uuid.UUID,
        *,
        expected: BookingStatus,
        new: BookingStatus,
        reason: str | None = None,
    ) -> bool:
        """Compare-and-set the status. Returns False if ``expected`` no longer holds."""
        ...
