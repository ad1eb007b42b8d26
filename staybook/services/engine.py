"""BookingEngine: the single entry point UI and API layers talk to."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staybook.database import utcnow
from staybook.errors import AuthorizationError, NotFoundError
from staybook.models.booking import Booking, BookingStatus
from staybook.models.property import Property
from staybook.repositories.base import BookingRepository, PropertyRepository
from staybook.repositories.booking_repository import SqlAlchemyBookingRepository
from staybook.repositories.property_repository import SqlAlchemyPropertyRepository
from staybook.schemas.booking import BookingDraft, EarningsSummary
from staybook.schemas.pricing import BookingRequest, GuestCount, PricingBreakdown
from staybook.services import availability_service, booking_service, earnings_service, pricing_service


class BookingEngine:
    """Quotes, availability and booking lifecycle over pluggable repositories.

    Holds no booking or property state of its own; every call re-reads storage.
    """

    def __init__(self, properties: PropertyRepository, bookings: BookingRepository) -> None:
        self.properties = properties
        self.bookings = bookings

    @classmethod
    def from_session_factory(cls, session_factory: async_sessionmaker[AsyncSession]) -> "BookingEngine":
        return cls(
            SqlAlchemyPropertyRepository(session_factory),
            SqlAlchemyBookingRepository(session_factory),
        )

    # -- pricing -------------------------------------------------------

    def quote(
        self,
        prop: Property,
        check_in: date,
        check_out: date,
        guests: GuestCount | None = None,
    ) -> PricingBreakdown:
        return pricing_service.quote(prop, check_in, check_out, guests)

    async def quote_for(self, property_id: uuid.UUID, request: BookingRequest) -> PricingBreakdown:
        """Load the property, check the request against its limits, and quote it."""
        prop = await self._require_property(property_id)
        pricing_service.validate_request(prop, request)
        return pricing_service.quote(prop, request.check_in, request.check_out, request.guests)

    # -- availability --------------------------------------------------

    async def is_available(self, property_id: uuid.UUID, check_in: date, check_out: date) -> bool:
        return await availability_service.is_available(
            self.properties, self.bookings, property_id, check_in, check_out
        )

    async def list_unavailable_dates(self, property_id: uuid.UUID, start: date, end: date) -> list[date]:
        return await availability_service.list_unavailable_dates(
            self.properties, self.bookings, property_id, start, end
        )

    async def find_active_booking_for_guest(
        self, guest_id: uuid.UUID, property_id: uuid.UUID, *, today: date | None = None
    ) -> Booking | None:
        return await availability_service.find_active_booking_for_guest(
            self.bookings, guest_id, property_id, today=today
        )

    # -- lifecycle -----------------------------------------------------

    async def create_booking(self, draft: BookingDraft, *, today: date | None = None) -> uuid.UUID:
        return await booking_service.create_booking(self.properties, self.bookings, draft, today=today)

    async def reserve(
        self,
        property_id: uuid.UUID,
        guest_id: uuid.UUID,
        request: BookingRequest,
        *,
        special_requests: str | None = None,
        request_token: str | None = None,
    ) -> uuid.UUID:
        """Quote the stay and create the booking in one call."""
        pricing = await self.quote_for(property_id, request)
        draft = BookingDraft(
            property_id=property_id,
            guest_id=guest_id,
            request=request,
            pricing=pricing,
            special_requests=special_requests,
            request_token=request_token,
        )
        return await self.create_booking(draft)

    async def transition_booking(
        self,
        booking_id: uuid.UUID,
        new_status: BookingStatus | str,
        *,
        actor_id: uuid.UUID,
        reason: str | None = None,
    ) -> Booking:
        return await booking_service.transition_booking(
            self.bookings, booking_id, new_status, actor_id=actor_id, reason=reason
        )

    async def accept_booking(self, booking_id: uuid.UUID, *, actor_id: uuid.UUID) -> Booking:
        return await booking_service.accept_booking(self.bookings, booking_id, actor_id=actor_id)

    async def cancel_booking(
        self, booking_id: uuid.UUID, *, actor_id: uuid.UUID, reason: str | None = None
    ) -> Booking:
        return await booking_service.cancel_booking(self.bookings, booking_id, actor_id=actor_id, reason=reason)

    # -- queries -------------------------------------------------------

    async def get_booking(self, booking_id: uuid.UUID, *, actor_id: uuid.UUID) -> Booking:
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking '{booking_id}' not found")
        if actor_id not in (booking.guest_id, booking.host_id):
            raise AuthorizationError("Only the guest or the host can view this booking")
        return booking

    async def list_guest_bookings(self, guest_id: uuid.UUID) -> list[Booking]:
        return await self.bookings.list_by_guest(guest_id)

    async def list_host_bookings(self, host_id: uuid.UUID) -> list[Booking]:
        return await self.bookings.list_by_host(host_id)

    async def list_pending_reservations(self, host_id: uuid.UUID) -> list[Booking]:
        return await self.bookings.list_ordered_by_creation(host_id=host_id, statuses=[BookingStatus.PENDING])

    async def list_upcoming_bookings(self, guest_id: uuid.UUID, *, today: date | None = None) -> list[Booking]:
        return await self.bookings.list_upcoming_by_guest(guest_id, today or utcnow().date())

    async def list_past_bookings(self, guest_id: uuid.UUID, *, today: date | None = None) -> list[Booking]:
        return await self.bookings.list_past_by_guest(guest_id, today or utcnow().date())

    async def host_earnings(
        self,
        host_id: uuid.UUID,
        *,
        start: date | None = None,
        end: date | None = None,
        host_fee_percent: Decimal | None = None,
    ) -> EarningsSummary:
        return await earnings_service.host_earnings(
            self.bookings, host_id, start=start, end=end, host_fee_percent=host_fee_percent
        )

    async def _require_property(self, property_id: uuid.UUID) -> Property:
        prop = await self.properties.get_by_id(property_id)
        if prop is None:
            raise NotFoundError(f"Property '{property_id}' not found")
        return prop
