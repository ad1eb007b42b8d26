"""SQLAlchemy-backed booking storage.

``create_if_available`` is the only path that inserts bookings. It re-checks
availability inside the same transaction that performs the insert, holding
the property row lock (``SELECT ... FOR UPDATE`` where the backend supports
it) and a per-property in-process lock, so two overlapping requests cannot
both commit.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staybook.database import utcnow
from staybook.errors import ConflictError, NotFoundError
from staybook.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from staybook.models.property import Property, PropertyBlockedDate
from staybook.repositories.locks import KeyedLocks, property_locks
from staybook.repositories.retry import run_with_retry
from staybook.schemas.booking import BookingDraft

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


def _status_values(statuses: Iterable[BookingStatus] | None) -> list[str] | None:
    if statuses is None:
        return None
    return sorted(BookingStatus(s).value for s in statuses)


def _token_query(guest_id: uuid.UUID, request_token: str):
    return select(Booking).where(Booking.guest_id == guest_id, Booking.request_token == request_token)


def _replay(existing: Booking, draft: BookingDraft) -> tuple[uuid.UUID, bool]:
    """Return the earlier booking for a repeated token, or refuse a token reused for another stay."""
    request = draft.request
    if (existing.property_id, existing.check_in, existing.check_out) != (
        draft.property_id,
        request.check_in,
        request.check_out,
    ):
        raise ConflictError("Request token was already used for a different booking")
    logger.info("Replaying booking %s for request token %s", existing.id, draft.request_token)
    return existing.id, True


class SqlAlchemyBookingRepository:
    """Booking storage over an async session factory. One session per call."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks or property_locks

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _fetch_all(self, query, description: str) -> list[Booking]:
        async def _run() -> list[Booking]:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())

        return await run_with_retry(_run, description=description)

    async def get_by_id(self, booking_id: uuid.UUID) -> Booking | None:
        async def _get() -> Booking | None:
            async with self._session_factory() as session:
                return await session.get(Booking, booking_id)

        return await run_with_retry(_get, description="load booking")

    async def list_by_property(
        self, property_id: uuid.UUID, statuses: Iterable[BookingStatus] | None = None
    ) -> list[Booking]:
        """Bookings of a property in check-in order, optionally filtered by status."""
        query = select(Booking).where(Booking.property_id == property_id)
        values = _status_values(statuses)
        if values is not None:
            query = query.where(Booking.status.in_(values))
        query = query.order_by(Booking.check_in.asc())
        return await self._fetch_all(query, "list property bookings")

    async def list_by_guest(self, guest_id: uuid.UUID) -> list[Booking]:
        return await self.list_ordered_by_creation(guest_id=guest_id)

    async def list_by_host(self, host_id: uuid.UUID) -> list[Booking]:
        return await self.list_ordered_by_creation(host_id=host_id)

    async def list_ordered_by_creation(
        self,
        *,
        guest_id: uuid.UUID | None = None,
        host_id: uuid.UUID | None = None,
        property_id: uuid.UUID | None = None,
        statuses: Iterable[BookingStatus] | None = None,
        newest_first: bool = True,
    ) -> list[Booking]:
        query = select(Booking)
        if guest_id is not None:
            query = query.where(Booking.guest_id == guest_id)
        if host_id is not None:
            query = query.where(Booking.host_id == host_id)
        if property_id is not None:
            query = query.where(Booking.property_id == property_id)
        values = _status_values(statuses)
        if values is not None:
            query = query.where(Booking.status.in_(values))

        if newest_first:
            query = query.order_by(Booking.created_at.desc(), Booking.id.desc())
        else:
            query = query.order_by(Booking.created_at.asc(), Booking.id.asc())
        return await self._fetch_all(query, "list bookings")

    async def list_upcoming_by_guest(self, guest_id: uuid.UUID, today: date) -> list[Booking]:
        """Active bookings that have not started yet, soonest first."""
        query = (
            select(Booking)
            .where(
                Booking.guest_id == guest_id,
                Booking.status.in_(_ACTIVE_VALUES),
                Booking.check_in >= today,
            )
            .order_by(Booking.check_in.asc())
        )
        return await self._fetch_all(query, "list upcoming bookings")

    async def list_past_by_guest(self, guest_id: uuid.UUID, today: date) -> list[Booking]:
        """Bookings whose check-out has passed, most recent first."""
        query = (
            select(Booking)
            .where(Booking.guest_id == guest_id, Booking.check_out < today)
            .order_by(Booking.check_out.desc())
        )
        return await self._fetch_all(query, "list past bookings")

    async def _find_by_token(self, guest_id: uuid.UUID, request_token: str) -> Booking | None:
        async with self._session_factory() as session:
            return await session.scalar(_token_query(guest_id, request_token))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_if_available(
        self,
        draft: BookingDraft,
        *,
        host_id: uuid.UUID,
        status: BookingStatus,
        today: date | None = None,
    ) -> tuple[uuid.UUID, bool]:
        today = today or utcnow().date()

        async def _create() -> tuple[uuid.UUID, bool]:
            async with self._locks.hold(draft.property_id):
                try:
                    async with self._session_factory() as session:
                        async with session.begin():
                            return await self._insert_checked(session, draft, host_id, status, today)
                except IntegrityError:
                    # A concurrent writer in another process committed the same token first.
                    if not draft.request_token:
                        raise
                    existing = await self._find_by_token(draft.guest_id, draft.request_token)
                    if existing is None:
                        raise
                    return _replay(existing, draft)

        return await run_with_retry(_create, description="create booking")

    async def _insert_checked(
        self,
        session: AsyncSession,
        draft: BookingDraft,
        host_id: uuid.UUID,
        status: BookingStatus,
        today: date,
    ) -> tuple[uuid.UUID, bool]:
        request = draft.request

        # Lock the property row so concurrent creators for it queue up here
        locked = await session.scalar(select(Property.id).where(Property.id == draft.property_id).with_for_update())
        if locked is None:
            raise NotFoundError(f"Property '{draft.property_id}' not found")

        # Looked up under the lock so a retry sees a create that committed while it waited
        if draft.request_token:
            existing = await session.scalar(_token_query(draft.guest_id, draft.request_token))
            if existing is not None:
                return _replay(existing, draft)

        blocked = await session.scalar(
            select(PropertyBlockedDate.night)
            .where(
                PropertyBlockedDate.property_id == draft.property_id,
                PropertyBlockedDate.night >= request.check_in,
                PropertyBlockedDate.night < request.check_out,
            )
            .limit(1)
        )
        if blocked is not None:
            raise ConflictError(f"Dates conflict with a blocked date ({blocked.isoformat()})")

        overlapping = await session.scalar(
            select(Booking.id)
            .where(
                Booking.property_id == draft.property_id,
                Booking.status.in_(_ACTIVE_VALUES),
                Booking.check_in < request.check_out,
                Booking.check_out > request.check_in,
            )
            .limit(1)
        )
        if overlapping is not None:
            raise ConflictError("Dates conflict with an existing booking")

        duplicate = await session.scalar(
            select(Booking.id)
            .where(
                Booking.property_id == draft.property_id,
                Booking.guest_id == draft.guest_id,
                Booking.status.in_(_ACTIVE_VALUES),
                Booking.check_out > today,
            )
            .limit(1)
        )
        if duplicate is not None:
            raise ConflictError(f"Guest already has an active booking ({duplicate}) for this property")

        now = utcnow()
        pricing = draft.pricing
        booking = Booking(
            property_id=draft.property_id,
            host_id=host_id,
            guest_id=draft.guest_id,
            check_in=request.check_in,
            check_out=request.check_out,
            adults=request.guests.adults,
            children=request.guests.children,
            infants=request.guests.infants,
            nightly_rate=pricing.nightly_rate,
            nights=pricing.nights,
            subtotal=pricing.subtotal,
            cleaning_fee=pricing.cleaning_fee,
            service_fee=pricing.service_fee,
            taxes=pricing.taxes,
            total=pricing.total,
            status=status.value,
            special_requests=draft.special_requests,
            request_token=draft.request_token,
            created_at=now,
            updated_at=now,
        )
        session.add(booking)
        await session.flush()
        return booking.id, False

    async def update_status(
        self,
        booking_id: uuid.UUID,
        *,
        expected: BookingStatus,
        new: BookingStatus,
        reason: str | None = None,
    ) -> bool:
        now = utcnow()
        values: dict = {"status": new.value, "updated_at": now}
        if new is BookingStatus.CANCELLED:
            values["cancelled_at"] = now
            values["cancellation_reason"] = reason

        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async def _update() -> bool:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                return result.rowcount == 1

        return await run_with_retry(_update, description="update booking status")
