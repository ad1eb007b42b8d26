"""Tests for availability checks, unavailable-date listing and the guest duplicate lookup."""

import uuid
from datetime import date

import pytest
import pytest_asyncio

from staybook.errors import PersistenceError, ValidationError
from staybook.services import availability_service

JUNE_1 = date(2024, 6, 1)
JUNE_5 = date(2024, 6, 5)
TODAY = date(2024, 5, 1)


@pytest_asyncio.fixture
async def booked_property(booking_engine, create_property, make_draft, guest_id):
    """A property with a confirmed booking for [2024-06-01, 2024-06-05)."""
    prop = await create_property(instant_book=True)
    await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)
    return prop


class TestIsAvailable:
    async def test_touching_ranges_do_not_overlap(self, booking_engine, booked_property):
        assert await booking_engine.is_available(booked_property.id, JUNE_5, date(2024, 6, 8)) is True
        assert await booking_engine.is_available(booked_property.id, date(2024, 5, 28), JUNE_1) is True

    async def test_overlapping_range_is_unavailable(self, booking_engine, booked_property):
        assert await booking_engine.is_available(booked_property.id, date(2024, 6, 4), date(2024, 6, 6)) is False

    @pytest.mark.parametrize(
        ("check_in", "check_out", "expected"),
        [
            (date(2024, 5, 30), date(2024, 6, 2), False),  # straddles check-in
            (date(2024, 6, 2), date(2024, 6, 3), False),  # inside
            (date(2024, 5, 25), date(2024, 6, 10), False),  # encloses
            (date(2024, 6, 5), date(2024, 6, 6), True),  # starts on check-out day
        ],
    )
    async def test_half_open_overlap(self, booking_engine, booked_property, check_in, check_out, expected):
        assert await booking_engine.is_available(booked_property.id, check_in, check_out) is expected

    async def test_cancelled_booking_never_blocks(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property()
        booking_id = await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)
        assert await booking_engine.is_available(prop.id, JUNE_1, JUNE_5) is False

        await booking_engine.cancel_booking(booking_id, actor_id=guest_id, reason="Change of plans")
        assert await booking_engine.is_available(prop.id, JUNE_1, JUNE_5) is True

    async def test_pending_booking_blocks(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property(instant_book=False)
        await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)
        assert await booking_engine.is_available(prop.id, date(2024, 6, 3), date(2024, 6, 4)) is False

    async def test_blocked_date_inside_range(self, booking_engine, create_property):
        prop = await create_property(blocked=[date(2024, 6, 3)])
        assert await booking_engine.is_available(prop.id, JUNE_1, JUNE_5) is False

    async def test_blocked_checkout_day_does_not_block(self, booking_engine, create_property):
        prop = await create_property(blocked=[JUNE_5])
        assert await booking_engine.is_available(prop.id, JUNE_1, JUNE_5) is True

    async def test_unknown_property_is_unavailable(self, booking_engine):
        assert await booking_engine.is_available(uuid.uuid4(), JUNE_1, JUNE_5) is False

    async def test_invalid_range_rejected(self, booking_engine, create_property):
        prop = await create_property()
        with pytest.raises(ValidationError):
            await booking_engine.is_available(prop.id, JUNE_5, JUNE_1)

    async def test_storage_failure_is_not_reported_as_unavailable(self):
        class FailingProperties:
            async def get_by_id(self, property_id):
                raise PersistenceError("load property failed: OperationalError", transient=True)

        with pytest.raises(PersistenceError) as exc_info:
            await availability_service.is_available(FailingProperties(), None, uuid.uuid4(), JUNE_1, JUNE_5)
        assert exc_info.value.transient is True


class TestListUnavailableDates:
    async def test_merges_blocked_and_booked_nights(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property(blocked=[date(2024, 6, 10), date(2024, 7, 1)])
        await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, date(2024, 6, 3)), today=TODAY)

        dates = await booking_engine.list_unavailable_dates(prop.id, date(2024, 5, 31), date(2024, 6, 30))

        assert dates == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 10)]

    async def test_unknown_property(self, booking_engine):
        assert await booking_engine.list_unavailable_dates(uuid.uuid4(), JUNE_1, JUNE_5) == []

    @pytest.mark.parametrize(("start", "end"), [(JUNE_5, JUNE_1), (JUNE_1, JUNE_1)])
    async def test_invalid_window_rejected(self, booking_engine, create_property, start, end):
        prop = await create_property()
        with pytest.raises(ValidationError):
            await booking_engine.list_unavailable_dates(prop.id, start, end)


class TestFindActiveBookingForGuest:
    async def test_returns_active_future_booking(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property()
        booking_id = await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)

        found = await booking_engine.find_active_booking_for_guest(guest_id, prop.id, today=TODAY)

        assert found is not None
        assert found.id == booking_id

    async def test_ignores_checked_out_booking(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property()
        await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)

        assert await booking_engine.find_active_booking_for_guest(guest_id, prop.id, today=JUNE_5) is None

    async def test_ignores_cancelled_booking(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property()
        booking_id = await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)
        await booking_engine.cancel_booking(booking_id, actor_id=guest_id)

        assert await booking_engine.find_active_booking_for_guest(guest_id, prop.id, today=TODAY) is None

    async def test_other_guest_not_matched(self, booking_engine, create_property, make_draft, guest_id):
        prop = await create_property()
        await booking_engine.create_booking(make_draft(prop, guest_id, JUNE_1, JUNE_5), today=TODAY)

        assert await booking_engine.find_active_booking_for_guest(uuid.uuid4(), prop.id, today=TODAY) is None
