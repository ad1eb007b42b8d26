"""Shared test configuration and fixtures.

Each test gets its own file-backed SQLite database under ``tmp_path`` so that
concurrent sessions use real, separate connections.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "staybook-test-secret")

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from staybook.api.deps import get_booking_engine
from staybook.auth.jwt import create_access_token
from staybook.database import create_schema, make_engine, make_session_factory
from staybook.main import app
from staybook.models import Property, PropertyBlockedDate, PropertyCustomPrice
from staybook.schemas.booking import BookingDraft
from staybook.schemas.pricing import BookingRequest, GuestCount
from staybook.services.engine import BookingEngine
from staybook.services.pricing_service import quote

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'staybook_test.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(db_engine)


@pytest.fixture
def booking_engine(session_factory: async_sessionmaker[AsyncSession]) -> BookingEngine:
    return BookingEngine.from_session_factory(session_factory)


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


@pytest.fixture
def host_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def guest_id() -> uuid.UUID:
    return uuid.uuid4()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def create_property(booking_engine: BookingEngine, host_id: uuid.UUID) -> Callable[..., Awaitable[Property]]:
    """Persist a property. Defaults: 100/night, 50 cleaning, 4 guests, request-to-book."""

    async def _create(
        *,
        blocked: tuple[date, ...] | list[date] = (),
        custom: dict[date, str] | None = None,
        **fields,
    ) -> Property:
        values = {
            "host_id": host_id,
            "title": "Seaside Cottage",
            "base_price": Decimal("100"),
            "cleaning_fee": Decimal("50"),
            "max_guests": 4,
            "minimum_stay": 1,
            "instant_book": False,
        }
        values.update(fields)
        prop = Property(**values)
        prop.blocked_dates = [PropertyBlockedDate(night=d) for d in blocked]
        prop.custom_prices = [PropertyCustomPrice(night=d, price=Decimal(p)) for d, p in (custom or {}).items()]
        return await booking_engine.properties.add(prop)

    return _create


@pytest.fixture
def make_draft() -> Callable[..., BookingDraft]:
    """Build a quoted draft for ``prop`` without touching storage."""

    def _make(
        prop: Property,
        guest: uuid.UUID,
        check_in: date,
        check_out: date,
        *,
        adults: int = 2,
        children: int = 0,
        request_token: str | None = None,
        special_requests: str | None = None,
    ) -> BookingDraft:
        request = BookingRequest(
            check_in=check_in,
            check_out=check_out,
            guests=GuestCount(adults=adults, children=children),
        )
        return BookingDraft(
            property_id=prop.id,
            guest_id=guest,
            request=request,
            pricing=quote(prop, check_in, check_out, request.guests),
            special_requests=special_requests,
            request_token=request_token,
        )

    return _make


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(booking_engine: BookingEngine) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the per-test database."""
    app.dependency_overrides[get_booking_engine] = lambda: booking_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


def bearer(user_id: uuid.UUID) -> dict[str, str]:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def guest_headers(guest_id: uuid.UUID) -> dict[str, str]:
    return bearer(guest_id)


@pytest.fixture
def host_headers(host_id: uuid.UUID) -> dict[str, str]:
    return bearer(host_id)


@pytest.fixture
def headers_for() -> Callable[[uuid.UUID], dict[str, str]]:
    """Authorization headers for an arbitrary user id."""
    return bearer
