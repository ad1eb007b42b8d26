"""Pydantic v2 request/response schemas for booking operations."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from staybook.schemas.common import CalendarDate
from staybook.schemas.pricing import BookingRequest, GuestCount, PricingBreakdown

# ---------------------------------------------------------------------------
# Engine inputs
# ---------------------------------------------------------------------------


class BookingDraft(BaseModel):
    """Everything ``create_booking`` needs. ``pricing`` comes from ``quote``."""

    property_id: uuid.UUID
    guest_id: uuid.UUID
    request: BookingRequest
    pricing: PricingBreakdown
    special_requests: str | None = None
    request_token: str | None = Field(None, min_length=1, max_length=64)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BookingRequest):
    """Schema for reserving a property as the current user."""

    property_id: uuid.UUID
    special_requests: str | None = None
    request_token: str | None = Field(None, min_length=1, max_length=64)


class BookingCancel(BaseModel):
    """Schema for cancelling a booking."""

    reason: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Booking as returned from the API."""

    id: uuid.UUID
    property_id: uuid.UUID
    host_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    guests: GuestCount
    pricing: PricingBreakdown
    status: str
    payment_status: str
    special_requests: str | None = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    total: int


class BookingCreatedResponse(BaseModel):
    id: uuid.UUID
    status: str


class AvailabilityResponse(BaseModel):
    property_id: uuid.UUID
    check_in: CalendarDate
    check_out: CalendarDate
    available: bool


class UnavailableDatesResponse(BaseModel):
    property_id: uuid.UUID
    dates: list[date]


class EarningsSummary(BaseModel):
    """Host earnings over confirmed bookings in a check-in window."""

    host_id: uuid.UUID
    booking_count: int
    gross_total: Decimal
    host_payout: Decimal
    average_nightly_rate: Decimal
