"""Pydantic v2 schemas for quotes and booking requests."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.schemas.common import CalendarDate


class GuestCount(BaseModel):
    """Party size. Infants do not count toward a property's guest limit."""

    model_config = ConfigDict(frozen=True)

    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)

    @property
    def counted(self) -> int:
        return self.adults + self.children


class BookingRequest(BaseModel):
    """Dates and party size for a stay. Not persisted on its own."""

    check_in: CalendarDate
    check_out: CalendarDate
    guests: GuestCount = Field(default_factory=GuestCount)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingRequest":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class PricingBreakdown(BaseModel):
    """Price quote for a stay. Stored on the booking as an immutable snapshot."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    nightly_rate: Decimal
    nights: int = Field(..., ge=1)
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal


class QuoteRequest(BookingRequest):
    """Body of ``POST /api/v1/quotes``."""

    property_id: uuid.UUID
