"""Booking model: a guest's reservation of a property for a date range."""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from staybook.database import Base, UUIDPrimaryKeyMixin, utcnow
from staybook.schemas.pricing import GuestCount, PricingBreakdown


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES: frozenset[BookingStatus] = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Booking(UUIDPrimaryKeyMixin, Base):
    """A reservation linking a guest to a property for ``[check_in, check_out)``.

    The pricing columns are a snapshot of the quote taken at creation time and
    are never recomputed.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    host_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    guest_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    adults: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    infants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Pricing snapshot
    nightly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    taxes: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # pending, confirmed, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_token: Mapped[str | None] = mapped_column(String(64), nullable=True)  # idempotency key, per guest

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_date_order"),
        UniqueConstraint("guest_id", "request_token", name="uq_bookings_guest_request_token"),
        Index("ix_bookings_property_status", "property_id", "status"),
        Index("ix_bookings_created_at", "created_at"),
    )

    @property
    def guests(self) -> GuestCount:
        return GuestCount(adults=self.adults, children=self.children, infants=self.infants)

    @property
    def pricing(self) -> PricingBreakdown:
        """Frozen view of the quote snapshot."""
        return PricingBreakdown(
            nightly_rate=self.nightly_rate,
            nights=self.nights,
            subtotal=self.subtotal,
            cleaning_fee=self.cleaning_fee,
            service_fee=self.service_fee,
            taxes=self.taxes,
            total=self.total,
        )

    @property
    def is_active(self) -> bool:
        return BookingStatus(self.status) in ACTIVE_STATUSES

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Half-open overlap test against ``[check_in, check_out)``."""
        return check_in < self.check_out and check_out > self.check_in

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, status={self.status})>"
        )
