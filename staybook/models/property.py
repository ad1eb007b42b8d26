"""Property model: the pricing and availability subset of a rental listing."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, UUIDPrimaryKeyMixin, utcnow


class Property(UUIDPrimaryKeyMixin, Base):
    """A listing owned by a host. Search, photos and descriptions live elsewhere."""

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekend_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    weekly_discount: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), default=None)  # percent
    monthly_discount: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), default=None)  # percent
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    minimum_stay: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    maximum_stay: Mapped[int | None] = mapped_column(Integer, default=None)
    instant_book: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")  # active, paused, pending, rejected
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    custom_prices: Mapped[list["PropertyCustomPrice"]] = relationship(
        back_populates="property", lazy="selectin", cascade="all, delete-orphan"
    )
    blocked_dates: Mapped[list["PropertyBlockedDate"]] = relationship(
        back_populates="property", lazy="selectin", cascade="all, delete-orphan"
    )

    @property
    def custom_pricing(self) -> dict[date, Decimal]:
        """Per-night price overrides keyed by calendar date."""
        return {cp.night: cp.price for cp in self.custom_prices}

    @property
    def blocked_date_set(self) -> frozenset[date]:
        """Nights the host has closed manually."""
        return frozenset(bd.night for bd in self.blocked_dates)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, host_id={self.host_id})>"


class PropertyCustomPrice(Base):
    """A price override for one night. Beats both base and weekend pricing."""

    __tablename__ = "property_custom_prices"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    night: Mapped[date] = mapped_column("date", Date, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    property: Mapped["Property"] = relationship(back_populates="custom_prices")

    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_custom_price_property_date"),)


class PropertyBlockedDate(Base):
    """A night the host has closed for booking."""

    __tablename__ = "property_blocked_dates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    night: Mapped[date] = mapped_column("date", Date, nullable=False)

    property: Mapped["Property"] = relationship(back_populates="blocked_dates")

    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_blocked_date_property_date"),)
