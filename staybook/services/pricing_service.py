"""Pricing engine: turns a property's pricing rules and a stay into a quote.

Pure and deterministic. Money is handled as exact ``Decimal`` and each output
field is rounded half-up to cents exactly once, from its unrounded value, so
``total`` may differ by a cent from the sum of the rounded components.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from staybook.config import settings
from staybook.errors import ValidationError
from staybook.schemas.pricing import BookingRequest, GuestCount, PricingBreakdown

CENT = Decimal("0.01")
WEEKLY_STAY_NIGHTS = 7
MONTHLY_STAY_NIGHTS = 28


class PricedProperty(Protocol):
    """The attributes ``quote`` reads. ``models.Property`` satisfies it."""

    base_price: Decimal
    weekend_price: Decimal | None
    cleaning_fee: Decimal
    weekly_discount: Decimal | None
    monthly_discount: Decimal | None

    @property
    def custom_pricing(self) -> dict[date, Decimal]: ...


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5  # Saturday, Sunday


def iter_nights(check_in: date, check_out: date):
    """Yield each night in the half-open range ``[check_in, check_out)``."""
    day = check_in
    while day < check_out:
        yield day
        day += timedelta(days=1)


def nightly_price(prop: PricedProperty, night: date, custom_pricing: dict[date, Decimal] | None = None) -> Decimal:
    """Price of one night: custom override, then weekend price, then base price."""
    overrides = prop.custom_pricing if custom_pricing is None else custom_pricing
    if night in overrides:
        return Decimal(overrides[night])
    if prop.weekend_price and _is_weekend(night):
        return Decimal(prop.weekend_price)
    return Decimal(prop.base_price)


def stay_discount_percent(prop: PricedProperty, nights: int) -> Decimal | None:
    """The single length-of-stay discount that applies, monthly winning over weekly."""
    if nights >= MONTHLY_STAY_NIGHTS and prop.monthly_discount:
        return Decimal(prop.monthly_discount)
    if nights >= WEEKLY_STAY_NIGHTS and prop.weekly_discount:
        return Decimal(prop.weekly_discount)
    return None


def quote(
    prop: PricedProperty,
    check_in: date,
    check_out: date,
    guests: GuestCount | None = None,
    *,
    service_fee_percent: Decimal | None = None,
    tax_rate: Decimal | None = None,
) -> PricingBreakdown:
    """Compute the price breakdown for ``[check_in, check_out)``.

    ``guests`` is accepted for API symmetry only; guest limits are checked by
    :func:`validate_request` before quoting.

    Raises:
        ValidationError: If ``check_out`` is not after ``check_in``.
    """
    if check_out <= check_in:
        raise ValidationError("check_out must be after check_in")

    fee_percent = settings.service_fee_percent if service_fee_percent is None else Decimal(service_fee_percent)
    rate = settings.tax_rate if tax_rate is None else Decimal(tax_rate)

    nights = (check_out - check_in).days
    overrides = prop.custom_pricing
    subtotal = sum((nightly_price(prop, night, overrides) for night in iter_nights(check_in, check_out)), Decimal("0"))

    discount = stay_discount_percent(prop, nights)
    if discount is not None:
        subtotal = subtotal * (1 - discount / 100)

    cleaning_fee = Decimal(prop.cleaning_fee or 0)
    service_fee = subtotal * fee_percent
    taxes = (subtotal + cleaning_fee + service_fee) * rate
    total = subtotal + cleaning_fee + service_fee + taxes

    return PricingBreakdown(
        nightly_rate=Decimal(prop.base_price),
        nights=nights,
        subtotal=_money(subtotal),
        cleaning_fee=cleaning_fee,
        service_fee=_money(service_fee),
        taxes=_money(taxes),
        total=_money(total),
    )


def validate_request(prop, request: BookingRequest) -> None:
    """Check a request against the property's stay and guest limits.

    Raises:
        ValidationError: On a bad date range, too many guests, or a stay that
            is shorter than ``minimum_stay`` or longer than ``maximum_stay``.
    """
    if request.check_out <= request.check_in:
        raise ValidationError("check_out must be after check_in")

    guests = request.guests
    if guests.adults < 1:
        raise ValidationError("At least one adult is required")
    if guests.counted > prop.max_guests:
        raise ValidationError(f"Maximum {prop.max_guests} guests allowed")

    nights = request.nights
    if nights < (prop.minimum_stay or 1):
        raise ValidationError(f"Minimum stay is {prop.minimum_stay} nights")
    if prop.maximum_stay and nights > prop.maximum_stay:
        raise ValidationError(f"Maximum stay is {prop.maximum_stay} nights")
