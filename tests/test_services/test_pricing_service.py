"""Unit tests for the pure pricing engine and request validation."""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from staybook.errors import ValidationError
from staybook.models import Property, PropertyCustomPrice
from staybook.schemas.pricing import BookingRequest, GuestCount
from staybook.services.pricing_service import nightly_price, quote, validate_request

# June 2024: the 1st is a Saturday, the 3rd a Monday.
SAT = date(2024, 6, 1)
SUN = date(2024, 6, 2)
MON = date(2024, 6, 3)

FEES = {"service_fee_percent": Decimal("0.12"), "tax_rate": Decimal("0.08")}


def _property(**fields) -> Property:
    custom = fields.pop("custom", {})
    values = {
        "host_id": uuid.uuid4(),
        "base_price": Decimal("100"),
        "cleaning_fee": Decimal("50"),
        "max_guests": 4,
        "minimum_stay": 1,
    }
    values.update(fields)
    prop = Property(**values)
    prop.custom_prices = [PropertyCustomPrice(night=d, price=Decimal(p)) for d, p in custom.items()]
    return prop


class TestQuoteScenarios:
    def test_two_weeknights_no_discount(self):
        breakdown = quote(_property(), MON, MON + timedelta(days=2), **FEES)

        assert breakdown.nights == 2
        assert breakdown.nightly_rate == Decimal("100")
        assert breakdown.subtotal == Decimal("200.00")
        assert breakdown.cleaning_fee == Decimal("50")
        assert breakdown.service_fee == Decimal("24.00")
        assert breakdown.taxes == Decimal("21.92")
        assert breakdown.total == Decimal("295.92")

    def test_weekly_discount(self):
        prop = _property(weekly_discount=Decimal("10"))
        breakdown = quote(prop, MON, MON + timedelta(days=7), **FEES)

        assert breakdown.subtotal == Decimal("630.00")
        assert breakdown.service_fee == Decimal("75.60")
        # (630 + 50 + 75.60) * 0.08 = 60.448, rounded half-up
        assert breakdown.taxes == Decimal("60.45")
        assert breakdown.total == Decimal("816.05")

    def test_uses_configured_rates_by_default(self):
        breakdown = quote(_property(), MON, MON + timedelta(days=2))
        assert breakdown.total == Decimal("295.92")


class TestNightlyPrecedence:
    def test_weekend_price_only_on_weekend_nights(self):
        prop = _property(weekend_price=Decimal("150"))
        assert quote(prop, SAT, MON, **FEES).subtotal == Decimal("300.00")
        assert quote(prop, MON, MON + timedelta(days=2), **FEES).subtotal == Decimal("200.00")

    def test_friday_is_not_weekend(self):
        prop = _property(weekend_price=Decimal("150"))
        friday = date(2024, 6, 7)
        assert nightly_price(prop, friday) == Decimal("100")

    def test_custom_price_beats_weekend_price(self):
        prop = _property(weekend_price=Decimal("150"), custom={SAT: "120"})
        assert nightly_price(prop, SAT) == Decimal("120")
        assert quote(prop, SAT, MON, **FEES).subtotal == Decimal("270.00")

    def test_custom_price_beats_base_price(self):
        prop = _property(custom={MON: "80.50"})
        assert quote(prop, MON, MON + timedelta(days=1), **FEES).subtotal == Decimal("80.50")

    def test_checkout_night_is_not_charged(self):
        prop = _property(custom={MON + timedelta(days=1): "999"})
        assert quote(prop, MON, MON + timedelta(days=1), **FEES).subtotal == Decimal("100.00")


class TestStayDiscounts:
    @pytest.mark.parametrize(
        ("nights", "expected_subtotal"),
        [
            (28, Decimal("2240.00")),  # monthly 20% only
            (10, Decimal("900.00")),  # weekly 10% only
            (3, Decimal("300.00")),  # neither
        ],
    )
    def test_discounts_are_mutually_exclusive(self, nights, expected_subtotal):
        prop = _property(weekly_discount=Decimal("10"), monthly_discount=Decimal("20"))
        breakdown = quote(prop, MON, MON + timedelta(days=nights), **FEES)
        assert breakdown.subtotal == expected_subtotal

    def test_weekly_applies_at_28_nights_without_monthly(self):
        prop = _property(weekly_discount=Decimal("10"))
        assert quote(prop, MON, MON + timedelta(days=28), **FEES).subtotal == Decimal("2520.00")


class TestRounding:
    def test_each_field_rounded_once_from_exact_value(self):
        prop = _property(base_price=Decimal("10.13"), cleaning_fee=Decimal("0"))
        breakdown = quote(prop, MON, MON + timedelta(days=1), **FEES)

        assert breakdown.subtotal == Decimal("10.13")
        assert breakdown.service_fee == Decimal("1.22")  # 1.2156
        assert breakdown.taxes == Decimal("0.91")  # 0.907648
        assert breakdown.total == Decimal("12.25")  # 12.253248
        components = breakdown.subtotal + breakdown.cleaning_fee + breakdown.service_fee + breakdown.taxes
        assert components - breakdown.total == Decimal("0.01")

    def test_cleaning_fee_passed_through(self):
        prop = _property(cleaning_fee=Decimal("35.555"))
        assert quote(prop, MON, MON + timedelta(days=1), **FEES).cleaning_fee == Decimal("35.555")


class TestQuoteValidation:
    def test_same_day_rejected(self):
        with pytest.raises(ValidationError):
            quote(_property(), MON, MON, **FEES)

    def test_reversed_range_rejected(self):
        with pytest.raises(ValidationError):
            quote(_property(), MON, SAT, **FEES)


class TestValidateRequest:
    def _request(self, nights: int, adults: int = 2, children: int = 0, infants: int = 0) -> BookingRequest:
        return BookingRequest(
            check_in=MON,
            check_out=MON + timedelta(days=nights),
            guests=GuestCount(adults=adults, children=children, infants=infants),
        )

    def test_accepts_request_within_limits(self):
        validate_request(_property(), self._request(2))

    def test_too_many_guests(self):
        with pytest.raises(ValidationError, match="Maximum 4 guests"):
            validate_request(_property(), self._request(2, adults=3, children=2))

    def test_infants_do_not_count(self):
        validate_request(_property(), self._request(2, adults=2, children=2, infants=2))

    def test_minimum_stay(self):
        with pytest.raises(ValidationError, match="Minimum stay"):
            validate_request(_property(minimum_stay=3), self._request(2))

    def test_maximum_stay(self):
        with pytest.raises(ValidationError, match="Maximum stay"):
            validate_request(_property(maximum_stay=5), self._request(6))
