"""Host earnings summary over confirmed bookings."""

import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from staybook.config import settings
from staybook.models.booking import BookingStatus
from staybook.repositories.base import BookingRepository
from staybook.schemas.booking import EarningsSummary

CENT = Decimal("0.01")


async def host_earnings(
    bookings: BookingRepository,
    host_id: uuid.UUID,
    *,
    start: date | None = None,
    end: date | None = None,
    host_fee_percent: Decimal | None = None,
) -> EarningsSummary:
    """Sum confirmed bookings whose check-in falls in ``[start, end)``.

    ``host_payout`` is the gross total less the host service fee.
    """
    fee = settings.host_service_fee_percent if host_fee_percent is None else Decimal(host_fee_percent)
    confirmed = await bookings.list_ordered_by_creation(host_id=host_id, statuses=[BookingStatus.CONFIRMED])
    window = [
        b for b in confirmed if (start is None or b.check_in >= start) and (end is None or b.check_in < end)
    ]

    gross = sum((Decimal(b.total) for b in window), Decimal("0"))
    nightly = sum((Decimal(b.nightly_rate) for b in window), Decimal("0"))
    average = nightly / len(window) if window else Decimal("0")

    return EarningsSummary(
        host_id=host_id,
        booking_count=len(window),
        gross_total=gross.quantize(CENT, rounding=ROUND_HALF_UP),
        host_payout=(gross * (1 - fee)).quantize(CENT, rounding=ROUND_HALF_UP),
        average_nightly_rate=average.quantize(CENT, rounding=ROUND_HALF_UP),
    )
