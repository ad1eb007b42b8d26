"""Host earnings API route."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from staybook.api.deps import get_booking_engine, get_current_user_id
from staybook.schemas.booking import EarningsSummary
from staybook.services.engine import BookingEngine

router = APIRouter(prefix="/api/v1/earnings", tags=["earnings"])


@router.get("", response_model=EarningsSummary, summary="Earnings from the current host's confirmed bookings")
async def get_earnings(
    start: date | None = Query(None, description="Check-in on or after this date"),
    end: date | None = Query(None, description="Check-in before this date"),
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> EarningsSummary:
    return await engine.host_earnings(user_id, start=start, end=end)
