"""Property availability API routes."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from staybook.api.deps import get_booking_engine, get_current_user_id
from staybook.schemas.booking import AvailabilityResponse, BookingResponse, UnavailableDatesResponse
from staybook.services.engine import BookingEngine

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get(
    "/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a date range can be reserved",
)
async def check_availability(
    property_id: uuid.UUID,
    check_in: date = Query(..., description="First night (YYYY-MM-DD)"),
    check_out: date = Query(..., description="Departure day, exclusive (YYYY-MM-DD)"),
    engine: BookingEngine = Depends(get_booking_engine),
) -> AvailabilityResponse:
    available = await engine.is_available(property_id, check_in, check_out)
    return AvailabilityResponse(property_id=property_id, check_in=check_in, check_out=check_out, available=available)


@router.get(
    "/{property_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    summary="List blocked or booked nights in a window",
)
async def unavailable_dates(
    property_id: uuid.UUID,
    start: date = Query(...),
    end: date = Query(...),
    engine: BookingEngine = Depends(get_booking_engine),
) -> UnavailableDatesResponse:
    """Nights in ``[start, end)`` the calendar should grey out."""
    dates = await engine.list_unavailable_dates(property_id, start, end)
    return UnavailableDatesResponse(property_id=property_id, dates=dates)


@router.get(
    "/{property_id}/active-booking",
    response_model=BookingResponse | None,
    summary="The current guest's active booking for this property, if any",
)
async def active_booking(
    property_id: uuid.UUID,
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingResponse | None:
    booking = await engine.find_active_booking_for_guest(user_id, property_id)
    if booking is None:
        return None
    return BookingResponse.model_validate(booking)
