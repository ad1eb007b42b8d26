"""Bookings API router.

Access rule: a user can only see or change bookings where they are the guest
or the host. Engine errors are mapped to HTTP statuses in ``staybook.main``.
"""

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from staybook.api.deps import get_booking_engine, get_current_user_id
from staybook.models.booking import Booking
from staybook.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingCreatedResponse,
    BookingListResponse,
    BookingResponse,
)
from staybook.schemas.pricing import BookingRequest
from staybook.services.engine import BookingEngine

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


def _list_response(items: list[Booking]) -> BookingListResponse:
    return BookingListResponse(items=[BookingResponse.model_validate(b) for b in items], total=len(items))


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve a property as the current user",
)
async def create_booking(
    body: BookingCreate,
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingCreatedResponse:
    """Quote the stay and create the booking.

    Instant-book properties confirm immediately; others start as pending.
    Resending the same ``request_token`` returns the original booking.
    """
    request = BookingRequest(check_in=body.check_in, check_out=body.check_out, guests=body.guests)
    booking_id = await engine.reserve(
        body.property_id,
        user_id,
        request,
        special_requests=body.special_requests,
        request_token=body.request_token,
    )
    booking = await engine.get_booking(booking_id, actor_id=user_id)
    return BookingCreatedResponse(id=booking.id, status=booking.status)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings, newest first",
)
async def list_bookings(
    role: Literal["guest", "host"] = Query("guest", description="List trips (guest) or reservations (host)"),
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingListResponse:
    if role == "host":
        items = await engine.list_host_bookings(user_id)
    else:
        items = await engine.list_guest_bookings(user_id)
    return _list_response(items)


@router.get("/pending", response_model=BookingListResponse, summary="Reservation requests awaiting the host")
async def list_pending(
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingListResponse:
    return _list_response(await engine.list_pending_reservations(user_id))


@router.get("/upcoming", response_model=BookingListResponse, summary="The current guest's upcoming trips")
async def list_upcoming(
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingListResponse:
    return _list_response(await engine.list_upcoming_bookings(user_id))


@router.get("/past", response_model=BookingListResponse, summary="The current guest's past trips")
async def list_past(
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingListResponse:
    return _list_response(await engine.list_past_bookings(user_id))


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get a booking")
async def get_booking(
    booking_id: uuid.UUID,
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingResponse:
    return BookingResponse.model_validate(await engine.get_booking(booking_id, actor_id=user_id))


@router.post("/{booking_id}/accept", response_model=BookingResponse, summary="Host accepts a request")
async def accept_booking(
    booking_id: uuid.UUID,
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingResponse:
    return BookingResponse.model_validate(await engine.accept_booking(booking_id, actor_id=user_id))


@router.post("/{booking_id}/cancel", response_model=BookingResponse, summary="Guest or host cancels")
async def cancel_booking(
    booking_id: uuid.UUID,
    body: BookingCancel | None = None,
    engine: BookingEngine = Depends(get_booking_engine),
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> BookingResponse:
    """Cancel a pending or confirmed booking. Refunds are settled by the payments service."""
    reason = body.reason if body else None
    booking = await engine.cancel_booking(booking_id, actor_id=user_id, reason=reason)
    return BookingResponse.model_validate(booking)
