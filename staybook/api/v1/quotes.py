"""Price quote API route. Public: guests quote before signing in."""

from fastapi import APIRouter, Depends

from staybook.api.deps import get_booking_engine
from staybook.schemas.pricing import PricingBreakdown, QuoteRequest
from staybook.services.engine import BookingEngine

router = APIRouter(prefix="/api/v1/quotes", tags=["quotes"])


@router.post(
    "",
    response_model=PricingBreakdown,
    summary="Quote a stay",
)
async def create_quote(
    body: QuoteRequest,
    engine: BookingEngine = Depends(get_booking_engine),
) -> PricingBreakdown:
    """Return the price breakdown for the requested dates and party.

    Rejects stays that break the property's guest or stay-length limits.
    """
    return await engine.quote_for(body.property_id, body)
