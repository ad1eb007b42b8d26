"""StayBook: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from staybook.api.v1.bookings import router as bookings_router
from staybook.api.v1.earnings import router as earnings_router
from staybook.api.v1.properties import router as properties_router
from staybook.api.v1.quotes import router as quotes_router
from staybook.config import settings
from staybook.errors import (
    AuthorizationError,
    BookingEngineError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# Configure root logger so all staybook.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    yield
    # Shutdown: dispose engine connections
    from staybook.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Booking engine for short-term rentals: quotes, availability and reservations.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Routers
app.include_router(quotes_router)
app.include_router(properties_router)
app.include_router(bookings_router)
app.include_router(earnings_router)


def error_status(error: BookingEngineError) -> int:
    """HTTP status for an engine error."""
    if isinstance(error, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, PersistenceError) and error.transient:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(BookingEngineError)
async def booking_engine_error_handler(request: Request, exc: BookingEngineError) -> JSONResponse:
    code = error_status(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        detail = "Temporary storage problem, please try again" if code == 503 else "Internal error"
    else:
        detail = exc.message
    return JSONResponse(status_code=code, content={"detail": detail})


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}
