"""Bounded retry for storage calls and translation of SQLAlchemy errors."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import exc as sa_exc
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from staybook.config import settings
from staybook.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(error: BaseException) -> bool:
    """True for failures that may succeed on a later attempt (network, locks, pool)."""
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError))


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    description: str,
    attempts: int | None = None,
    min_wait: float | None = None,
    max_wait: float | None = None,
) -> T:
    """Run ``operation`` retrying transient storage failures with exponential backoff.

    Engine errors raised by ``operation`` (conflicts, not-found) pass through
    untouched and are never retried. Storage errors that survive the retry
    budget become :class:`PersistenceError`.
    """
    attempts = attempts or settings.storage_retry_attempts
    min_wait = settings.storage_retry_min_wait if min_wait is None else min_wait
    max_wait = settings.storage_retry_max_wait if max_wait is None else max_wait

    try:
        async for attempt in AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
            retry=retry_if_exception(is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        ):
            with attempt:
                return await operation()
    except sa_exc.SQLAlchemyError as e:
        transient = is_transient(e)
        logger.exception("%s failed (transient=%s)", description, transient)
        raise PersistenceError(f"{description} failed: {e.__class__.__name__}", transient=transient) from e
