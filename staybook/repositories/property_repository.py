"""SQLAlchemy-backed property storage."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staybook.models.property import Property
from staybook.repositories.retry import run_with_retry


class SqlAlchemyPropertyRepository:
    """Reads properties together with their custom prices and blocked dates."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, property_id: uuid.UUID) -> Property | None:
        async def _get() -> Property | None:
            async with self._session_factory() as session:
                result = await session.execute(select(Property).where(Property.id == property_id))
                return result.scalar_one_or_none()

        return await run_with_retry(_get, description="load property")

    async def add(self, prop: Property) -> Property:
        """Persist a new property (listing creation lives outside the engine)."""

        async def _add() -> Property:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(prop)
                await session.refresh(prop, attribute_names=["custom_prices", "blocked_dates"])
                return prop

        return await run_with_retry(_add, description="create property")
