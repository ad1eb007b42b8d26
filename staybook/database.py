"""Async SQLAlchemy engine, session factory, and declarative base."""

import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from staybook.config import settings


def make_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to the configured database)."""
    url = url or settings.async_database_url
    if url.startswith("postgresql"):
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 20)
    return create_async_engine(url, echo=settings.debug, **kwargs)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()

async_session_factory = make_session_factory(engine)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def create_schema(bind: AsyncEngine) -> None:
    """Create all tables known to ``Base.metadata``."""
    import staybook.models  # noqa: F401  (registers mappers)

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(bind: AsyncEngine) -> None:
    import staybook.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
