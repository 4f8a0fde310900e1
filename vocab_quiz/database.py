"""Async SQLAlchemy engine and session helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from vocab_quiz.config import settings

engine = create_async_engine(settings.database_url, echo=False)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables (idempotent)."""
    async with (bind or engine).begin() as conn:
        from vocab_quiz.models import QuizSessionRecord  # noqa: F401 – import so Base knows about it

        await conn.run_sync(Base.metadata.create_all)
