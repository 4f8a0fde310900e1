"""Persistence for quiz sessions, keyed by session id."""

from __future__ import annotations

import abc
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vocab_quiz.domain import QuizMode, QuizSession, SessionState, WordResult
from vocab_quiz.errors import ConflictError, NotFoundError, StoreUnavailableError
from vocab_quiz.models import QuizSessionRecord

logger = logging.getLogger(__name__)


class SessionStore(abc.ABC):
    """Keyed store of session aggregates with compare-and-swap updates."""

    @abc.abstractmethod
    async def create(self, session: QuizSession) -> None:
        ...

    @abc.abstractmethod
    async def get(self, session_id: str) -> QuizSession:
        """Return the session or raise :class:`NotFoundError`."""

    @abc.abstractmethod
    async def update(self, session: QuizSession) -> None:
        """Write *session* if the stored version still equals ``session.version``.

        On success ``session.version`` is bumped; on a stale version
        :class:`ConflictError` is raised and nothing is written.
        """

    @abc.abstractmethod
    async def list_for_user(
        self, user_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> tuple[list[QuizSession], int]:
        """Newest-first sessions of *user_id* in the window, plus the total count."""


# ---------------------------------------------------------------------------
# SQLAlchemy adapter
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _store_errors() -> AsyncIterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as e:
        logger.error("Session store unavailable: %s", e)
        raise StoreUnavailableError("Session store is unavailable") from e


class SqlSessionStore(SessionStore):
    """Stores each session as one ``quiz_sessions`` row."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, session: QuizSession) -> None:
        async with _store_errors(), self._session_factory() as db:
            db.add(_to_record(session))
            try:
                await db.commit()
            except IntegrityError as e:
                raise ConflictError(f"Quiz session {session.session_id} already exists") from e

    async def get(self, session_id: str) -> QuizSession:
        async with _store_errors(), self._session_factory() as db:
            result = await db.execute(
                select(QuizSessionRecord).where(QuizSessionRecord.session_id == session_id)
            )
            record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError("Quiz session not found")
        return _from_record(record)

    async def update(self, session: QuizSession) -> None:
        expected = session.version
        async with _store_errors(), self._session_factory() as db:
            result = await db.execute(
                update(QuizSessionRecord)
                .where(QuizSessionRecord.session_id == session.session_id)
                .where(QuizSessionRecord.version == expected)
                .values(
                    status=session.state.value,
                    current_word_index=session.current_word_index,
                    word_results=[wr.to_dict() for wr in session.word_results],
                    overall_score=session.overall_score,
                    completed_at=session.completed_at,
                    version=expected + 1,
                )
            )
            if result.rowcount != 1:
                await db.rollback()
                raise ConflictError("Quiz session was modified by another request")
            await db.commit()
        session.version = expected + 1

    async def list_for_user(
        self, user_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> tuple[list[QuizSession], int]:
        async with _store_errors(), self._session_factory() as db:
            total = await db.scalar(
                select(func.count())
                .select_from(QuizSessionRecord)
                .where(QuizSessionRecord.user_id == user_id)
            )
            query = (
                select(QuizSessionRecord)
                .where(QuizSessionRecord.user_id == user_id)
                .order_by(QuizSessionRecord.created_at.desc(), QuizSessionRecord.id.desc())
                .offset(offset)
            )
            if limit is not None:
                query = query.limit(limit)
            result = await db.execute(query)
            records = result.scalars().all()
        return [_from_record(r) for r in records], total or 0


def _to_record(session: QuizSession) -> QuizSessionRecord:
    return QuizSessionRecord(
        session_id=session.session_id,
        user_id=session.user_id,
        words=list(session.words),
        mode=session.mode.value,
        status=session.state.value,
        current_word_index=session.current_word_index,
        word_results=[wr.to_dict() for wr in session.word_results],
        overall_score=session.overall_score,
        created_at=session.created_at,
        completed_at=session.completed_at,
        version=session.version,
    )


def _from_record(record: QuizSessionRecord) -> QuizSession:
    return QuizSession(
        session_id=record.session_id,
        user_id=record.user_id,
        words=tuple(record.words),
        mode=QuizMode(record.mode),
        word_results=[WordResult.from_dict(d) for d in record.word_results],
        current_word_index=record.current_word_index,
        state=SessionState(record.status),
        overall_score=record.overall_score,
        created_at=record.created_at,
        completed_at=record.completed_at,
        version=record.version,
    )
