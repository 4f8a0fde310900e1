"""Read-only views over a user's past quiz sessions."""

from __future__ import annotations

import math

from vocab_quiz.config import settings
from vocab_quiz.errors import InvalidArgumentError
from vocab_quiz.schemas import HistoryEntry, HistoryPage, Pagination, UserStats
from vocab_quiz.services.scoring import average_score
from vocab_quiz.services.session_store import SessionStore


async def get_user_history(
    store: SessionStore,
    user_id: str,
    page: int = 1,
    limit: int = settings.history_default_limit,
) -> HistoryPage:
    """Newest-first page of session summaries for *user_id*.

    Unknown users simply have no sessions.
    """
    if page < 1:
        raise InvalidArgumentError("page must be at least 1")
    if not 1 <= limit <= settings.history_max_limit:
        raise InvalidArgumentError(
            f"limit must be between 1 and {settings.history_max_limit}"
        )

    sessions, total = await store.list_for_user(
        user_id, offset=(page - 1) * limit, limit=limit
    )
    history = [
        HistoryEntry(
            session_id=s.session_id,
            overall_score=s.overall_score or 0,
            total_words=s.total_words,
            completed_at=s.completed_at,
            created_at=s.created_at,
            mode=s.mode.value,
            status=s.state.value,
        )
        for s in sessions
    ]

    return HistoryPage(
        history=history,
        pagination=Pagination(
            page=page, limit=limit, total=total, pages=math.ceil(total / limit)
        ),
    )


async def get_user_stats(store: SessionStore, user_id: str) -> UserStats:
    """Totals across every session of *user_id*."""
    sessions, total = await store.list_for_user(user_id)
    completed = [s for s in sessions if s.completed]

    return UserStats(
        total_quizzes=total,
        completed_quizzes=len(completed),
        total_words=sum(s.total_words for s in sessions),
        total_attempts=sum(len(wr.attempts) for s in sessions for wr in s.word_results),
        correct_words=sum(s.correct_words for s in sessions),
        average_score=average_score(s.overall_score for s in completed),
    )
