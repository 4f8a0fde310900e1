"""
Tests for user history and statistics.

Tests cover:
- Pagination window and page count
- Summary fields of history entries
- Argument validation
- Aggregate statistics
"""

import pytest

from vocab_quiz.errors import InvalidArgumentError
from vocab_quiz.services.history import get_user_history, get_user_stats


async def _finish(engine, session_id, make_attempt, total_words, score=80.0):
    for _ in range(total_words):
        await engine.submit_attempt(session_id, make_attempt(True, score, score))


class TestUserHistory:

    async def test_pagination(self, quiz_engine, store):
        created = [await quiz_engine.create_session("user-h", [f"w{i}"]) for i in range(5)]

        page = await get_user_history(store, "user-h", page=2, limit=2)
        assert page.pagination.page == 2
        assert page.pagination.limit == 2
        assert page.pagination.total == 5
        assert page.pagination.pages == 3
        # newest first: sessions 4, 3 | 2, 1 | 0
        assert [h.session_id for h in page.history] == [created[2].session_id, created[1].session_id]

    async def test_last_partial_page(self, quiz_engine, store):
        for i in range(3):
            await quiz_engine.create_session("user-h", [f"w{i}"])

        page = await get_user_history(store, "user-h", page=2, limit=2)
        assert len(page.history) == 1
        assert page.pagination.pages == 2

    async def test_entries_summarise_sessions(self, quiz_engine, store, make_attempt):
        done = await quiz_engine.create_session("user-h", ["cat", "dog"], "spell")
        await _finish(quiz_engine, done.session_id, make_attempt, 2, score=70)
        await quiz_engine.create_session("user-h", ["sun"])

        page = await get_user_history(store, "user-h")
        active, completed = page.history
        assert active.status == "active"
        assert active.overall_score == 0
        assert active.completed_at is None
        assert completed.session_id == done.session_id
        assert completed.status == "completed"
        assert completed.overall_score == 70
        assert completed.total_words == 2
        assert completed.mode == "spell"
        assert completed.completed_at is not None

    async def test_unknown_user_has_empty_history(self, store):
        page = await get_user_history(store, "ghost")
        assert page.history == []
        assert page.pagination.total == 0
        assert page.pagination.pages == 0

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 1000)])
    async def test_invalid_window(self, store, page, limit):
        with pytest.raises(InvalidArgumentError):
            await get_user_history(store, "user-h", page=page, limit=limit)


class TestUserStats:

    async def test_totals(self, quiz_engine, store, make_attempt):
        first = await quiz_engine.create_session("user-s", ["cat", "dog"])
        await _finish(quiz_engine, first.session_id, make_attempt, 2, score=90)

        second = await quiz_engine.create_session("user-s", ["sun"])
        for _ in range(3):
            await quiz_engine.submit_attempt(second.session_id, make_attempt(False, 40, 30))

        await quiz_engine.create_session("user-s", ["sky", "sea", "star"])

        stats = await get_user_stats(store, "user-s")
        assert stats.total_quizzes == 3
        assert stats.completed_quizzes == 2
        assert stats.total_words == 6
        assert stats.total_attempts == 5
        assert stats.correct_words == 2
        assert stats.average_score == 63  # (90 + 35) / 2 = 62.5

    async def test_no_sessions(self, store):
        stats = await get_user_stats(store, "ghost")
        assert stats.total_quizzes == 0
        assert stats.average_score == 0
