"""
Tests for the SQLAlchemy session store.

Tests cover:
- Create / get round trip
- Compare-and-swap updates on the version counter
- Newest-first listing per user
- Translation of driver failures
"""

import datetime as dt

import pytest
from sqlalchemy.exc import OperationalError

from vocab_quiz.domain import Attempt, QuizMode, QuizSession, SessionState
from vocab_quiz.errors import ConflictError, NotFoundError, StoreUnavailableError


def _session(user_id="user-1", words=("cat", "dog"), created_at=None):
    session = QuizSession.start(user_id, list(words), QuizMode.PRONOUNCE)
    if created_at is not None:
        session.created_at = created_at
    return session


class TestCreateAndGet:

    async def test_round_trip(self, store):
        session = _session()
        await store.create(session)

        loaded = await store.get(session.session_id)
        assert loaded == session

    async def test_missing_session(self, store):
        with pytest.raises(NotFoundError):
            await store.get("does-not-exist")

    async def test_duplicate_id_is_a_conflict(self, store):
        session = _session()
        await store.create(session)
        with pytest.raises(ConflictError):
            await store.create(session)


class TestConditionalUpdate:

    async def test_update_bumps_version(self, store):
        session = _session()
        await store.create(session)

        session.current_result.record_attempt(
            Attempt("cat", 90, 80, "Nice", True), max_attempts=3
        )
        session.advance()
        await store.update(session)
        assert session.version == 1

        loaded = await store.get(session.session_id)
        assert loaded.version == 1
        assert loaded.current_word_index == 1
        assert loaded.word_results[0].final_score == 85
        assert loaded.word_results[0].attempts[0].feedback == "Nice"

    async def test_stale_version_rejected(self, store):
        session = _session()
        await store.create(session)

        first = await store.get(session.session_id)
        second = await store.get(session.session_id)

        first.advance()
        await store.update(first)

        second.complete(50, dt.datetime(2026, 1, 1))
        with pytest.raises(ConflictError):
            await store.update(second)
        assert second.version == 0

        loaded = await store.get(session.session_id)
        assert loaded.state is SessionState.ACTIVE
        assert loaded.overall_score is None
        assert loaded.current_word_index == 1

    async def test_update_of_unknown_session_is_a_conflict(self, store):
        with pytest.raises(ConflictError):
            await store.update(_session())


class TestListForUser:

    async def test_newest_first_with_total(self, store):
        base = dt.datetime(2026, 3, 1, 12, 0, 0)
        sessions = [_session(created_at=base + dt.timedelta(minutes=i)) for i in range(5)]
        for s in sessions:
            await store.create(s)
        await store.create(_session(user_id="someone-else"))

        page, total = await store.list_for_user("user-1", offset=1, limit=2)
        assert total == 5
        assert [s.session_id for s in page] == [sessions[3].session_id, sessions[2].session_id]

    async def test_same_timestamp_falls_back_to_insertion_order(self, store):
        stamp = dt.datetime(2026, 3, 1, 12, 0, 0)
        older, newer = _session(created_at=stamp), _session(created_at=stamp)
        await store.create(older)
        await store.create(newer)

        page, _ = await store.list_for_user("user-1")
        assert [s.session_id for s in page] == [newer.session_id, older.session_id]

    async def test_unknown_user(self, store):
        page, total = await store.list_for_user("nobody")
        assert page == []
        assert total == 0


class TestUnavailable:

    async def test_driver_errors_are_translated(self, store):
        class BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

            async def __aexit__(self, *exc):
                return False

        store._session_factory = lambda: BrokenSession()
        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.get("anything")
        assert isinstance(exc_info.value.__cause__, OperationalError)
