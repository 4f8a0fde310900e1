import os
import sys
import tempfile

import pytest

# Point the app at a throwaway database before anything imports the config.
_TMP_DIR = tempfile.mkdtemp(prefix="vocab-quiz-test-")
os.environ["VOCAB_QUIZ_DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'app.db')}"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from vocab_quiz.database import init_db  # noqa: E402
from vocab_quiz.schemas import AttemptSubmission  # noqa: E402
from vocab_quiz.services.session_engine import SessionEngine  # noqa: E402
from vocab_quiz.services.session_store import SqlSessionStore  # noqa: E402


@pytest.fixture
async def db_engine(tmp_path):
    """Async engine on a fresh SQLite file with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'quiz.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(db_engine):
    return SqlSessionStore(async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False))


@pytest.fixture
def quiz_engine(store):
    return SessionEngine(store)


@pytest.fixture
def make_attempt():
    """Build an AttemptSubmission with sensible defaults."""

    def _make(is_correct=False, pronunciation=50.0, spelling=50.0, **extra):
        return AttemptSubmission(
            transcript=extra.pop("transcript", "answer"),
            pronunciation_score=pronunciation,
            spelling_score=spelling,
            feedback=extra.pop("feedback", "Keep going"),
            is_correct=is_correct,
            **extra,
        )

    return _make


@pytest.fixture
def client():
    """TestClient running the app lifespan against the temporary database."""
    from fastapi.testclient import TestClient

    from main import app

    with TestClient(app) as c:
        yield c
