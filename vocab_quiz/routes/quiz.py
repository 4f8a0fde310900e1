"""Quiz session API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vocab_quiz.config import settings
from vocab_quiz.database import async_session
from vocab_quiz.schemas import AttemptSubmission, CreateQuizRequest
from vocab_quiz.services.history import get_user_history, get_user_stats
from vocab_quiz.services.session_engine import SessionEngine
from vocab_quiz.services.session_store import SessionStore, SqlSessionStore

router = APIRouter()


def get_session_store() -> SessionStore:
    """FastAPI dependency returning the session store."""
    return SqlSessionStore(async_session)


def get_session_engine(store: SessionStore = Depends(get_session_store)) -> SessionEngine:
    return SessionEngine(store)


# ---- History & stats ----


@router.get("/quiz/user/{user_id}/history")
async def user_history(
    user_id: str,
    page: int = 1,
    limit: int = settings.history_default_limit,
    store: SessionStore = Depends(get_session_store),
):
    """Paginated newest-first list of the user's quiz sessions."""
    result = await get_user_history(store, user_id, page=page, limit=limit)
    return JSONResponse({"success": True, **result.to_json()})


@router.get("/quiz/user/{user_id}/stats")
async def user_stats(user_id: str, store: SessionStore = Depends(get_session_store)):
    """Totals across all of the user's quiz sessions."""
    stats = await get_user_stats(store, user_id)
    return JSONResponse({"success": True, "stats": stats.to_json()})


# ---- Sessions ----


@router.post("/quiz/create")
async def create_quiz(
    body: CreateQuizRequest,
    engine: SessionEngine = Depends(get_session_engine),
):
    """Start a quiz over the given words. Body: {userId, words[], mode?}."""
    quiz = await engine.create_session(body.user_id, body.words, body.mode)
    return JSONResponse({"success": True, "quiz": quiz.to_json()})


@router.get("/quiz/{session_id}")
async def get_quiz(session_id: str, engine: SessionEngine = Depends(get_session_engine)):
    """Current word and progress of a session."""
    progress = await engine.get_progress(session_id)
    return JSONResponse({"success": True, "quiz": progress.to_json()})


@router.post("/quiz/{session_id}/attempt")
async def submit_attempt(
    session_id: str,
    body: AttemptSubmission,
    engine: SessionEngine = Depends(get_session_engine),
):
    """Record an evaluated answer for the current word.

    Body: {transcript, pronunciationScore, spellingScore, feedback, isCorrect, wordIndex?}.
    """
    result = await engine.submit_attempt(session_id, body)
    return JSONResponse({"success": True, "result": result.to_json()})


@router.get("/quiz/{session_id}/results")
async def get_results(session_id: str, engine: SessionEngine = Depends(get_session_engine)):
    """Overall score and per-word breakdown."""
    results = await engine.get_results(session_id)
    return JSONResponse({"success": True, "results": results.to_json()})
