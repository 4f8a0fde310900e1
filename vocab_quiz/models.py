"""SQLAlchemy ORM models for the vocab quiz service."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vocab_quiz.database import Base


# ---------------------------------------------------------------------------
# Quiz sessions
# ---------------------------------------------------------------------------


class QuizSessionRecord(Base):
    """One row per quiz session.

    Word slots and their attempts are stored as a JSON document so that the
    whole aggregate is written by a single conditional UPDATE on ``version``.
    """

    __tablename__ = "quiz_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    words: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    mode: Mapped[str] = mapped_column(String(10), nullable=False)  # pronounce | spell
    status: Mapped[str] = mapped_column(String(10), nullable=False)  # active | completed
    current_word_index: Mapped[int] = mapped_column(Integer, default=0)
    word_results: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    overall_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_quiz_sessions_user_created", "user_id", "created_at"),)
