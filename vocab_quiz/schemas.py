"""Request and response bodies of the quiz API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _as_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    """Stored timestamps are naive UTC; tag them so the wire form carries an offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


# ---- Requests ----


class CreateQuizRequest(CamelModel):
    user_id: Optional[str] = Field(None, description="Owner reference supplied by the auth layer")
    words: Optional[List[str]] = Field(None, description="Words extracted from the uploaded image")
    mode: Optional[str] = Field(None, description="'pronounce' (default) or 'spell'")


class AttemptSubmission(CamelModel):
    transcript: str = Field("", description="Recognised or typed answer")
    pronunciation_score: float = Field(..., allow_inf_nan=False)
    spelling_score: float = Field(..., allow_inf_nan=False)
    feedback: str = ""
    is_correct: bool
    word_index: Optional[int] = Field(
        None, ge=0, description="Index of the word being answered; stale values are rejected"
    )


# ---- Responses ----


class QuizCreated(CamelModel):
    session_id: str
    total_words: int
    current_word_index: int
    current_word: str
    mode: str


class QuizProgress(CamelModel):
    session_id: str
    total_words: int
    current_word_index: int
    current_word: Optional[str]
    mode: str
    status: str
    progress: int
    completed_words: int


class AttemptScores(CamelModel):
    pronunciation_score: float
    spelling_score: float


class AttemptResult(CamelModel):
    is_correct: bool
    feedback: str
    scores: AttemptScores
    next_action: str
    next_word: Optional[str] = None
    progress: int
    attempts_left: int


class AttemptView(CamelModel):
    transcript: str
    pronunciation_score: float
    spelling_score: float
    feedback: str
    is_correct: bool


class WordDetail(CamelModel):
    word: str
    final_score: Optional[float] = None
    attempt_count: int
    completed: bool
    best_attempt: Optional[AttemptView] = None


class QuizResults(CamelModel):
    session_id: str
    overall_score: Optional[int] = None
    total_words: int
    completed_words: int
    correct_words: int
    mode: str
    completed_at: Optional[dt.datetime] = None
    word_details: List[WordDetail]

    tag_completed_at_utc = field_validator("completed_at")(_as_utc)


class HistoryEntry(CamelModel):
    session_id: str
    overall_score: int
    total_words: int
    completed_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    mode: str
    status: str

    tag_timestamps_utc = field_validator("completed_at", "created_at")(_as_utc)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class HistoryPage(CamelModel):
    history: List[HistoryEntry]
    pagination: Pagination


class UserStats(CamelModel):
    total_quizzes: int
    completed_quizzes: int
    total_words: int
    total_attempts: int
    correct_words: int
    average_score: int
