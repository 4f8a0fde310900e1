"""Quiz session aggregate: sessions, word slots and attempts.

A session is only ever changed through :meth:`WordResult.record_attempt`,
:meth:`QuizSession.advance` and :meth:`QuizSession.complete`, which the
session engine calls in order for each submission.
"""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from vocab_quiz.errors import InvalidArgumentError
from vocab_quiz.services.scoring import word_final_score


def utcnow() -> dt.datetime:
    """Naive UTC timestamp, the form SQLite hands back."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class QuizMode(str, enum.Enum):
    PRONOUNCE = "pronounce"
    SPELL = "spell"


class SessionState(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class WordSlotState(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class NextAction(str, enum.Enum):
    RETRY = "retry"
    NEXT_WORD = "next_word"
    QUIZ_COMPLETED = "quiz_completed"


# ---------------------------------------------------------------------------
# Attempts & word slots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attempt:
    transcript: str
    pronunciation_score: float
    spelling_score: float
    feedback: str
    is_correct: bool

    @property
    def combined(self) -> float:
        return self.pronunciation_score + self.spelling_score

    @property
    def average(self) -> float:
        return self.combined / 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "pronunciationScore": self.pronunciation_score,
            "spellingScore": self.spelling_score,
            "feedback": self.feedback,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attempt":
        return cls(
            transcript=data.get("transcript", ""),
            pronunciation_score=data["pronunciationScore"],
            spelling_score=data["spellingScore"],
            feedback=data.get("feedback", ""),
            is_correct=bool(data["isCorrect"]),
        )


@dataclass
class WordResult:
    word: str
    attempts: list[Attempt] = field(default_factory=list)
    state: WordSlotState = WordSlotState.PENDING
    final_score: Optional[float] = None

    @property
    def completed(self) -> bool:
        return self.state is WordSlotState.COMPLETED

    @property
    def answered_correctly(self) -> bool:
        return any(a.is_correct for a in self.attempts)

    def attempts_left(self, max_attempts: int) -> int:
        return max(0, max_attempts - len(self.attempts))

    def record_attempt(self, attempt: Attempt, max_attempts: int) -> bool:
        """Append *attempt* and complete the slot when it is correct or the
        attempt budget is spent.

        Returns True when this attempt completed the slot.
        """
        if len(self.attempts) >= max_attempts:
            raise InvalidArgumentError(
                f"No attempts left for '{self.word}' ({max_attempts} allowed)"
            )
        if self.completed:
            raise InvalidArgumentError(f"'{self.word}' is already completed")

        self.attempts.append(attempt)
        if attempt.is_correct or len(self.attempts) == max_attempts:
            self.state = WordSlotState.COMPLETED
            self.final_score = word_final_score(self.attempts)
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "attempts": [a.to_dict() for a in self.attempts],
            "state": self.state.value,
            "finalScore": self.final_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WordResult":
        return cls(
            word=data["word"],
            attempts=[Attempt.from_dict(a) for a in data.get("attempts", [])],
            state=WordSlotState(data.get("state", WordSlotState.PENDING.value)),
            final_score=data.get("finalScore"),
        )


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass
class QuizSession:
    session_id: str
    user_id: str
    words: tuple[str, ...]
    mode: QuizMode
    word_results: list[WordResult]
    current_word_index: int = 0
    state: SessionState = SessionState.ACTIVE
    overall_score: Optional[int] = None
    created_at: dt.datetime = field(default_factory=utcnow)
    completed_at: Optional[dt.datetime] = None
    version: int = 0

    @classmethod
    def start(cls, user_id: str, words: list[str], mode: QuizMode) -> "QuizSession":
        return cls(
            session_id=str(uuid.uuid4()),
            user_id=user_id,
            words=tuple(words),
            mode=mode,
            word_results=[WordResult(word=w) for w in words],
        )

    @property
    def total_words(self) -> int:
        return len(self.words)

    @property
    def completed(self) -> bool:
        return self.state is SessionState.COMPLETED

    @property
    def current_word(self) -> Optional[str]:
        if self.completed:
            return None
        return self.words[self.current_word_index]

    @property
    def current_result(self) -> WordResult:
        return self.word_results[self.current_word_index]

    @property
    def is_last_word(self) -> bool:
        return self.current_word_index >= self.total_words - 1

    @property
    def completed_words(self) -> int:
        return sum(1 for wr in self.word_results if wr.completed)

    @property
    def correct_words(self) -> int:
        return sum(1 for wr in self.word_results if wr.answered_correctly)

    def advance(self) -> str:
        """Move to the next word and return it."""
        if self.completed or self.is_last_word:
            raise RuntimeError("advance() past the last word of an active session")
        self.current_word_index += 1
        return self.words[self.current_word_index]

    def complete(self, overall_score: int, now: dt.datetime) -> None:
        if self.completed:
            raise RuntimeError(f"session {self.session_id} is already completed")
        self.state = SessionState.COMPLETED
        self.overall_score = overall_score
        self.completed_at = now
