"""Quiz session state machine.

A session walks its word list in order. Each submitted evaluation is
recorded against the current word; the word is done once an attempt is
correct or the attempt budget is spent, after which the session moves to
the next word or, on the last word, completes and computes its overall
score exactly once.

Writes are compare-and-swap on the session version. A stale write re-runs
the whole load/apply/write transition a bounded number of times.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from vocab_quiz.config import settings
from vocab_quiz.domain import Attempt, NextAction, QuizMode, QuizSession, utcnow
from vocab_quiz.errors import ConflictError, InvalidArgumentError
from vocab_quiz.schemas import (
    AttemptResult,
    AttemptScores,
    AttemptSubmission,
    AttemptView,
    QuizCreated,
    QuizProgress,
    QuizResults,
    WordDetail,
)
from vocab_quiz.services.scoring import best_attempt, overall_score, progress_percent
from vocab_quiz.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionEngine:
    def __init__(
        self,
        store: SessionStore,
        *,
        max_attempts: int = settings.max_attempts_per_word,
        max_words: int = settings.max_words_per_session,
        update_retries: int = settings.store_update_retries,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.max_words = max_words
        self.update_retries = update_retries
        self.clock = clock

    # ---- Creation ----

    async def create_session(
        self,
        user_id: Optional[str],
        words: Optional[Iterable[str]],
        mode: Optional[str] = None,
    ) -> QuizCreated:
        """Validate the inputs and persist a new active session."""
        if not user_id or not str(user_id).strip():
            raise InvalidArgumentError("User ID and words array are required")
        cleaned = _clean_words(words)
        if len(cleaned) > self.max_words:
            raise InvalidArgumentError(
                f"Too many words: {len(cleaned)} (maximum {self.max_words})"
            )
        quiz_mode = _parse_mode(mode)

        session = QuizSession.start(str(user_id).strip(), cleaned, quiz_mode)
        await self.store.create(session)
        logger.info(
            "Created quiz session %s for user %s (%d words, mode=%s)",
            session.session_id, session.user_id, session.total_words, quiz_mode.value,
        )

        return QuizCreated(
            session_id=session.session_id,
            total_words=session.total_words,
            current_word_index=0,
            current_word=session.words[0],
            mode=quiz_mode.value,
        )

    # ---- Attempt submission ----

    async def submit_attempt(
        self, session_id: str, submission: AttemptSubmission
    ) -> AttemptResult:
        """Record one evaluation for the current word and move the session on."""
        for attempt_no in range(1, self.update_retries + 1):
            session = await self.store.get(session_id)
            result = self.apply_attempt(session, submission)
            try:
                await self.store.update(session)
            except ConflictError:
                logger.warning(
                    "Stale write on quiz session %s (try %d/%d)",
                    session_id, attempt_no, self.update_retries,
                )
                continue

            if session.completed:
                logger.info(
                    "Quiz session %s completed with overall score %s",
                    session_id, session.overall_score,
                )
            return result

        raise ConflictError(
            "Quiz session is being updated by another request; please retry"
        )

    def apply_attempt(
        self, session: QuizSession, submission: AttemptSubmission
    ) -> AttemptResult:
        """Apply one submission to an in-memory session.

        This is the only transition of a session; the caller persists the
        mutated aggregate.
        """
        if session.completed:
            raise ConflictError("Quiz session is already completed")
        if (
            submission.word_index is not None
            and submission.word_index != session.current_word_index
        ):
            raise ConflictError(
                f"Word {submission.word_index} is no longer current "
                f"(current word is {session.current_word_index})"
            )

        answered_index = session.current_word_index
        slot = session.current_result
        attempt = Attempt(
            transcript=submission.transcript,
            pronunciation_score=submission.pronunciation_score,
            spelling_score=submission.spelling_score,
            feedback=submission.feedback,
            is_correct=submission.is_correct,
        )
        word_done = slot.record_attempt(attempt, self.max_attempts)

        next_action = NextAction.RETRY
        next_word = None
        if word_done:
            if session.is_last_word:
                session.complete(overall_score(session.word_results), self.clock())
                next_action = NextAction.QUIZ_COMPLETED
            else:
                next_word = session.advance()
                next_action = NextAction.NEXT_WORD

        return AttemptResult(
            is_correct=attempt.is_correct,
            feedback=attempt.feedback,
            scores=AttemptScores(
                pronunciation_score=attempt.pronunciation_score,
                spelling_score=attempt.spelling_score,
            ),
            next_action=next_action.value,
            next_word=next_word,
            progress=progress_percent(
                answered_index + (1 if word_done else 0), session.total_words
            ),
            attempts_left=slot.attempts_left(self.max_attempts),
        )

    # ---- Read projections ----

    async def get_progress(self, session_id: str) -> QuizProgress:
        session = await self.store.get(session_id)
        return QuizProgress(
            session_id=session.session_id,
            total_words=session.total_words,
            current_word_index=session.current_word_index,
            current_word=session.current_word,
            mode=session.mode.value,
            status=session.state.value,
            progress=progress_percent(session.current_word_index, session.total_words),
            completed_words=session.completed_words,
        )

    async def get_results(self, session_id: str) -> QuizResults:
        """Per-word breakdown; usable before completion (no overall score yet)."""
        session = await self.store.get(session_id)

        details = []
        for wr in session.word_results:
            best = best_attempt(wr.attempts)
            details.append(
                WordDetail(
                    word=wr.word,
                    final_score=wr.final_score,
                    attempt_count=len(wr.attempts),
                    completed=wr.completed,
                    best_attempt=AttemptView(
                        transcript=best.transcript,
                        pronunciation_score=best.pronunciation_score,
                        spelling_score=best.spelling_score,
                        feedback=best.feedback,
                        is_correct=best.is_correct,
                    ) if best else None,
                )
            )

        return QuizResults(
            session_id=session.session_id,
            overall_score=session.overall_score,
            total_words=session.total_words,
            completed_words=session.completed_words,
            correct_words=session.correct_words,
            mode=session.mode.value,
            completed_at=session.completed_at,
            word_details=details,
        )


def _clean_words(words: Optional[Iterable[str]]) -> list[str]:
    if words is None or isinstance(words, str):
        raise InvalidArgumentError("User ID and words array are required")
    cleaned = []
    for word in words:
        if not isinstance(word, str) or not word.strip():
            raise InvalidArgumentError("Words must be non-empty strings")
        cleaned.append(word.strip())
    if not cleaned:
        raise InvalidArgumentError("User ID and words array are required")
    return cleaned


def _parse_mode(mode: Optional[str]) -> QuizMode:
    if mode is None:
        return QuizMode.PRONOUNCE
    try:
        return QuizMode(mode)
    except ValueError:
        allowed = ", ".join(m.value for m in QuizMode)
        raise InvalidArgumentError(f"Invalid mode '{mode}' (expected one of: {allowed})") from None
