"""Score aggregation for quiz sessions.

Every attempt carries two 0-100 scores from the evaluation provider
(pronunciation and spelling). A word's final score is its best attempt
average, so improving on a retry is rewarded and an early poor attempt is
not held against the learner. The session score is the mean of the word
scores, with words that never reached a final score counting as 0.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

if TYPE_CHECKING:
    from vocab_quiz.domain import Attempt, WordResult


def round_half_up(value: float) -> int:
    """Round halves toward +infinity, so 62.5 -> 63 and -2.5 -> -2.

    The built-in ``round`` gives ``round(62.5) == 62``.
    """
    return int((Decimal(repr(value)) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def word_final_score(attempts: Sequence["Attempt"]) -> Optional[float]:
    """Best per-attempt average, or None when nothing has been attempted."""
    if not attempts:
        return None
    return max(a.average for a in attempts)


def overall_score(word_results: Iterable["WordResult"]) -> int:
    """Rounded mean of the word final scores (missing scores count as 0)."""
    scores = [wr.final_score or 0 for wr in word_results]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def best_attempt(attempts: Sequence["Attempt"]) -> Optional["Attempt"]:
    """Attempt with the highest combined score; the earliest one wins ties."""
    best = None
    for attempt in attempts:
        if best is None or attempt.combined > best.combined:
            best = attempt
    return best


def progress_percent(position: int, total_words: int) -> int:
    """Share of the word list behind the learner, as a 0-100 integer."""
    if total_words <= 0:
        return 0
    return round_half_up(100 * position / total_words)


def average_score(scores: Iterable[Optional[float]]) -> int:
    """Rounded mean of the scores that are set; 0 when none are."""
    values = [s for s in scores if s is not None and math.isfinite(s)]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
