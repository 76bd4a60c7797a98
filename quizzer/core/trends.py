"""
Learning trend analysis over recent attempts.

The trend compares only the first and last score of the most recent
window. A dip followed by a recovery inside the window still reads as
"improving".
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .difficulty import ScoreRecord
from .scoring import round_half_up

MIN_ATTEMPTS = 3
WINDOW_SIZE = 5


class Trend(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    IMPROVING = "improving"
    STABLE = "stable"


@dataclass
class TrendAnalysis:
    """Trend label with a recommendation for the learner."""

    trend: Trend
    recommendation: str
    average_score: int | None = None


def analyze_trend(history: Sequence[ScoreRecord], subject: str) -> TrendAnalysis:
    """
    Summarize the direction of recent scores.

    Args:
        history: Attempts in any order; sorted oldest to newest here
        subject: Label used verbatim in the recommendation

    Returns:
        TrendAnalysis
    """
    if len(history) < MIN_ATTEMPTS:
        return TrendAnalysis(
            trend=Trend.INSUFFICIENT_DATA,
            recommendation="Take more quizzes to establish learning patterns",
        )

    ordered = sorted(history, key=lambda record: record.created_at)
    window = [record.score for record in ordered[-WINDOW_SIZE:]]
    average = round_half_up(sum(window) / len(window))

    if window[-1] > window[0]:
        return TrendAnalysis(
            trend=Trend.IMPROVING,
            recommendation=f"Keep up the great progress in {subject}!",
            average_score=average,
        )

    return TrendAnalysis(
        trend=Trend.STABLE,
        recommendation=f"Consider varying your study approach for {subject}.",
        average_score=average,
    )
