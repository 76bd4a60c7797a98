"""
Adaptive difficulty selection.

The tier for a new quiz is picked from the learner's own recent scores in
the same subject:

    no subject history  -> medium
    average >= 85       -> hard
    65 <= average < 85  -> medium
    average < 65        -> easy
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Difficulty(str, Enum):
    """Question difficulty tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def level_name(self) -> str:
        """Wording used in prompts and fallback questions."""
        return {
            Difficulty.EASY: "basic",
            Difficulty.MEDIUM: "intermediate",
            Difficulty.HARD: "advanced",
        }[self]


HARD_THRESHOLD = 85
MEDIUM_THRESHOLD = 65


@dataclass(frozen=True)
class ScoreRecord:
    """A scored attempt, detached from the ORM."""

    score: float
    subject: str
    created_at: datetime


def select_difficulty(subject: str, history: Sequence[ScoreRecord]) -> Difficulty:
    """
    Pick the difficulty tier for a new quiz.

    Args:
        subject: Subject of the quiz being created
        history: Recent attempts, newest first; other subjects are ignored

    Returns:
        Difficulty tier
    """
    scores = [record.score for record in history if record.subject == subject]
    if not scores:
        return Difficulty.MEDIUM

    average = sum(scores) / len(scores)
    if average >= HARD_THRESHOLD:
        return Difficulty.HARD
    elif average >= MEDIUM_THRESHOLD:
        return Difficulty.MEDIUM
    else:
        return Difficulty.EASY
