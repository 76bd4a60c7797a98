"""
Answer grading.

Answers are matched positionally against the quiz's question sequence.
Only an ``int`` equal to the correct option index counts; ``None``,
booleans, floats and out-of-range values are simply wrong.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


class GradableQuestion(Protocol):
    """Minimal question shape the scorer needs."""

    id: int
    correct_answer: int
    explanation: str | None


@dataclass
class QuestionResult:
    """Outcome for a single question."""

    question_id: int
    correct: bool
    user_answer: Any
    correct_answer_index: int
    explanation: str


@dataclass
class ScoreResult:
    """Aggregate outcome of grading a submission."""

    score: int
    correct: int
    total: int
    analysis: list[QuestionResult] = field(default_factory=list)

    @property
    def missed_question_ids(self) -> list[int]:
        return [result.question_id for result in self.analysis if not result.correct]

    @property
    def is_strong(self) -> bool:
        """More than half of the questions answered correctly."""
        return self.correct > self.total / 2


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def is_correct_answer(answer: Any, correct_index: int) -> bool:
    """Exact match on type and value."""
    return isinstance(answer, int) and not isinstance(answer, bool) and answer == correct_index


def score_answers(questions: Sequence[GradableQuestion], answers: Sequence[Any]) -> ScoreResult:
    """
    Grade answers against a question sequence.

    Args:
        questions: Quiz questions in stored order
        answers: Answer indices, parallel to ``questions``; may be shorter

    Returns:
        ScoreResult with a per-question breakdown. An empty quiz scores 0.
    """
    analysis: list[QuestionResult] = []
    correct = 0

    for position, question in enumerate(questions):
        user_answer = answers[position] if position < len(answers) else None
        hit = is_correct_answer(user_answer, question.correct_answer)
        if hit:
            correct += 1

        analysis.append(
            QuestionResult(
                question_id=question.id,
                correct=hit,
                user_answer=user_answer,
                correct_answer_index=question.correct_answer,
                explanation=question.explanation
                or f"The correct answer is option {question.correct_answer + 1}.",
            )
        )

    total = len(questions)
    score = round_half_up(100 * correct / total) if total else 0

    return ScoreResult(score=score, correct=correct, total=total, analysis=analysis)
