"""
Tiered improvement suggestions.

This is the ground truth used whenever generated suggestions are not
available. Exactly two suggestions are always returned.
"""

from __future__ import annotations

from collections.abc import Sequence

SUGGESTION_COUNT = 2
FUNDAMENTALS_BELOW = 60
MASTERY_FROM = 80


def fallback_suggestions(score: float, subject: str, missed_question_ids: Sequence[int] = ()) -> list[str]:
    """
    Build two suggestions for a score tier.

    Args:
        score: Quiz score (0-100)
        subject: Subject label interpolated into both messages
        missed_question_ids: Ids of incorrectly answered questions

    Returns:
        Two suggestion strings
    """
    if score < FUNDAMENTALS_BELOW:
        suggestions = [
            f"Focus on fundamental {subject} concepts. Consider reviewing basic materials "
            f"and practice more frequently.",
            f"Break down complex {subject} topics into smaller, manageable parts. "
            f"Use active recall techniques while studying.",
        ]
    elif score < MASTERY_FROM:
        suggestions = [
            f"Good progress! Work on understanding the nuances of {subject}. "
            f"Practice with more challenging problems.",
            f"Review the {subject} questions you got wrong and understand the reasoning "
            f"behind the correct answers.",
        ]
    else:
        suggestions = [
            f"Excellent work! To maintain this level, try teaching {subject} concepts "
            f"to others or tackle advanced topics.",
            f"Consider exploring real-world applications of {subject} to deepen your "
            f"understanding further.",
        ]

    if missed_question_ids and score < MASTERY_FROM:
        missed = ", ".join(str(qid) for qid in missed_question_ids)
        suggestions[1] = f"{suggestions[1]} Start with question(s) {missed}."

    return suggestions[:SUGGESTION_COUNT]
