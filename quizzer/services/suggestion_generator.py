"""
Improvement suggestions, generated when possible and tiered otherwise.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

from loguru import logger
from pydantic import Field, TypeAdapter
from pydantic import ValidationError as SchemaError

from quizzer.core.advisor import SUGGESTION_COUNT, fallback_suggestions
from quizzer.services.llm_client import LLMClient, LLMError

SYSTEM_PROMPT = (
    "You are an expert educational coach providing personalized learning "
    "recommendations. Always respond with valid JSON array only, no additional text."
)

_SuggestionList = TypeAdapter(
    Annotated[list[Annotated[str, Field(min_length=1)]], Field(min_length=SUGGESTION_COUNT)]
)


def build_prompt(score: float, subject: str, missed_question_ids: Sequence[int]) -> str:
    struggled = (
        f"They struggled with these questions: {', '.join(str(q) for q in missed_question_ids)}"
        if missed_question_ids
        else ""
    )
    return f"""A student scored {score}% on a {subject} quiz.

{struggled}

Provide exactly {SUGGESTION_COUNT} specific, actionable improvement suggestions that are:
1. Personalized based on their score and performance
2. Educational and constructive
3. Specific to {subject} learning
4. Encouraging and motivating

Format as JSON array:
["Suggestion 1", "Suggestion 2"]"""


class SuggestionGenerator:
    """Returns exactly two suggestions for a quiz outcome."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client

    def generate(self, score: float, subject: str, missed_question_ids: Sequence[int] = ()) -> list[str]:
        if self.client is None:
            return fallback_suggestions(score, subject, missed_question_ids)

        try:
            raw = self.client.chat_json(
                SYSTEM_PROMPT,
                build_prompt(score, subject, missed_question_ids),
                temperature=0.7,
                max_tokens=400,
            )
            suggestions = _SuggestionList.validate_python(raw)
        except (LLMError, SchemaError) as e:
            logger.warning(f"Suggestion generation failed, using fallback: {e}")
            return fallback_suggestions(score, subject, missed_question_ids)

        return suggestions[:SUGGESTION_COUNT]
