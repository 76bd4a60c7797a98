"""
Hint generation with a deterministic offline fallback.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from quizzer.services.llm_client import LLMClient, LLMError

SYSTEM_PROMPT = (
    "You are an expert tutor providing helpful hints for quiz questions. "
    "Always respond with valid JSON only, no additional text."
)

FALLBACK_HINTS = (
    "Think about the key concepts in {excerpt}...",
    "Consider reviewing the fundamental principles related to this topic.",
    "Look for keywords in the question that might guide you to the answer.",
    "Break down the question into smaller parts and analyze each component.",
)


@dataclass
class Hint:
    hint: str
    confidence: float
    is_specific: bool


class GeneratedHint(BaseModel):
    """Shape required of the model's hint reply."""

    model_config = ConfigDict(extra="ignore")

    hint: str = Field(..., min_length=1)
    confidence: float = Field(0.8, ge=0, le=1)
    isSpecific: bool = False


def fallback_hint(question_text: str, user_answer: str | None = None) -> Hint:
    """Pick a template hint keyed on a stable digest of the question."""
    digest = hashlib.sha256(question_text.encode("utf-8")).digest()
    template = FALLBACK_HINTS[digest[0] % len(FALLBACK_HINTS)]
    return Hint(
        hint=template.format(excerpt=question_text[:20]),
        confidence=round(0.7 + (digest[1] / 255) * 0.3, 2),
        is_specific=user_answer is not None,
    )


def build_prompt(question_text: str, user_answer: str | None) -> str:
    answer_line = f'The student\'s current answer is: "{user_answer}"' if user_answer is not None else ""
    return f"""Provide a helpful hint for this quiz question: "{question_text}"

{answer_line}

Generate a hint that:
1. Guides the student toward the correct answer without giving it away
2. Is educational and helps them learn
3. Is appropriate for the question difficulty
4. Is encouraging and supportive

Respond with a JSON object:
{{
  "hint": "Your helpful hint here",
  "confidence": 0.85,
  "isSpecific": true
}}"""


class HintGenerator:
    """Produces a hint for a question, optionally tailored to the current answer."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client

    def generate(self, question_text: str, user_answer: str | None = None) -> Hint:
        if self.client is None:
            return fallback_hint(question_text, user_answer)

        try:
            raw = self.client.chat_json(
                SYSTEM_PROMPT,
                build_prompt(question_text, user_answer),
                temperature=0.6,
                max_tokens=300,
            )
            parsed = GeneratedHint.model_validate(raw)
        except (LLMError, SchemaError) as e:
            logger.warning(f"Hint generation failed, using fallback: {e}")
            return fallback_hint(question_text, user_answer)

        return Hint(hint=parsed.hint, confidence=parsed.confidence, is_specific=parsed.isSpecific)
