"""
Question generation with a deterministic offline fallback.

LLM output is validated against a strict schema before anything else
sees it. Any failure (no API key, transport error, malformed JSON, schema
violation, short batch) yields the fallback batch instead.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from quizzer.core.difficulty import Difficulty
from quizzer.schemas import Question
from quizzer.services.llm_client import LLMClient, LLMError

SYSTEM_PROMPT = (
    "You are an expert educational content creator specializing in creating "
    "age-appropriate quiz questions. Always respond with valid JSON only, no additional text."
)


class GeneratedQuestion(BaseModel):
    """Shape required of each question returned by the model."""

    model_config = ConfigDict(extra="ignore")

    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=4, max_length=4)
    correctAnswer: int = Field(..., ge=0, le=3)
    difficulty: Difficulty | None = None
    explanation: str | None = None


def build_prompt(grade: str, subject: str, difficulty: Difficulty, count: int) -> str:
    return f"""Generate {count} {difficulty.level_name} level {subject} questions for grade {grade} students. Each question should have:
1. A clear, age-appropriate question
2. 4 multiple choice options (A, B, C, D)
3. The correct answer (0-3 index)
4. A brief explanation
5. Appropriate difficulty level

Format as JSON array with this structure:
[
  {{
    "id": 1,
    "question": "Question text here",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "difficulty": "{difficulty.value}",
    "explanation": "Explanation of the correct answer"
  }}
]"""


def fallback_questions(grade: str, subject: str, difficulty: Difficulty, count: int) -> list[Question]:
    """Placeholder questions that always pass the Question schema."""
    level = difficulty.level_name
    return [
        Question(
            id=i,
            question=f"{level} {subject} question {i} for grade {grade}",
            options=[
                f"Correct answer for {subject}",
                "Incorrect option A",
                "Incorrect option B",
                "Incorrect option C",
            ],
            correct_answer=0,
            difficulty=difficulty,
            explanation=f"This question tests {level} understanding of {subject} concepts for grade {grade}.",
        )
        for i in range(1, count + 1)
    ]


def normalize_questions(raw: Any, difficulty: Difficulty, count: int) -> list[Question]:
    """
    Validate model output and renumber it 1..count.

    Raises:
        ValueError: If the payload is not a list of at least ``count`` items
        pydantic.ValidationError: If any item violates the schema
    """
    if isinstance(raw, dict) and "questions" in raw:
        raw = raw["questions"]
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
    if len(raw) < count:
        raise ValueError(f"expected {count} questions, got {len(raw)}")

    questions = []
    for index, item in enumerate(raw[:count], start=1):
        parsed = GeneratedQuestion.model_validate(item)
        questions.append(
            Question(
                id=index,
                question=parsed.question,
                options=parsed.options,
                correct_answer=parsed.correctAnswer,
                difficulty=parsed.difficulty or difficulty,
                explanation=parsed.explanation or "No explanation provided",
            )
        )
    return questions


class QuestionGenerator:
    """Produces a batch of questions for a grade, subject and difficulty."""

    def __init__(self, client: LLMClient | None = None):
        self.client = client

    def generate(self, grade: str, subject: str, difficulty: Difficulty, count: int) -> list[Question]:
        if self.client is None:
            logger.debug("Generation API not configured - using fallback questions")
            return fallback_questions(grade, subject, difficulty, count)

        try:
            raw = self.client.chat_json(
                SYSTEM_PROMPT,
                build_prompt(grade, subject, difficulty, count),
                temperature=0.7,
                max_tokens=2000,
            )
            questions = normalize_questions(raw, difficulty, count)
        except (LLMError, SchemaError, ValueError) as e:
            logger.warning(f"Question generation failed, using fallback: {e}")
            return fallback_questions(grade, subject, difficulty, count)

        logger.info(f"Generated {len(questions)} {difficulty.value} {subject} questions for grade {grade}")
        return questions
