"""
Pydantic schemas for the quiz API.

Python code uses snake_case; the wire format is camelCase through an
alias generator. Request models validate input before it reaches the
service layer; response models are what the service layer returns.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from quizzer.core.difficulty import Difficulty
from quizzer.core.trends import TrendAnalysis

if TYPE_CHECKING:
    from quizzer.db.models import Quiz, Submission

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

AnswerIndex = Annotated[int, Field(ge=0, le=3)]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========================================
# Domain Shapes
# ========================================


class Question(CamelModel):
    """A multiple-choice question embedded in a quiz."""

    id: int = Field(..., ge=1)
    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0, le=3)
    difficulty: Difficulty = Difficulty.MEDIUM
    explanation: str | None = None


class QuizResponse(CamelModel):
    id: int
    grade: str
    subject: str
    questions: list[Question]
    created_at: datetime

    @classmethod
    def from_model(cls, quiz: Quiz) -> QuizResponse:
        return cls(
            id=quiz.id,
            grade=quiz.grade,
            subject=quiz.subject,
            questions=[Question.model_validate(q) for q in quiz.questions],
            created_at=quiz.created_at,
        )


class SubmissionResponse(CamelModel):
    id: int
    user_id: int
    quiz_id: int
    answers: list[int | None]
    score: int
    created_at: datetime

    @classmethod
    def from_model(cls, submission: Submission) -> SubmissionResponse:
        return cls(
            id=submission.id,
            user_id=submission.user_id,
            quiz_id=submission.quiz_id,
            answers=list(submission.answers or []),
            score=submission.score,
            created_at=submission.created_at,
        )


# ========================================
# Auth
# ========================================


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)


class LoginResponse(CamelModel):
    token: str
    message: str = "Authentication successful"
    expires_in: str


# ========================================
# Quiz Creation & History
# ========================================


class CreateQuizRequest(CamelModel):
    grade: str = Field(..., min_length=1, max_length=10)
    subject: str = Field(..., min_length=2, max_length=50)
    question_count: int | None = Field(None, ge=1, le=20)


class AdaptiveInfo(CamelModel):
    based_on_submissions: int
    recommended_difficulty: Difficulty


class CreateQuizResponse(QuizResponse):
    difficulty: Difficulty
    adaptive_info: AdaptiveInfo


class HistoryQuery(CamelModel):
    """Optional filters for quiz history; dates are inclusive days."""

    grade: str | None = Field(None, min_length=1, max_length=10)
    subject: str | None = Field(None, min_length=2, max_length=50)
    from_date: date | None = None
    to_date: date | None = None

    @model_validator(mode="after")
    def _check_range(self) -> HistoryQuery:
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise ValueError("toDate must not be earlier than fromDate")
        return self


class QuizHistoryItem(QuizResponse):
    submissions: list[SubmissionResponse] = Field(default_factory=list)


# ========================================
# Submission
# ========================================


class SubmitQuizRequest(CamelModel):
    answers: list[AnswerIndex] = Field(..., min_length=1, max_length=20)


class QuestionAnalysis(CamelModel):
    question_id: int
    correct: bool
    user_answer: Any = None
    correct_answer_index: int
    explanation: str


class ScoreAnalysis(CamelModel):
    score: int
    correct: int
    total: int
    analysis: list[QuestionAnalysis]


class LearningPattern(CamelModel):
    trend: str
    recommendation: str
    average_score: int | None = None

    @classmethod
    def from_analysis(cls, analysis: TrendAnalysis) -> LearningPattern:
        return cls(
            trend=analysis.trend.value,
            recommendation=analysis.recommendation,
            average_score=analysis.average_score,
        )


class AIInsights(CamelModel):
    strengths: str
    next_steps: list[str]


class SubmitQuizResponse(SubmissionResponse):
    score_analysis: ScoreAnalysis
    improvement_suggestions: list[str]
    learning_pattern: LearningPattern
    ai_insights: AIInsights


class RetryQuizResponse(CamelModel):
    message: str = "Quiz retry initiated"
    submission_id: int
    attempt_number: int
    quiz: QuizResponse


# ========================================
# Hints
# ========================================


class HintRequest(CamelModel):
    user_answer: AnswerIndex | None = None


class HintResponse(CamelModel):
    question_id: int
    hint: str
    confidence: float = Field(..., ge=0, le=1)
    is_specific: bool


# ========================================
# Analytics & Leaderboard
# ========================================


class SubjectPerformance(CamelModel):
    count: int
    average: float


class ImprovementArea(CamelModel):
    subject: str
    average_score: float
    quizzes_taken: int


class QuizAnalytics(CamelModel):
    total_quizzes: int
    average_score: float
    best_score: int
    recent_trend: LearningPattern
    subject_performance: dict[str, SubjectPerformance]
    improvement_areas: list[ImprovementArea]


class AnalyticsResponse(CamelModel):
    message: str | None = None
    analytics: QuizAnalytics | None = None


class LeaderboardEntry(CamelModel):
    rank: int
    username: str
    score: int
    grade: str
    subject: str
    completed_at: datetime


class LeaderboardResponse(CamelModel):
    grade: str
    subject: str
    leaderboard: list[LeaderboardEntry]
    total_participants: int
    last_updated: datetime


# ========================================
# Email & Submission Lookup
# ========================================


class SendEmailRequest(CamelModel):
    submission_id: int = Field(..., gt=0)
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN)


class SendEmailResponse(CamelModel):
    message: str
    email: str
    warning: str | None = None
    submission_id: int | None = None
    score: int | None = None


class SubmissionLookupResponse(CamelModel):
    success: bool = True
    data: SubmissionResponse
