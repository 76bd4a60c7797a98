"""
Quiz models.

Implements:
- User: account created lazily from the token's username claim
- Quiz: grade/subject plus an immutable JSON array of questions
- Submission: one graded (or pending retry) attempt at a quiz

Question JSON structure (camelCase, as served by the API):
    {
        "id": 1,
        "question": "What is 7 x 8?",
        "options": ["54", "56", "58", "64"],
        "correctAnswer": 1,
        "difficulty": "medium",
        "explanation": "7 x 8 = 56"
    }
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class User(Base):
    """Quiz taker, identified by a unique username."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    submissions: Mapped[list[Submission]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"


class Quiz(Base):
    """Generated quiz. Never modified after creation."""

    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    subject: Mapped[str] = mapped_column(String(50), nullable=False)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    submissions: Mapped[list[Submission]] = relationship(back_populates="quiz")

    __table_args__ = (Index("idx_quiz_grade_subject", "grade", "subject"),)

    def __repr__(self) -> str:
        return f"<Quiz id={self.id} grade={self.grade} subject={self.subject}>"


class Submission(Base):
    """
    A single attempt at a quiz.

    ``answers`` is positional against ``quiz.questions``. A retry inserts
    a row with empty answers and score 0.
    """

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    answers: Mapped[list[int | None]] = mapped_column(JSON, nullable=False, default=list)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped[User] = relationship(back_populates="submissions")
    quiz: Mapped[Quiz] = relationship(back_populates="submissions")

    __table_args__ = (
        Index("idx_submission_user_created", "user_id", "created_at"),
        Index("idx_submission_quiz_score", "quiz_id", "score"),
    )

    def __repr__(self) -> str:
        return f"<Submission id={self.id} user={self.user_id} quiz={self.quiz_id} score={self.score}>"
