"""
Quiz repository.

All persistence for users, quizzes and submissions goes through here so
the service layer never builds queries itself. The repository flushes but
never commits; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from quizzer.core.difficulty import ScoreRecord
from quizzer.db.models import Quiz, Submission, User


class QuizRepository:
    """SQLAlchemy-backed store for the quiz domain."""

    def __init__(self, session: Session):
        self.session = session

    # ========================================
    # Users
    # ========================================

    def get_user(self, username: str) -> User | None:
        return self.session.scalar(select(User).where(User.username == username))

    def get_or_create_user(self, username: str) -> User:
        """Fetch a user, creating it on first use."""
        user = self.get_user(username)
        if user is not None:
            return user

        try:
            with self.session.begin_nested():
                user = User(username=username)
                self.session.add(user)
            logger.info(f"Created user {username}")
            return user
        except IntegrityError:
            # Concurrent request inserted the same username first
            user = self.get_user(username)
            if user is None:
                raise
            return user

    # ========================================
    # Quizzes
    # ========================================

    def create_quiz(self, grade: str, subject: str, questions: list[dict[str, Any]]) -> Quiz:
        quiz = Quiz(grade=grade, subject=subject, questions=questions)
        self.session.add(quiz)
        self.session.flush()
        return quiz

    def get_quiz(self, quiz_id: int) -> Quiz | None:
        return self.session.get(Quiz, quiz_id)

    def list_quizzes(
        self,
        grade: str | None = None,
        subject: str | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[Quiz]:
        """Quizzes matching the optional filters, newest first. Date bounds are inclusive days."""
        stmt = select(Quiz)
        if grade:
            stmt = stmt.where(Quiz.grade == grade)
        if subject:
            stmt = stmt.where(Quiz.subject == subject)
        if from_date:
            stmt = stmt.where(Quiz.created_at >= datetime.combine(from_date, time.min))
        if to_date:
            stmt = stmt.where(Quiz.created_at < datetime.combine(to_date + timedelta(days=1), time.min))
        stmt = stmt.order_by(Quiz.created_at.desc(), Quiz.id.desc())
        return list(self.session.scalars(stmt))

    # ========================================
    # Submissions
    # ========================================

    def create_submission(
        self,
        user_id: int,
        quiz_id: int,
        answers: Sequence[int | None],
        score: int,
    ) -> Submission:
        submission = Submission(user_id=user_id, quiz_id=quiz_id, answers=list(answers), score=score)
        self.session.add(submission)
        self.session.flush()
        return submission

    def get_submission(self, submission_id: int) -> Submission | None:
        stmt = (
            select(Submission)
            .options(joinedload(Submission.user), joinedload(Submission.quiz))
            .where(Submission.id == submission_id)
        )
        return self.session.scalar(stmt)

    def recent_submissions(self, user_id: int, limit: int = 10) -> list[Submission]:
        """Newest submissions of a user across all subjects."""
        stmt = (
            select(Submission)
            .options(joinedload(Submission.quiz))
            .where(Submission.user_id == user_id)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def user_submissions(self, user_id: int, subject: str | None = None) -> list[Submission]:
        """All submissions of a user, optionally for one subject, newest first."""
        stmt = (
            select(Submission)
            .join(Submission.quiz)
            .options(joinedload(Submission.quiz))
            .where(Submission.user_id == user_id)
        )
        if subject:
            stmt = stmt.where(Quiz.subject == subject)
        stmt = stmt.order_by(Submission.created_at.desc(), Submission.id.desc())
        return list(self.session.scalars(stmt))

    def user_submissions_for_quiz(self, user_id: int, quiz_id: int) -> list[Submission]:
        stmt = (
            select(Submission)
            .where(Submission.user_id == user_id, Submission.quiz_id == quiz_id)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
        )
        return list(self.session.scalars(stmt))

    def count_submissions(self, quiz_id: int | None = None, user_id: int | None = None) -> int:
        stmt = select(func.count(Submission.id))
        if quiz_id is not None:
            stmt = stmt.where(Submission.quiz_id == quiz_id)
        if user_id is not None:
            stmt = stmt.where(Submission.user_id == user_id)
        return self.session.scalar(stmt) or 0

    def leaderboard_rows(self, grade: str, subject: str, limit: int) -> list[Submission]:
        """Top submissions for a grade and subject, best score first, earliest wins ties."""
        stmt = (
            select(Submission)
            .join(Submission.quiz)
            .options(joinedload(Submission.user), joinedload(Submission.quiz))
            .where(Quiz.grade == grade, Quiz.subject == subject)
            .order_by(Submission.score.desc(), Submission.created_at.asc(), Submission.id.asc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    @staticmethod
    def to_score_records(submissions: Sequence[Submission]) -> list[ScoreRecord]:
        """Detach submissions into plain records for the core functions."""
        return [
            ScoreRecord(score=s.score, subject=s.quiz.subject, created_at=s.created_at)
            for s in submissions
        ]
