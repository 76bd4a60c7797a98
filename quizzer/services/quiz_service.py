"""
Quiz orchestration.

QuizService composes the core functions (scoring, difficulty selection,
trend analysis) with the injected collaborators (generators, cache,
notifier) behind the operations the API exposes. One instance is built
per request around that request's repository; collaborators are shared.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from loguru import logger
from pydantic import ValidationError as SchemaError

from config import Settings
from quizzer.core.difficulty import select_difficulty
from quizzer.core.errors import ForbiddenError, NotFoundError
from quizzer.core.scoring import ScoreResult, score_answers
from quizzer.core.trends import analyze_trend
from quizzer.db.models import Quiz, Submission, User, utcnow
from quizzer.db.repository import QuizRepository
from quizzer.schemas import (
    AdaptiveInfo,
    AIInsights,
    AnalyticsResponse,
    CreateQuizResponse,
    HintResponse,
    ImprovementArea,
    LeaderboardEntry,
    LeaderboardResponse,
    LearningPattern,
    Question,
    QuestionAnalysis,
    QuizAnalytics,
    QuizHistoryItem,
    QuizResponse,
    RetryQuizResponse,
    ScoreAnalysis,
    SendEmailResponse,
    SubjectPerformance,
    SubmissionLookupResponse,
    SubmissionResponse,
    SubmitQuizResponse,
)
from quizzer.services.cache import Cache, leaderboard_key
from quizzer.services.hint_generator import HintGenerator
from quizzer.services.notifier import EmailNotifier, QuizSummary, ScoreSummary
from quizzer.services.question_generator import QuestionGenerator
from quizzer.services.suggestion_generator import SuggestionGenerator

IMPROVEMENT_AREA_BELOW = 70


def _questions(quiz: Quiz) -> list[Question]:
    return [Question.model_validate(q) for q in quiz.questions]


def _score_analysis(result: ScoreResult) -> ScoreAnalysis:
    return ScoreAnalysis(
        score=result.score,
        correct=result.correct,
        total=result.total,
        analysis=[
            QuestionAnalysis(
                question_id=r.question_id,
                correct=r.correct,
                user_answer=r.user_answer,
                correct_answer_index=r.correct_answer_index,
                explanation=r.explanation,
            )
            for r in result.analysis
        ],
    )


class QuizService:
    """Create, grade, retry, hint and report on quizzes for one user at a time."""

    def __init__(
        self,
        repository: QuizRepository,
        settings: Settings,
        question_generator: QuestionGenerator,
        hint_generator: HintGenerator,
        suggestion_generator: SuggestionGenerator,
        cache: Cache,
        notifier: EmailNotifier,
    ):
        self.repository = repository
        self.settings = settings
        self.question_generator = question_generator
        self.hint_generator = hint_generator
        self.suggestion_generator = suggestion_generator
        self.cache = cache
        self.notifier = notifier

    # ========================================
    # Lookups
    # ========================================

    def _require_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.repository.get_quiz(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found")
        return quiz

    def _require_owned_submission(self, submission_id: int, username: str) -> Submission:
        submission = self.repository.get_submission(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        if submission.user.username != username:
            raise ForbiddenError("Access denied")
        return submission

    def _recent_history(self, user: User) -> list[Submission]:
        return self.repository.recent_submissions(user.id, limit=self.settings.adaptive_history_size)

    # ========================================
    # Operations
    # ========================================

    def create_quiz(
        self, username: str, grade: str, subject: str, question_count: int | None = None
    ) -> CreateQuizResponse:
        """Generate and persist a quiz at the user's adaptive difficulty."""
        count = min(question_count or self.settings.default_question_count, self.settings.max_question_count)
        user = self.repository.get_or_create_user(username)
        past = self._recent_history(user)
        difficulty = select_difficulty(subject, QuizRepository.to_score_records(past))

        questions = self.question_generator.generate(grade, subject, difficulty, count)
        quiz = self.repository.create_quiz(
            grade=grade,
            subject=subject,
            questions=[q.model_dump(mode="json", by_alias=True) for q in questions],
        )
        logger.info(
            f"Quiz {quiz.id} created for {username}: grade={grade} subject={subject} "
            f"difficulty={difficulty.value} (history={len(past)})"
        )

        return CreateQuizResponse(
            **QuizResponse.from_model(quiz).model_dump(),
            difficulty=difficulty,
            adaptive_info=AdaptiveInfo(
                based_on_submissions=len(past),
                recommended_difficulty=difficulty,
            ),
        )

    def quiz_history(
        self,
        username: str,
        grade: str | None = None,
        subject: str | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[QuizHistoryItem]:
        """Quizzes matching the filters, each with this user's own submissions."""
        user = self.repository.get_or_create_user(username)
        quizzes = self.repository.list_quizzes(grade=grade, subject=subject, from_date=from_date, to_date=to_date)

        return [
            QuizHistoryItem(
                **QuizResponse.from_model(quiz).model_dump(),
                submissions=[
                    SubmissionResponse.from_model(s)
                    for s in self.repository.user_submissions_for_quiz(user.id, quiz.id)
                ],
            )
            for quiz in quizzes
        ]

    def submit_quiz(self, username: str, quiz_id: int, answers: list[int | None]) -> SubmitQuizResponse:
        """Grade answers, persist the submission and report suggestions and trend."""
        user = self.repository.get_or_create_user(username)
        quiz = self._require_quiz(quiz_id)

        result = score_answers(_questions(quiz), answers)
        past = self._recent_history(user)
        suggestions = self.suggestion_generator.generate(result.score, quiz.subject, result.missed_question_ids)
        trend = analyze_trend(QuizRepository.to_score_records(past), quiz.subject)

        submission = self.repository.create_submission(user.id, quiz.id, answers, result.score)
        self.cache.delete(leaderboard_key(quiz.grade, quiz.subject))
        logger.info(f"Submission {submission.id}: {username} scored {result.score} on quiz {quiz.id}")

        strengths = (
            f"Strong performance in {quiz.subject}"
            if result.is_strong
            else f"Room for improvement in {quiz.subject}"
        )
        return SubmitQuizResponse(
            **SubmissionResponse.from_model(submission).model_dump(),
            score_analysis=_score_analysis(result),
            improvement_suggestions=suggestions,
            learning_pattern=LearningPattern.from_analysis(trend),
            ai_insights=AIInsights(strengths=strengths, next_steps=suggestions),
        )

    def retry_quiz(self, username: str, quiz_id: int) -> RetryQuizResponse:
        """Open a fresh, unscored attempt; earlier submissions are untouched."""
        user = self.repository.get_or_create_user(username)
        quiz = self._require_quiz(quiz_id)

        submission = self.repository.create_submission(user.id, quiz.id, [], 0)
        attempts = self.repository.count_submissions(quiz_id=quiz.id, user_id=user.id)
        logger.info(f"Retry {submission.id} opened by {username} for quiz {quiz.id} (attempt {attempts})")

        return RetryQuizResponse(
            submission_id=submission.id,
            attempt_number=attempts,
            quiz=QuizResponse.from_model(quiz),
        )

    def question_hint(self, quiz_id: int, question_id: int, user_answer: int | None = None) -> HintResponse:
        quiz = self._require_quiz(quiz_id)
        question = next((q for q in _questions(quiz) if q.id == question_id), None)
        if question is None:
            raise NotFoundError("Question not found")

        answer_text = question.options[user_answer] if user_answer is not None else None
        hint = self.hint_generator.generate(question.question, answer_text)

        return HintResponse(
            question_id=question_id,
            hint=hint.hint,
            confidence=hint.confidence,
            is_specific=hint.is_specific,
        )

    def analytics(self, username: str, subject: str | None = None) -> AnalyticsResponse:
        """Aggregate the user's submissions, optionally for a single subject."""
        user = self.repository.get_user(username)
        if user is None:
            raise NotFoundError("User not found")

        submissions = self.repository.user_submissions(user.id, subject=subject)
        if not submissions:
            return AnalyticsResponse(message="No quiz data available", analytics=None)

        scores = [s.score for s in submissions]
        by_subject: dict[str, list[int]] = defaultdict(list)
        for s in submissions:
            by_subject[s.quiz.subject].append(s.score)

        performance = {
            subj: SubjectPerformance(count=len(vals), average=round(sum(vals) / len(vals), 2))
            for subj, vals in by_subject.items()
        }
        trend = analyze_trend(QuizRepository.to_score_records(submissions), subject or "all subjects")

        return AnalyticsResponse(
            analytics=QuizAnalytics(
                total_quizzes=len(submissions),
                average_score=round(sum(scores) / len(scores), 2),
                best_score=max(scores),
                recent_trend=LearningPattern.from_analysis(trend),
                subject_performance=performance,
                improvement_areas=[
                    ImprovementArea(subject=subj, average_score=perf.average, quizzes_taken=perf.count)
                    for subj, perf in performance.items()
                    if perf.average < IMPROVEMENT_AREA_BELOW
                ],
            )
        )

    def leaderboard(self, grade: str, subject: str, limit: int = 10) -> LeaderboardResponse:
        """
        Top scores for a grade and subject.

        The top ``max_leaderboard_limit`` entries are cached per key for the
        configured window; ``limit`` is applied to the cached list.
        """
        key = leaderboard_key(grade, subject)
        board = self._cached_leaderboard(key)
        if board is None:
            board = self._build_leaderboard(grade, subject)
            self.cache.set(
                key,
                board.model_dump(mode="json", by_alias=True),
                self.settings.leaderboard_cache_ttl_seconds,
            )

        entries = board.leaderboard[:limit]
        return board.model_copy(update={"leaderboard": entries, "total_participants": len(entries)})

    def _cached_leaderboard(self, key: str) -> LeaderboardResponse | None:
        cached = self.cache.get(key)
        if cached is None:
            return None
        try:
            board = LeaderboardResponse.model_validate(cached)
        except SchemaError as e:
            logger.warning(f"Discarding unreadable leaderboard cache entry {key}: {e.error_count()} errors")
            self.cache.delete(key)
            return None
        logger.debug(f"Leaderboard cache hit: {key}")
        return board

    def _build_leaderboard(self, grade: str, subject: str) -> LeaderboardResponse:
        rows = self.repository.leaderboard_rows(grade, subject, self.settings.max_leaderboard_limit)
        return LeaderboardResponse(
            grade=grade,
            subject=subject,
            leaderboard=[
                LeaderboardEntry(
                    rank=position,
                    username=row.user.username,
                    score=row.score,
                    grade=row.quiz.grade,
                    subject=row.quiz.subject,
                    completed_at=row.created_at,
                )
                for position, row in enumerate(rows, start=1)
            ],
            total_participants=len(rows),
            last_updated=utcnow(),
        )

    def send_results_email(self, username: str, submission_id: int, email: str) -> SendEmailResponse:
        """Email a submission's results; a delivery failure yields a warning payload."""
        submission = self._require_owned_submission(submission_id, username)
        quiz = submission.quiz

        result = score_answers(_questions(quiz), submission.answers or [])
        suggestions = self.suggestion_generator.generate(submission.score, quiz.subject, result.missed_question_ids)

        sent = self.notifier.send_results(
            email,
            QuizSummary(
                username=username,
                grade=quiz.grade,
                subject=quiz.subject,
                score=submission.score,
                improvement_suggestions=suggestions,
            ),
            ScoreSummary(correct=result.correct, total=result.total),
        )
        if not sent:
            return SendEmailResponse(
                message="Quiz results processed, but email sending is not configured",
                warning="Email delivery unavailable. Check SMTP_USER and SMTP_PASSWORD settings",
                submission_id=submission.id,
                score=submission.score,
                email=email,
            )

        return SendEmailResponse(message="Quiz results sent successfully", email=email)

    def get_submission(self, username: str, submission_id: int) -> SubmissionLookupResponse:
        submission = self._require_owned_submission(submission_id, username)
        return SubmissionLookupResponse(data=SubmissionResponse.from_model(submission))

