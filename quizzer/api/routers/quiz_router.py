"""
Quiz router.

Endpoints for:
- Adaptive quiz creation
- Quiz history with filters
- Submission, retry and hints
- Analytics and leaderboard
- Emailing results

All routes require a bearer token; the username claim identifies the user.
"""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Body, Depends, Path, Query
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from quizzer.api.dependencies import get_current_username, get_quiz_service, get_session
from quizzer.core.errors import ValidationError
from quizzer.schemas import (
    AnalyticsResponse,
    CreateQuizRequest,
    CreateQuizResponse,
    HintRequest,
    HintResponse,
    HistoryQuery,
    LeaderboardResponse,
    QuizHistoryItem,
    RetryQuizResponse,
    SendEmailRequest,
    SendEmailResponse,
    SubmissionLookupResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
)
from quizzer.services.quiz_service import QuizService

router = APIRouter(dependencies=[Depends(get_current_username)])


# ========================================
# Quiz Management
# ========================================


@router.post("/create", response_model=CreateQuizResponse, summary="Create an adaptive quiz")
def create_quiz(
    payload: CreateQuizRequest,
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
    session: Session = Depends(get_session),
) -> CreateQuizResponse:
    """
    Generate a quiz at a difficulty chosen from the user's recent scores in the subject.

    The response includes `adaptiveInfo.basedOnSubmissions` and
    `adaptiveInfo.recommendedDifficulty`.
    """
    response = service.create_quiz(username, payload.grade, payload.subject, payload.question_count)
    session.commit()
    return response


@router.get("/history", response_model=list[QuizHistoryItem], summary="Quiz history with filters")
def quiz_history(
    grade: str | None = Query(None),
    subject: str | None = Query(None),
    from_date: date | None = Query(None, alias="fromDate", description="YYYY-MM-DD, inclusive"),
    to_date: date | None = Query(None, alias="toDate", description="YYYY-MM-DD, inclusive"),
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
    session: Session = Depends(get_session),
) -> list[QuizHistoryItem]:
    try:
        filters = HistoryQuery(grade=grade, subject=subject, from_date=from_date, to_date=to_date)
    except SchemaError as e:
        raise ValidationError(
            "Query validation failed",
            details=[{"field": ".".join(map(str, err["loc"])), "message": err["msg"], "value": err.get("input")} for err in e.errors()],
        ) from e

    history = service.quiz_history(
        username,
        grade=filters.grade,
        subject=filters.subject,
        from_date=filters.from_date,
        to_date=filters.to_date,
    )
    # First visit may have created the user row
    session.commit()
    return history


@router.get("/analytics", response_model=AnalyticsResponse, summary="Performance analytics")
def quiz_analytics(
    subject: str | None = Query(None, min_length=2, max_length=50),
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
) -> AnalyticsResponse:
    return service.analytics(username, subject)


@router.get("/leaderboard", response_model=LeaderboardResponse, summary="Leaderboard for a grade and subject")
def leaderboard(
    grade: str = Query(..., min_length=1, max_length=10),
    subject: str = Query(..., min_length=2, max_length=50),
    limit: int = Query(10, ge=1, le=100),
    service: QuizService = Depends(get_quiz_service),
) -> LeaderboardResponse:
    """Results may be up to one cache window (five minutes by default) stale."""
    return service.leaderboard(grade, subject, limit)


@router.post("/send-email", response_model=SendEmailResponse, response_model_exclude_none=True, summary="Email quiz results")
def send_email(
    payload: SendEmailRequest,
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
) -> SendEmailResponse:
    return service.send_results_email(username, payload.submission_id, payload.email)


@router.get("/submission/{submission_id}", response_model=SubmissionLookupResponse, summary="Get one of your submissions")
def get_submission(
    submission_id: int = Path(..., gt=0),
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
) -> SubmissionLookupResponse:
    return service.get_submission(username, submission_id)


@router.post("/{quiz_id}/submit", response_model=SubmitQuizResponse, summary="Submit answers")
def submit_quiz(
    payload: SubmitQuizRequest,
    quiz_id: int = Path(..., gt=0),
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
    session: Session = Depends(get_session),
) -> SubmitQuizResponse:
    """Answers are positional: `answers[i]` is the option index chosen for question i."""
    response = service.submit_quiz(username, quiz_id, list(payload.answers))
    session.commit()
    return response


@router.post("/{quiz_id}/retry", response_model=RetryQuizResponse, summary="Retry a quiz")
def retry_quiz(
    quiz_id: int = Path(..., gt=0),
    username: str = Depends(get_current_username),
    service: QuizService = Depends(get_quiz_service),
    session: Session = Depends(get_session),
) -> RetryQuizResponse:
    response = service.retry_quiz(username, quiz_id)
    session.commit()
    return response


@router.post(
    "/{quiz_id}/question/{question_id}/hint",
    response_model=HintResponse,
    summary="Get a hint for a question",
)
def question_hint(
    quiz_id: int = Path(..., gt=0),
    question_id: int = Path(..., gt=0),
    payload: HintRequest | None = Body(None),
    service: QuizService = Depends(get_quiz_service),
) -> HintResponse:
    user_answer = payload.user_answer if payload else None
    return service.question_hint(quiz_id, question_id, user_answer)
