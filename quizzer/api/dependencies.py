"""FastAPI dependencies: container access, DB sessions, auth and the quiz service."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quizzer.core.errors import AuthenticationError
from quizzer.services.container import ServiceContainer
from quizzer.services.quiz_service import QuizService

bearer_scheme = HTTPBearer(auto_error=False, description="Token from POST /login")


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_session(container: ServiceContainer = Depends(get_container)) -> Generator[Session, None, None]:
    """
    Per-request session; rolls back on error.

    Write routes commit before returning so a failed commit surfaces as an
    error response instead of being lost after the response is sent.
    """
    session = container.session_factory()
    try:
        yield session
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()


def get_current_username(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: ServiceContainer = Depends(get_container),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Token missing")
    return container.token_service.verify(credentials.credentials)


def get_quiz_service(
    session: Session = Depends(get_session),
    container: ServiceContainer = Depends(get_container),
) -> QuizService:
    return container.quiz_service(session)
