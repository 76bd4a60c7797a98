"""Persistence layer: engine/session helpers, ORM models and the repository."""

from quizzer.db.database import (
    check_database_health,
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from quizzer.db.repository import QuizRepository

__all__ = [
    "QuizRepository",
    "check_database_health",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
