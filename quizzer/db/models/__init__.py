# SQLAlchemy models
from .base import Base, utcnow
from .quiz import Quiz, Submission, User

__all__ = [
    # Base
    "Base",
    "utcnow",
    # Quiz
    "User",
    "Quiz",
    "Submission",
]
