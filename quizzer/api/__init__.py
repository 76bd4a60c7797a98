"""HTTP surface of the AI Quizzer service."""

from quizzer.api.main import create_app

__all__ = ["create_app"]
