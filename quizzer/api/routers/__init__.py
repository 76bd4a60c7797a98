"""API routers."""

from quizzer.api.routers import auth_router, quiz_router

__all__ = ["auth_router", "quiz_router"]
