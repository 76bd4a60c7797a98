"""
FastAPI application for the AI Quizzer service.

Provides REST API for:
- Mock login issuing bearer tokens
- AI-generated adaptive quizzes
- Scoring with improvement suggestions
- History, analytics and leaderboards
- Hints and emailed results
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import Settings, get_settings
from quizzer import __version__
from quizzer.api.dependencies import get_container
from quizzer.api.errors import register_exception_handlers
from quizzer.api.routers import auth_router, quiz_router
from quizzer.db.database import check_database_health, init_db
from quizzer.logging_config import configure_logging
from quizzer.services.container import ServiceContainer, build_container

SERVICE_NAME = "ai-quizzer"


def create_app(settings: Settings | None = None, container: ServiceContainer | None = None) -> FastAPI:
    """
    Build the application.

    A container passed in is used as-is and left open on shutdown; otherwise
    one is built from settings at startup and closed on shutdown.
    """
    settings = settings or (container.settings if container else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        # Startup
        configure_logging(settings.log_level, settings.log_file)
        logger.info(f"Starting {SERVICE_NAME} service...")
        owns_container = getattr(app.state, "container", None) is None
        if owns_container:
            app.state.container = build_container(settings)
        init_db(app.state.container.engine)
        logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

        yield

        # Shutdown
        logger.info(f"Shutting down {SERVICE_NAME} service...")
        if owns_container:
            app.state.container.close()
            app.state.container = None

    app = FastAPI(
        title="AI Quizzer",
        description="""
        Adaptive quiz service for school subjects.

        ## Features

        - **Auth**: `POST /login` returns a bearer token for any valid username/password
        - **Quizzes**: questions generated by an LLM, difficulty adapted to recent scores
        - **Scoring**: per-question analysis, improvement suggestions and learning trend
        - **History & Analytics**: filtered history and per-subject performance
        - **Leaderboard**: top submissions by score, cached for a few minutes
        - **Email**: results summary sent over SMTP when configured
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # ========================================
    # Health & Status Endpoints
    # ========================================

    @app.get("/", tags=["Health"])
    def root() -> dict[str, Any]:
        """Root endpoint returning service info."""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "status": "ok",
            "endpoints": {
                "auth": "POST /login",
                "quizzes": "/quiz",
                "health": "GET /health",
            },
        }

    @app.get("/health", tags=["Health"])
    def health_check(request: Request) -> dict[str, Any]:
        """Health check with actual connectivity tests."""
        active = get_container(request)
        db_status, db_error = check_database_health(active.engine)

        if not active.settings.has_cache_configured():
            cache_status = "not_configured"
        else:
            cache_status = "ok" if active.cache.ping() else "unavailable"

        result: dict[str, Any] = {
            "status": "healthy" if db_status == "ok" else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "components": {
                "database": db_status,
                "cache": cache_status,
                "ai": "configured" if active.settings.has_ai_configured() else "not_configured",
                "email": "configured" if active.notifier.is_configured else "not_configured",
            },
        }
        if db_error:
            result["errors"] = {"database": db_error}
        return result

    @app.get("/config", tags=["Health"])
    def get_config(request: Request) -> dict[str, Any]:
        """Get current configuration (non-sensitive)."""
        return get_container(request).settings.get_public_config()

    # ========================================
    # Routers
    # ========================================

    app.include_router(auth_router.router, prefix="/login", tags=["Auth"])
    app.include_router(quiz_router.router, prefix="/quiz", tags=["Quiz"])

    return app


app = create_app()
