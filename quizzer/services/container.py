"""
Service container.

Collaborators are constructed once at startup from Settings and handed to
every request. Tests build a container with their own engine or fakes.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import Settings
from quizzer.db.database import create_db_engine, create_session_factory
from quizzer.db.repository import QuizRepository
from quizzer.services.auth import TokenService
from quizzer.services.cache import Cache, NullCache, RedisCache
from quizzer.services.hint_generator import HintGenerator
from quizzer.services.llm_client import LLMClient
from quizzer.services.notifier import EmailNotifier
from quizzer.services.question_generator import QuestionGenerator
from quizzer.services.quiz_service import QuizService
from quizzer.services.suggestion_generator import SuggestionGenerator


@dataclass
class ServiceContainer:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    token_service: TokenService
    question_generator: QuestionGenerator
    hint_generator: HintGenerator
    suggestion_generator: SuggestionGenerator
    cache: Cache
    notifier: EmailNotifier
    llm_client: LLMClient | None = None

    def quiz_service(self, session: Session) -> QuizService:
        """Build the per-request orchestrator around a session."""
        return QuizService(
            repository=QuizRepository(session),
            settings=self.settings,
            question_generator=self.question_generator,
            hint_generator=self.hint_generator,
            suggestion_generator=self.suggestion_generator,
            cache=self.cache,
            notifier=self.notifier,
        )

    def close(self) -> None:
        if self.llm_client is not None:
            self.llm_client.close()
        if isinstance(self.cache, RedisCache):
            self.cache.close()
        self.engine.dispose()


def build_cache(settings: Settings) -> Cache:
    if not settings.has_cache_configured():
        logger.info("Cache not configured - leaderboard served from the database")
        return NullCache()
    return RedisCache.from_url(settings.redis_url, socket_timeout=settings.redis_socket_timeout)


def build_llm_client(settings: Settings) -> LLMClient | None:
    if not settings.has_ai_configured():
        logger.warning("Groq API key not configured - using offline question, hint and suggestion fallbacks")
        return None
    return LLMClient(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        model=settings.ai_model,
        timeout_seconds=settings.ai_timeout_seconds,
    )


def build_container(settings: Settings, engine: Engine | None = None) -> ServiceContainer:
    """Wire every collaborator from settings."""
    engine = engine or create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    llm_client = build_llm_client(settings)

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        token_service=TokenService(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_minutes=settings.jwt_expires_minutes,
        ),
        question_generator=QuestionGenerator(llm_client),
        hint_generator=HintGenerator(llm_client),
        suggestion_generator=SuggestionGenerator(llm_client),
        cache=build_cache(settings),
        notifier=EmailNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.email_from,
            use_tls=settings.smtp_use_tls,
            timeout_seconds=settings.email_timeout_seconds,
            frontend_url=settings.frontend_url,
        ),
        llm_client=llm_client,
    )
