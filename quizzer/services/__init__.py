"""
Services - collaborators and the quiz orchestrator.

- llm_client: chat completions over httpx
- question_generator / hint_generator / suggestion_generator: LLM with offline fallbacks
- cache: Redis-backed best-effort cache
- notifier: SMTP results email
- auth: JWT bearer tokens
- quiz_service: QuizService orchestrator
- container: startup wiring
"""

from quizzer.services.container import ServiceContainer, build_container
from quizzer.services.quiz_service import QuizService

__all__ = ["QuizService", "ServiceContainer", "build_container"]
