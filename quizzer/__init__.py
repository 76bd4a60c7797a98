"""
AI Quizzer - adaptive quiz-serving API.

Packages:
- core/: Scoring, difficulty selection, trend analysis, improvement advice
- db/: SQLAlchemy models and the quiz repository
- services/: Generators, cache, notifier, auth and the QuizService orchestrator
- api/: FastAPI application and routers
- cli/: Typer operator CLI
"""

__version__ = "1.0.0"
