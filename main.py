"""
Entry point for the AI Quizzer service.

Run with:
    uvicorn quizzer.api.main:app --reload --port 4000
    python main.py
"""
import uvicorn

from config import get_settings

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "quizzer.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
