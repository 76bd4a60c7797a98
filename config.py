"""
Configuration settings for the AI Quizzer service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_KEYS = {"your-groq-api-key-here", "changeme"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./quizzer.db",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )

    # ========================================
    # Authentication
    # ========================================
    jwt_secret: str | None = Field(
        default=None,
        description="Secret used to sign bearer tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_expires_minutes: int = Field(
        default=1440,
        ge=1,
        description="Token lifetime in minutes (default one day)",
    )

    # ========================================
    # AI Integration (question/hint generation)
    # ========================================
    groq_api_key: str | None = Field(
        default=None,
        description="Groq API key; without it the offline fallbacks are used",
    )
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible chat completions API",
    )
    ai_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Chat model used for generation",
    )
    ai_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for a single generation request",
    )

    # ========================================
    # Cache
    # ========================================
    redis_url: str | None = Field(
        default=None,
        description="Redis URL; leave unset to disable caching",
    )
    redis_socket_timeout: float = Field(
        default=1.0,
        gt=0,
        description="Socket timeout for cache operations (seconds)",
    )
    leaderboard_cache_ttl_seconds: int = Field(
        default=300,
        ge=1,
        description="Leaderboard freshness window",
    )
    max_leaderboard_limit: int = Field(
        default=100,
        ge=1,
        description="Number of leaderboard entries computed and cached per key",
    )

    # ========================================
    # Email
    # ========================================
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_user: str | None = Field(default=None, description="SMTP login user")
    smtp_password: str | None = Field(default=None, description="SMTP login password")
    smtp_use_tls: bool = Field(default=True, description="Issue STARTTLS after connecting")
    email_from: str | None = Field(
        default=None,
        description="From address (defaults to smtp_user)",
    )
    email_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="SMTP connection timeout",
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Link target used in result emails",
    )

    # ========================================
    # Quiz Settings
    # ========================================
    default_question_count: int = Field(default=5, ge=1, le=20)
    max_question_count: int = Field(default=20, ge=1)
    adaptive_history_size: int = Field(
        default=10,
        ge=1,
        description="Number of recent submissions considered for difficulty and trends",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(default="127.0.0.1", description="API server host")
    api_port: int = Field(default=4000, description="API server port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_ai_configured(self) -> bool:
        """Check if a usable generation API key is present."""
        key = self.groq_api_key
        return bool(key) and key not in _PLACEHOLDER_KEYS and len(key) > 20

    def has_email_configured(self) -> bool:
        """Check if SMTP credentials are present."""
        return bool(self.smtp_user and self.smtp_password)

    def has_cache_configured(self) -> bool:
        """Check if a cache backend is configured."""
        return bool(self.redis_url)

    def get_public_config(self) -> dict[str, Any]:
        """Get current configuration without secrets."""
        return {
            "database": self.database_url.split("@")[-1]
            if "@" in self.database_url
            else self.database_url.split("://")[0],
            "auth": {
                "configured": bool(self.jwt_secret),
                "algorithm": self.jwt_algorithm,
                "expires_minutes": self.jwt_expires_minutes,
            },
            "ai": {
                "configured": self.has_ai_configured(),
                "model": self.ai_model,
                "timeout_seconds": self.ai_timeout_seconds,
            },
            "cache": {
                "configured": self.has_cache_configured(),
                "leaderboard_ttl_seconds": self.leaderboard_cache_ttl_seconds,
            },
            "email": {"configured": self.has_email_configured()},
            "quiz": {
                "default_question_count": self.default_question_count,
                "max_question_count": self.max_question_count,
                "adaptive_history_size": self.adaptive_history_size,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
