"""
Bearer token issuing and verification.

Tokens are HS256 JWTs carrying a ``username`` claim and an expiry.
Credentials are not checked; any username/password pair may log in.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from quizzer.core.errors import AuthenticationError, ConfigurationError


class TokenService:
    def __init__(self, secret: str | None, algorithm: str = "HS256", expires_minutes: int = 1440):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @property
    def expires_in(self) -> str:
        """Human-readable lifetime, e.g. ``1d`` or ``90m``."""
        if self.expires_minutes % 1440 == 0:
            return f"{self.expires_minutes // 1440}d"
        if self.expires_minutes % 60 == 0:
            return f"{self.expires_minutes // 60}h"
        return f"{self.expires_minutes}m"

    def _require_secret(self) -> str:
        if not self.secret:
            raise ConfigurationError("JWT secret not configured")
        return self.secret

    def issue(self, username: str) -> str:
        secret = self._require_secret()
        now = datetime.now(UTC)
        payload = {
            "username": username,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Validate a token and return its username.

        Raises:
            ConfigurationError: If no secret is configured
            AuthenticationError: If the token is expired, forged or malformed
        """
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise AuthenticationError("Invalid token")
        return username
