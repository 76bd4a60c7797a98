"""
Best-effort cache backends.

A cache failure never fails a request: every Redis error is logged and
reported as a miss (for reads) or ``False`` (for writes).
"""

from __future__ import annotations

import json
from typing import Any, Protocol

import redis
from loguru import logger


class Cache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def ping(self) -> bool: ...


def leaderboard_key(grade: str, subject: str) -> str:
    return f"leaderboard:{grade}:{subject}"


class NullCache:
    """Used when no cache is configured; always misses."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return False

    def ping(self) -> bool:
        return False


class RedisCache:
    """JSON values stored in Redis with a per-key TTL."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 1.0) -> RedisCache:
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    def get(self, key: str) -> Any | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            self.client.setex(key, ttl_seconds, json.dumps(value))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.client.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        self.client.close()
