"""
Chat-completions client for question, hint and suggestion generation.

Talks to Groq's OpenAI-compatible HTTP API. Each call is a single
attempt with a bounded timeout; every transport, status or decoding
problem surfaces as LLMError so callers can switch to their fallback.
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx
from loguru import logger

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class LLMError(Exception):
    """Generation request failed or returned unusable content."""


class LLMClient:
    """HTTP client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "llama-3.1-8b-instant",
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Bearer key for the API
            base_url: API root, without the /chat/completions suffix
            model: Model name sent with every request
            timeout_seconds: Timeout applied to connect, read and write
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.model = model
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def chat_json(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> Any:
        """
        Send one chat request and decode the reply as JSON.

        Raises:
            LLMError: On timeout, HTTP error, empty reply or invalid JSON
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            response = self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except httpx.TimeoutException as e:
            raise LLMError(f"Generation request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"Generation API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"Generation request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMError(f"Unexpected response envelope: {e}") from e

        if not isinstance(content, str) or not content.strip():
            raise LLMError("Empty or non-text response from generation API")

        text = _FENCE_RE.sub("", content.strip())
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug(f"Undecodable generation output: {text[:200]}")
            raise LLMError(f"Generation output is not valid JSON: {e}") from e
