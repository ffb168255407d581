"""Gemini REST client used as the cheap text-generation collaborator.

Discovery, page distillation, history summarization and criteria parsing
all go through ``GeminiClient.generate()``. A missing API key is reported
when a call is made, not at construction, so each caller can degrade on
its own terms (descriptive tool text, no compression, fallback criteria).
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from sleuth.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class GeminiClient:
    """Sync httpx client for the Gemini ``generateContent`` endpoint.

    Implements the TextGenerator protocol.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        self._model = model or os.environ.get("SLEUTH_GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def generate(
        self,
        prompt: str,
        *,
        grounded: bool = False,
        json_mode: bool = False,
    ) -> str:
        """Generate a text response.

        Args:
            prompt: Single user prompt.
            grounded: Attach the google_search tool so answers cite the web.
            json_mode: Request ``application/json`` output.

        Raises:
            LLMConfigError: If GEMINI_API_KEY is not set.
            LLMAuthError: On 401/403.
            LLMRateLimitError: On 429.
            LLMResponseError: If the response has no text.
            httpx.HTTPError: On transport failures and other HTTP errors.
        """
        if not self._api_key:
            raise LLMConfigError("GEMINI_API_KEY not set")

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if grounded:
            payload["tools"] = [{"google_search": {}}]
        if json_mode:
            payload["generationConfig"] = {"responseMimeType": "application/json"}

        response = self._client.post(
            f"{self._base_url}/models/{self._model}:generateContent",
            json=payload,
            headers={"x-goog-api-key": self._api_key},
        )
        if response.status_code in (401, 403):
            raise LLMAuthError(
                f"Gemini authentication failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code == 429:
            raise LLMRateLimitError("Gemini rate limited: HTTP 429")
        response.raise_for_status()

        return self.extract_text(response.json())

    @staticmethod
    def extract_text(data: dict) -> str:
        """Join the text parts of the first candidate.

        Raises:
            LLMResponseError: If no candidate text is present.
        """
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(f"Gemini response has no candidates: {data}") from exc
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text:
            raise LLMResponseError("Gemini response contained no text")
        return text

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
