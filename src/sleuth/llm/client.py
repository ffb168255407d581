"""Reasoning-engine client for OpenAI-compatible chat-completions endpoints.

One POST per ``chat()`` call. Status codes are mapped onto the LLM error
hierarchy and nothing is retried here: ResearchAgent owns the retry policy
for rate limits, and every other failure ends the session.
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

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _check_status(response: httpx.Response) -> None:
    """Raise the matching LLM error for a non-success response."""
    status = response.status_code
    if status in (401, 403):
        raise LLMAuthError(
            f"Engine rejected credentials (HTTP {status}): {response.text}",
            status_code=status,
        )
    if status == 429:
        raise LLMRateLimitError(
            f"Engine rate limit hit: {response.text}",
            retry_after=_retry_after(response),
        )
    response.raise_for_status()


class OpenAIClient:
    """Chat-completions client used as the research loop's reasoning engine.

    Implements the LLMClient protocol. Tool schemas and any other payload
    fields pass straight through ``chat(**kwargs)``.

    Usage::

        with OpenAIClient(api_key="sk-...") as llm:
            reply = llm.chat(messages, tools=gateway.schemas())
            usage = OpenAIClient.extract_usage(reply)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Set up the client.

        Each argument left as None is read from the environment:
        SLEUTH_OPENAI_API_KEY, SLEUTH_OPENAI_BASE_URL and SLEUTH_MODEL.

        Raises:
            LLMConfigError: If no API key is available.
        """
        key = api_key or os.environ.get("SLEUTH_OPENAI_API_KEY", "")
        if not key:
            raise LLMConfigError(
                "Reasoning engine key missing: pass api_key= or set SLEUTH_OPENAI_API_KEY."
            )
        root = base_url or os.environ.get("SLEUTH_OPENAI_BASE_URL") or DEFAULT_BASE_URL
        self._endpoint = f"{root.rstrip('/')}/chat/completions"
        self._default_model = default_model or os.environ.get("SLEUTH_MODEL") or DEFAULT_MODEL
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {key}"},
        )

    @property
    def default_model(self) -> str:
        return self._default_model

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send the conversation and return the decoded completion.

        Raises:
            LLMAuthError: HTTP 401 or 403.
            LLMRateLimitError: HTTP 429, with ``retry_after`` when provided.
            LLMResponseError: Body is not JSON or has no ``choices``.
            httpx.HTTPError: Transport failures and other HTTP errors.
        """
        body: dict[str, Any] = {"model": model or self._default_model, "messages": messages}
        optional = {"temperature": temperature, "max_tokens": max_tokens}
        body.update({k: v for k, v in optional.items() if v is not None})
        body.update(kwargs)

        response = self._client.post(self._endpoint, json=body)
        _check_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(f"Engine reply is not JSON: {exc}") from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise LLMResponseError(f"Engine reply has no 'choices': {data!r}")
        logger.debug("Engine reply from %s", data.get("model", body["model"]))
        return data

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def extract_content(response: dict) -> str:
        """Text of the first choice, or "" when it has none.

        Raises:
            LLMResponseError: If the reply has no first choice.
        """
        try:
            message = response["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(f"No message in engine reply: {response!r}") from exc
        return message.get("content") or ""

    @staticmethod
    def extract_usage(response: dict) -> tuple[int, int]:
        """Return (prompt_tokens, completion_tokens), zeros when absent."""
        usage = response.get("usage") or {}
        return (
            int(usage.get("prompt_tokens") or 0),
            int(usage.get("completion_tokens") or 0),
        )
