"""LLM client protocols.

Two pluggable interfaces:

- ``LLMClient`` -- the reasoning engine that drives the research loop.
  Takes OpenAI-format messages plus tool schemas, returns an
  OpenAI-format response dict.
- ``TextGenerator`` -- a cheap single-shot text model used for broad
  discovery, page distillation, history summarization and criteria parsing.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for the reasoning engine.

    Any object with chat() and close() methods matching this signature works.
    The built-in OpenAIClient implements this protocol.
    """

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send messages, return response dict."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for single-shot text generation.

    ``grounded`` asks the model to consult web search before answering;
    ``json_mode`` asks for a JSON document as the whole response.
    Implementations raise on failure; callers decide how to degrade.
    """

    def generate(
        self,
        prompt: str,
        *,
        grounded: bool = False,
        json_mode: bool = False,
    ) -> str:
        """Return the model's text response to ``prompt``."""
        ...
