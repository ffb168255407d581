"""Web search collaborators.

Two engines, both returning plain text so the reasoning engine can read
failures as well as results:

1. SerperSearch -- precise Google results with exact URLs and snippets.
2. GroundedDiscovery -- broad, model-summarized findings backed by
   grounded web search.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import httpx

from sleuth.llm.errors import LLMClientError
from sleuth.prompts.extract import build_discovery_prompt

if TYPE_CHECKING:
    from sleuth.llm.protocols import TextGenerator

logger = logging.getLogger(__name__)

SERPER_URL = "https://google.serper.dev/search"


class SerperSearch:
    """Precise search via the Serper Google API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        num_results: int = 8,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("SERPER_API_KEY", "")
        self._num_results = num_results
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def search(self, query: str) -> str:
        """Run a query and format the results. Never raises."""
        if not self._api_key:
            return "ERROR: SERPER_API_KEY not set. Add it to .env for precise search."

        try:
            response = self._client.post(
                SERPER_URL,
                headers={"X-API-KEY": self._api_key, "Content-Type": "application/json"},
                json={"q": query, "num": self._num_results},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Serper search failed for %r: %s", query, exc)
            return f"Search error: {exc}"

        return self._format(query, data)

    def _format(self, query: str, data: dict) -> str:
        lines = [f'Search results for: "{query}"', ""]

        answer = (data.get("answerBox") or {}).get("answer")
        if answer:
            lines += [f"Quick answer: {answer}", ""]

        organic = data.get("organic") or []
        if not organic:
            lines.append("No results.")
        for r in organic[: self._num_results]:
            lines.append(f"[{r.get('position', '?')}] {r.get('title', '')}")
            lines.append(f"    URL: {r.get('link', '')}")
            lines.append(f"    {r.get('snippet', '')}")
            lines.append("")

        related = data.get("peopleAlsoAsk") or []
        if related:
            lines.append("Related questions:")
            for q in related[:3]:
                snippet = (q.get("snippet") or "N/A")[:150]
                lines.append(f"  Q: {q.get('question', '')}")
                lines.append(f"  A: {snippet}")
                lines.append("")

        return "\n".join(lines)

    def close(self) -> None:
        self._client.close()


class GroundedDiscovery:
    """Broad discovery through a grounded text-generation model."""

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    def discover(self, query: str, context: str) -> str:
        """Return summarized findings for ``query``. Never raises on model errors."""
        try:
            return self._generator.generate(
                build_discovery_prompt(query, context), grounded=True
            )
        except (LLMClientError, httpx.HTTPError) as exc:
            logger.debug("Discovery failed for %r: %s", query, exc)
            return f"Discovery error: {exc}"
