"""Page retrieval and distillation collaborators.

Two-stage extraction:
1. PageFetcher retrieves clean text, first through a reader proxy and
   then by fetching the page directly and stripping the markup.
2. PageExtractor hands the text to a text-generation model together with
   a precise extraction goal and returns only what the page supports.

``PageFetcher.read()`` skips stage 2 for callers that want verbatim text.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup

from sleuth.exceptions import PageFetchError
from sleuth.llm.errors import LLMClientError
from sleuth.prompts.extract import build_extraction_prompt

if TYPE_CHECKING:
    from sleuth.llm.protocols import TextGenerator

logger = logging.getLogger(__name__)

READER_URL = "https://r.jina.ai/"
_BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)
_STRIP_TAGS = ["script", "style", "nav", "footer", "noscript"]


def html_to_text(html: str) -> str:
    """Strip scripts, styles and navigation chrome, return collapsed text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_STRIP_TAGS):
        tag.decompose()
    return " ".join(soup.get_text(" ", strip=True).split())


def cap_text(text: str, max_chars: int, notice: str) -> str:
    """Cut ``text`` to ``max_chars`` and append ``notice`` when cut.

    ``notice`` may reference ``{total}``, the original length.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n" + notice.format(total=len(text))


class PageFetcher:
    """Fetch-only page retrieval with per-strategy timeouts."""

    def __init__(
        self,
        jina_api_key: str | None = None,
        *,
        use_reader: bool = True,
        reader_timeout: float = 20.0,
        direct_timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._jina_api_key = jina_api_key or os.environ.get("JINA_API_KEY", "")
        self._use_reader = use_reader
        self._reader_timeout = reader_timeout
        self._direct_timeout = direct_timeout
        self._client = httpx.Client(transport=transport, follow_redirects=True)

    def fetch(self, url: str) -> str:
        """Return the page's text content.

        Raises:
            PageFetchError: If neither strategy produced content.
        """
        if self._use_reader:
            text = self._fetch_via_reader(url)
            if text:
                return text
        return self._fetch_direct(url)

    def read(self, url: str, max_chars: int = 12_000) -> str:
        """Return capped raw text for ``url``, or a failure description."""
        try:
            content = self.fetch(url)
        except PageFetchError as exc:
            return f"Could not read {url}: {exc}"
        return cap_text(
            content,
            max_chars,
            "[Truncated. Full page: {total} chars. "
            "Use extract_page for targeted extraction.]",
        )

    def _fetch_via_reader(self, url: str) -> str | None:
        headers = {"Accept": "text/plain"}
        if self._jina_api_key:
            headers["Authorization"] = f"Bearer {self._jina_api_key}"
        try:
            response = self._client.get(
                f"{READER_URL}{url}", headers=headers, timeout=self._reader_timeout
            )
        except httpx.HTTPError as exc:
            logger.debug("Reader fetch failed for %s: %s", url, exc)
            return None
        if response.is_success and response.text.strip():
            return response.text
        logger.debug("Reader returned HTTP %s for %s", response.status_code, url)
        return None

    def _fetch_direct(self, url: str) -> str:
        try:
            response = self._client.get(
                url,
                headers={
                    "User-Agent": _BROWSER_UA,
                    "Accept": "text/html,application/xhtml+xml",
                },
                timeout=self._direct_timeout,
            )
        except httpx.HTTPError as exc:
            raise PageFetchError(url, f"{type(exc).__name__}: {exc}") from exc
        if not response.is_success:
            raise PageFetchError(url, f"HTTP {response.status_code}")
        text = html_to_text(response.text)
        if not text:
            raise PageFetchError(url, "page has no readable text")
        return text

    def close(self) -> None:
        self._client.close()


class PageExtractor:
    """Fetch a page, then distill it toward an extraction goal."""

    def __init__(
        self,
        fetcher: PageFetcher,
        generator: TextGenerator,
        *,
        max_chars: int = 150_000,
    ) -> None:
        self._fetcher = fetcher
        self._generator = generator
        self._max_chars = max_chars

    def extract(self, url: str, goal: str) -> str:
        """Return distilled facts for ``goal``, or a failure description."""
        try:
            raw = self._fetcher.fetch(url)
        except PageFetchError as exc:
            return f"Could not access {url}: {exc}"

        content = cap_text(raw, self._max_chars, "[Page truncated: {total} total chars]")
        logger.info("Distilling %dk chars from %s", len(content) // 1000, url)

        try:
            text = self._generator.generate(build_extraction_prompt(url, content, goal))
        except (LLMClientError, httpx.HTTPError) as exc:
            return f"Extraction failed for {url}: {exc}"
        return f"Extracted from {url}:\n\n{text}"
