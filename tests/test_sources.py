"""Tests for the search and page collaborators behind the gateway."""

from __future__ import annotations

import json

import httpx
import pytest

from sleuth.exceptions import PageFetchError
from sleuth.llm.errors import LLMConfigError, LLMRateLimitError
from sleuth.sources import (
    GroundedDiscovery,
    PageExtractor,
    PageFetcher,
    SerperSearch,
    cap_text,
    html_to_text,
)
from tests.helpers import CannedGenerator, EchoGenerator, FailingGenerator

PAGE_HTML = """
<html>
  <head><style>body { color: red }</style><script>track()</script></head>
  <body>
    <nav>Home | Pricing | Blog</nav>
    <h1>Acme SMS</h1>
    <p>Argentina:   $0.031 per SMS</p>
    <footer>Copyright Acme</footer>
  </body>
</html>
"""

SERPER_BODY = {
    "answerBox": {"answer": "Acme SMS"},
    "organic": [
        {"position": 1, "title": "Acme SMS pricing", "link": "https://acme.example/pricing", "snippet": "From $0.031"},
        {"position": 2, "title": "Beta SMS", "link": "https://beta.example", "snippet": "Global routes"},
    ],
    "peopleAlsoAsk": [{"question": "Is Acme reliable?", "snippet": "Yes, 99.9% uptime"}],
}


def router(reader=None, direct=None):
    """Build a MockTransport that answers reader and direct requests separately."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        target = reader if request.url.host == "r.jina.ai" else direct
        if target is None:
            raise httpx.ConnectError("unreachable", request=request)
        status, text = target
        return httpx.Response(status, text=text)

    return httpx.MockTransport(handler), requests


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSerperSearch:
    def test_missing_key(self):
        assert SerperSearch().search("q").startswith("ERROR: SERPER_API_KEY not set")

    def test_formats_results(self):
        requests: list[httpx.Request] = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=SERPER_BODY)

        search = SerperSearch("serper-key", transport=httpx.MockTransport(handler))
        text = search.search("sms argentina")
        search.close()

        assert requests[0].headers["X-API-KEY"] == "serper-key"
        assert json.loads(requests[0].content) == {"q": "sms argentina", "num": 8}
        assert text.startswith('Search results for: "sms argentina"')
        assert "Quick answer: Acme SMS" in text
        assert "[1] Acme SMS pricing" in text
        assert "    URL: https://acme.example/pricing" in text
        assert "  Q: Is Acme reliable?" in text

    def test_no_results(self):
        search = SerperSearch("k", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        assert "No results." in search.search("q")

    def test_http_error_is_text(self):
        search = SerperSearch("k", transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        assert search.search("q").startswith("Search error:")


class TestGroundedDiscovery:
    def test_grounded_call(self):
        generator = EchoGenerator()
        text = GroundedDiscovery(generator).discover("sms providers latam", "need direct routes")
        assert "sms providers latam" in text
        assert "need direct routes" in text
        assert generator.calls == [{"grounded": True, "json_mode": False}]

    @pytest.mark.parametrize("exc", [LLMConfigError("GEMINI_API_KEY not set"), LLMRateLimitError()])
    def test_failure_is_text(self, exc):
        text = GroundedDiscovery(FailingGenerator(exc)).discover("q", "")
        assert text.startswith("Discovery error:")


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


class TestHtmlToText:
    def test_strips_chrome(self):
        text = html_to_text(PAGE_HTML)
        assert text == "Acme SMS Argentina: $0.031 per SMS"

    def test_cap_text(self):
        assert cap_text("abc", 5, "[cut {total}]") == "abc"
        assert cap_text("abcdefgh", 3, "[cut {total}]") == "abc\n\n[cut 8]"


class TestPageFetcher:
    def test_reader_first(self):
        transport, requests = router(reader=(200, "Reader text"), direct=(200, PAGE_HTML))
        fetcher = PageFetcher(transport=transport)
        assert fetcher.fetch("https://acme.example") == "Reader text"
        assert len(requests) == 1
        assert str(requests[0].url) == "https://r.jina.ai/https://acme.example"
        assert "Authorization" not in requests[0].headers

    def test_reader_key_sent(self):
        transport, requests = router(reader=(200, "Reader text"))
        PageFetcher("jina-key", transport=transport).fetch("https://acme.example")
        assert requests[0].headers["Authorization"] == "Bearer jina-key"

    def test_direct_fallback(self):
        transport, requests = router(reader=(503, ""), direct=(200, PAGE_HTML))
        fetcher = PageFetcher(transport=transport)
        assert fetcher.fetch("https://acme.example") == "Acme SMS Argentina: $0.031 per SMS"
        assert len(requests) == 2

    def test_reader_disabled(self):
        transport, requests = router(direct=(200, PAGE_HTML))
        PageFetcher(use_reader=False, transport=transport).fetch("https://acme.example")
        assert [r.url.host for r in requests] == ["acme.example"]

    def test_both_fail(self):
        transport, _ = router(reader=None, direct=(404, "not found"))
        with pytest.raises(PageFetchError, match="HTTP 404"):
            PageFetcher(transport=transport).fetch("https://acme.example")

    def test_read_reports_failure(self):
        transport, _ = router()
        text = PageFetcher(transport=transport).read("https://down.example")
        assert text.startswith("Could not read https://down.example: ConnectError")

    def test_read_truncates(self):
        transport, _ = router(reader=(200, "p" * 50))
        text = PageFetcher(transport=transport).read("https://acme.example", max_chars=20)
        assert text.startswith("p" * 20 + "\n\n")
        assert "Full page: 50 chars" in text
        assert "extract_page" in text


class TestPageExtractor:
    def test_extracts_with_goal(self):
        transport, _ = router(reader=(200, "Argentina $0.031/SMS, REST API"))
        generator = CannedGenerator("Price: $0.031 per SMS")
        extractor = PageExtractor(PageFetcher(transport=transport), generator)

        text = extractor.extract("https://acme.example/pricing", "per-SMS price to Argentina")

        assert text == "Extracted from https://acme.example/pricing:\n\nPrice: $0.031 per SMS"
        assert "per-SMS price to Argentina" in generator.prompts[0]
        assert "Argentina $0.031/SMS, REST API" in generator.prompts[0]

    def test_content_capped_before_distilling(self):
        transport, _ = router(reader=(200, "q" * 500))
        generator = EchoGenerator()
        PageExtractor(PageFetcher(transport=transport), generator, max_chars=100).extract("https://x.example", "g")
        assert "[Page truncated: 500 total chars]" in generator.prompts[0]
        assert "q" * 101 not in generator.prompts[0]

    def test_unreachable_page(self):
        transport, _ = router()
        extractor = PageExtractor(PageFetcher(transport=transport), EchoGenerator())
        assert extractor.extract("https://down.example", "g").startswith("Could not access https://down.example")

    def test_model_failure(self):
        transport, _ = router(reader=(200, "text"))
        extractor = PageExtractor(PageFetcher(transport=transport), FailingGenerator(LLMRateLimitError()))
        assert extractor.extract("https://x.example", "g").startswith("Extraction failed for https://x.example")
