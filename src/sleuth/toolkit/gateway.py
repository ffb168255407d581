"""ToolGateway: dispatches research tool calls to their collaborators.

``invoke()`` is the strict interface: it raises ToolError for unknown
tools, malformed arguments and collaborator failures. ``execute()`` wraps
it for the research loop and always returns a ToolResult.

Side effects land in the SessionState passed with each call, never in
the gateway itself, so one gateway can serve many sessions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from sleuth.exceptions import ToolError
from sleuth.toolkit.definitions import get_all_tools
from sleuth.toolkit.evaluation import EvaluateArgs, format_report
from sleuth.toolkit.models import ToolKind, ToolResult

if TYPE_CHECKING:
    from sleuth.models.session import SessionState
    from sleuth.orchestrator.models import ToolCall
    from sleuth.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = "[Truncated: {total} chars total. Key info above.]"


class Searcher(Protocol):
    def search(self, query: str) -> str: ...


class Discoverer(Protocol):
    def discover(self, query: str, context: str) -> str: ...


class PageReader(Protocol):
    def read(self, url: str) -> str: ...


class Extractor(Protocol):
    def extract(self, url: str, goal: str) -> str: ...


def truncate_result(text: str, max_chars: int) -> str:
    """Cap a tool result, appending the truncation notice when cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n" + TRUNCATION_NOTICE.format(total=len(text))


def _text_arg(tool: ToolKind, arguments: dict, key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ToolError(tool.value, f"missing or empty argument '{key}'")
    return value


class ToolGateway:
    """Uniform invocation interface over the five research tools.

    Usage::

        gateway = ToolGateway(searcher=SerperSearch(), reader=fetcher)
        state = SessionState()
        text = gateway.invoke("precise_search", {"query": "sms api"}, state)

    Collaborators left as None produce a descriptive text result instead
    of failing, so the reasoning engine can route around them.
    """

    def __init__(
        self,
        *,
        searcher: Searcher | None = None,
        discoverer: Discoverer | None = None,
        extractor: Extractor | None = None,
        reader: PageReader | None = None,
    ) -> None:
        self._searcher = searcher
        self._discoverer = discoverer
        self._extractor = extractor
        self._reader = reader
        self._tools: dict[ToolKind, ToolDefinition] = {
            tool.kind: tool
            for tool in get_all_tools(
                {
                    ToolKind.PRECISE_SEARCH: self._precise_search,
                    ToolKind.BROAD_DISCOVER: self._broad_discover,
                    ToolKind.EXTRACT_PAGE: self._extract_page,
                    ToolKind.READ_PAGE: self._read_page,
                    ToolKind.EVALUATE: self._evaluate,
                }
            )
        }

    @property
    def definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def schemas(self) -> list[dict]:
        """Tool schemas in OpenAI function-calling format."""
        return [tool.to_openai() for tool in self._tools.values()]

    def invoke(self, name: str, arguments: dict, state: SessionState) -> str:
        """Run one tool and return its text result.

        Raises:
            ToolError: Unknown tool, invalid arguments, or a collaborator
                raised. The original exception is attached as ``cause``.
        """
        kind = ToolKind.parse(name)
        if kind is None:
            raise ToolError(name, "Unknown tool")
        if not isinstance(arguments, dict):
            raise ToolError(name, "arguments must be an object")

        try:
            return self._tools[kind].handler(arguments, state)
        except ToolError:
            raise
        except ValidationError as exc:
            raise ToolError(
                name, f"invalid arguments: {exc.error_count()} validation error(s)", exc
            ) from exc
        except Exception as exc:
            raise ToolError(name, f"{type(exc).__name__}: {exc}", exc) from exc

    def execute(self, call: ToolCall, state: SessionState) -> ToolResult:
        """Run a tool call and return a structured result. Never raises."""
        try:
            output = self.invoke(call.name, call.arguments, state)
        except ToolError as exc:
            logger.debug("Tool %s failed: %s", call.name, exc, exc_info=exc.cause is not None)
            return ToolResult(tool_name=call.name, success=False, error=str(exc))
        return ToolResult(tool_name=call.name, success=True, output=output)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _precise_search(self, arguments: dict, state: SessionState) -> str:
        query = _text_arg(ToolKind.PRECISE_SEARCH, arguments, "query")
        state.queries.append(query)
        logger.info("[search] %s", query)
        if self._searcher is None:
            return "ERROR: precise search is not configured (set SERPER_API_KEY)."
        return self._searcher.search(query)

    def _broad_discover(self, arguments: dict, state: SessionState) -> str:
        query = _text_arg(ToolKind.BROAD_DISCOVER, arguments, "query")
        context = arguments.get("context") or ""
        state.queries.append(f"[discover] {query}")
        logger.info("[discover] %s", query)
        if self._discoverer is None:
            return "ERROR: broad discovery is not configured (set GEMINI_API_KEY)."
        return self._discoverer.discover(query, str(context))

    def _extract_page(self, arguments: dict, state: SessionState) -> str:
        url = _text_arg(ToolKind.EXTRACT_PAGE, arguments, "url")
        goal = _text_arg(ToolKind.EXTRACT_PAGE, arguments, "extraction_goal")
        logger.info("[extract] %s", url)
        if self._extractor is None:
            return f"Could not access {url}: page extraction is not configured."
        return self._extractor.extract(url, goal)

    def _read_page(self, arguments: dict, state: SessionState) -> str:
        url = _text_arg(ToolKind.READ_PAGE, arguments, "url")
        logger.info("[read] %s", url)
        if self._reader is None:
            return f"Could not read {url}: page reading is not configured."
        return self._reader.read(url)

    def _evaluate(self, arguments: dict, state: SessionState) -> str:
        candidate = EvaluateArgs.model_validate(arguments).to_record()
        state.candidates.append(candidate)
        logger.info("[evaluate] %s: %s", candidate.name, candidate.verdict.value.upper())
        return format_report(candidate)
