"""Hand-written tool schemas for the five research tools.

Each schema carries an action-oriented description that tells the
reasoning engine when the tool is worth its cost. Handlers are supplied
by the gateway; this module only knows the wire contract.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sleuth.toolkit.models import ToolDefinition, ToolKind

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sleuth.models.session import SessionState

logger = logging.getLogger(__name__)


DESCRIPTIONS: dict[ToolKind, str] = {
    ToolKind.PRECISE_SEARCH: (
        "Precise Google search. Returns exact URLs, titles and snippets. "
        "Best for finding specific companies, pricing pages, documentation "
        "and forum threads. Returns 8 results. Use specific queries: industry "
        "terms, company names, 'vs' comparisons. Try both English and local-"
        "language queries for regional services."
    ),
    ToolKind.BROAD_DISCOVER: (
        "Broad AI-assisted web research. Returns summarized findings, not raw "
        "links. Best for initial discovery, 'what options exist', market "
        "overviews and alternatives to known services. Slower than "
        "precise_search but gives more synthesized context."
    ),
    ToolKind.EXTRACT_PAGE: (
        "Visit a URL and extract specific information. A sub-agent fetches "
        "the full page and pulls out exactly what you ask for. Best for "
        "pricing pages, feature lists, API docs, coverage lists and terms of "
        "service. Be VERY specific about what to extract."
    ),
    ToolKind.READ_PAGE: (
        "Fetch a page and return its raw text to you directly. Use when you "
        "need to read the page yourself: reviews, forum threads, comparison "
        "articles where nuance matters. Content is capped at 12k chars; for "
        "longer pages use extract_page."
    ),
    ToolKind.EVALUATE: (
        "Record a formal candidate evaluation against the criteria. ONLY use "
        "after gathering sufficient evidence; the evaluation is saved to "
        "persistent memory. Be honest: if evidence is missing, mark the "
        "verdict needs_more_info instead of guessing."
    ),
}


PARAMETERS: dict[ToolKind, dict] = {
    ToolKind.PRECISE_SEARCH: {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Search query. Be specific.",
            },
        },
        "required": ["query"],
    },
    ToolKind.BROAD_DISCOVER: {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Research query."},
            "context": {
                "type": "string",
                "description": "What you are looking for and why. Helps focus the search.",
            },
        },
        "required": ["query", "context"],
    },
    ToolKind.EXTRACT_PAGE: {
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "Full URL to visit."},
            "extraction_goal": {
                "type": "string",
                "description": (
                    "Precise extraction task, e.g. 'Find per-SMS pricing to "
                    "Argentina, supported API protocols, uptime SLA, and whether "
                    "they require a minimum volume commitment'."
                ),
            },
        },
        "required": ["url", "extraction_goal"],
    },
    ToolKind.READ_PAGE: {
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "URL to read."},
        },
        "required": ["url"],
    },
    ToolKind.EVALUATE: {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Candidate name."},
            "url": {"type": "string", "description": "Website."},
            "hard_criteria": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "criterion": {"type": "string"},
                        "passed": {"type": "boolean"},
                        "evidence": {"type": "string"},
                    },
                    "required": ["criterion", "passed", "evidence"],
                },
            },
            "soft_criteria": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "criterion": {"type": "string"},
                        "score": {"type": "number", "minimum": 0, "maximum": 10},
                        "reasoning": {"type": "string"},
                    },
                    "required": ["criterion", "score", "reasoning"],
                },
            },
            "verdict": {
                "type": "string",
                "enum": ["pass", "fail", "needs_more_info"],
            },
            "rejection_reason": {
                "type": "string",
                "description": "If verdict=fail, brief reason why.",
            },
            "notes": {
                "type": "string",
                "description": "Additional observations, risks, follow-ups.",
            },
        },
        "required": ["name", "hard_criteria", "verdict"],
    },
}


def get_all_tools(
    handlers: Mapping[ToolKind, Callable[[dict, SessionState], str]],
) -> list[ToolDefinition]:
    """Bind a handler to every tool schema.

    Args:
        handlers: One handler per ToolKind.

    Returns:
        ToolDefinitions in ToolKind declaration order.

    Raises:
        ValueError: If any ToolKind has no handler.
    """
    missing = [kind.value for kind in ToolKind if kind not in handlers]
    if missing:
        raise ValueError(f"No handler registered for tool(s): {', '.join(missing)}")

    return [
        ToolDefinition(
            kind=kind,
            description=DESCRIPTIONS[kind],
            parameters=PARAMETERS[kind],
            handler=handlers[kind],
        )
        for kind in ToolKind
    ]
