"""Toolkit data models for the research tool set.

The tool set is closed: ToolKind enumerates every tool the reasoning
engine may call, and the gateway refuses to start unless each kind has a
handler.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from sleuth.models.session import SessionState

logger = logging.getLogger(__name__)


class ToolKind(str, enum.Enum):
    """The five research tools, by wire name."""

    PRECISE_SEARCH = "precise_search"
    BROAD_DISCOVER = "broad_discover"
    EXTRACT_PAGE = "extract_page"
    READ_PAGE = "read_page"
    EVALUATE = "evaluate"

    @classmethod
    def parse(cls, name: str) -> ToolKind | None:
        """Return the kind for a wire name, or None if unknown."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ToolDefinition:
    """A tool schema plus the handler that serves it.

    Attributes:
        kind: Which research tool this is.
        description: Guidance for the reasoning engine on when to call it.
        parameters: JSON Schema dict for the arguments.
        handler: Called with the argument dict and the session state.
    """

    kind: ToolKind
    description: str
    parameters: dict
    handler: Callable[[dict, SessionState], str]

    @property
    def name(self) -> str:
        return self.kind.value

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolResult:
    """Structured result from executing a tool.

    Attributes:
        tool_name: Name of the tool that was executed.
        success: Whether execution succeeded.
        output: Text output on success.
        error: Error message on failure.
    """

    tool_name: str
    success: bool
    output: str = ""
    error: str = ""

    @property
    def content(self) -> str:
        """Text for the tool message sent back to the reasoning engine."""
        return self.output if self.success else f"Error: {self.error}"
