"""Sleuth exception hierarchy.

All Sleuth-specific exceptions inherit from SleuthError.
"""


class SleuthError(Exception):
    """Base exception for all Sleuth errors."""


class ToolError(SleuthError):
    """Raised when a tool invocation fails.

    Attributes:
        tool_name: Name of the tool that was invoked.
        cause: The underlying exception, or None for argument errors.
    """

    def __init__(
        self, tool_name: str, message: str, cause: BaseException | None = None
    ) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"{tool_name}: {message}")


class OrchestratorError(SleuthError):
    """Raised when the research loop encounters an unrecoverable error."""


class MemoryStoreError(SleuthError):
    """Raised when the memory document cannot be written."""


class CompressionError(SleuthError):
    """Raised when history compression fails."""


class ExportError(SleuthError):
    """Raised when exporting a session fails."""


class PageFetchError(SleuthError):
    """Raised when a page cannot be retrieved by any strategy."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(reason)


class CriteriaParseError(SleuthError):
    """Raised when a free-text request cannot be parsed into criteria."""
