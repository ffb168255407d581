"""Research toolkit: tool schemas, the gateway and the evaluation report."""

from sleuth.toolkit.definitions import get_all_tools
from sleuth.toolkit.evaluation import EvaluateArgs, format_report
from sleuth.toolkit.gateway import ToolGateway, truncate_result
from sleuth.toolkit.models import ToolDefinition, ToolKind, ToolResult

__all__ = [
    "ToolKind",
    "ToolDefinition",
    "ToolResult",
    "ToolGateway",
    "EvaluateArgs",
    "format_report",
    "get_all_tools",
    "truncate_result",
]
