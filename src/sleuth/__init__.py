"""Sleuth: criteria-driven research agent with persistent memory.

The agent searches the web, reads pages, evaluates candidates against hard
and soft criteria, and remembers what it learned for the next session.
"""

from sleuth._version import __version__

# Research loop
from sleuth.orchestrator import (
    AgentConfig,
    AgentState,
    CostEstimate,
    ResearchAgent,
    ResearchResult,
    StepResult,
    estimate_cost,
)

# Collaborators
from sleuth.compression import HistoryCompressor
from sleuth.export import CsvExporter, Exporter, NullExporter
from sleuth.memory import MemoryStore
from sleuth.toolkit import ToolGateway, ToolKind, ToolResult

# Domain models
from sleuth.models import (
    CandidateRecord,
    CriteriaSet,
    HardCriterion,
    HardResult,
    ResearchSession,
    SessionState,
    SessionStatus,
    SoftCriterion,
    SoftScore,
    Verdict,
)

# Request parsing and wiring
from sleuth.parsing import ParsedRequest, parse_request
from sleuth.runtime import Runtime, open_runtime
from sleuth.settings import Settings

# Exceptions
from sleuth.exceptions import (
    CompressionError,
    CriteriaParseError,
    ExportError,
    MemoryStoreError,
    OrchestratorError,
    PageFetchError,
    SleuthError,
    ToolError,
)
from sleuth.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)

__all__ = [
    "__version__",
    # Research loop
    "ResearchAgent",
    "AgentConfig",
    "AgentState",
    "ResearchResult",
    "StepResult",
    "CostEstimate",
    "estimate_cost",
    # Collaborators
    "HistoryCompressor",
    "MemoryStore",
    "ToolGateway",
    "ToolKind",
    "ToolResult",
    "Exporter",
    "NullExporter",
    "CsvExporter",
    # Domain models
    "CriteriaSet",
    "HardCriterion",
    "SoftCriterion",
    "Verdict",
    "HardResult",
    "SoftScore",
    "CandidateRecord",
    "ResearchSession",
    "SessionState",
    "SessionStatus",
    # Request parsing and wiring
    "ParsedRequest",
    "parse_request",
    "Settings",
    "Runtime",
    "open_runtime",
    # Exceptions
    "SleuthError",
    "ToolError",
    "OrchestratorError",
    "MemoryStoreError",
    "CompressionError",
    "ExportError",
    "PageFetchError",
    "CriteriaParseError",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
