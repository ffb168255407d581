"""Research agent configuration types.

Provides AgentState and AgentConfig for the research loop.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from sleuth.orchestrator.models import StepResult


class AgentState(str, enum.Enum):
    """States the research agent can be in during its lifecycle.

    ``FINISHED`` means the reasoning engine declared it was done,
    ``EXHAUSTED`` means the iteration cap was hit first, and ``STOPPED``
    means the run was cancelled through ``stop()``.
    """

    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    EXHAUSTED = "exhausted"
    STOPPED = "stopped"


@dataclass
class AgentConfig:
    """Configuration for the research loop.

    Mutable dataclass: callers may adjust settings between runs.

    Attributes:
        max_iterations: Hard cap on reasoning-engine calls per session.
        compress_every: Compress the conversation before iteration
            ``k * compress_every + 1`` for every k >= 1.
        keep_last_exchanges: Raw exchanges kept verbatim after compression.
        max_tool_result_chars: Cap applied to each tool result before it
            enters the conversation.
        max_attempts: Total engine-call attempts when rate limited.
        retry_backoff_seconds: Wait before retry n is this times n.
        retry_backoff_cap: Upper bound on a single retry wait.
        model: Model identifier (None = client default).
        temperature: Sampling temperature, or None for the server default.
        max_tokens: Maximum tokens per engine response.
        input_cost_per_million: USD per million input tokens.
        output_cost_per_million: USD per million output tokens.
        conclusion_chars: Length of the answer prefix stored as the
            session conclusion.
        on_step: Callback invoked after each tool call completes.
        on_progress: Callback receiving short human-readable status lines.
    """

    max_iterations: int = 10
    compress_every: int = 3
    keep_last_exchanges: int = 2
    max_tool_result_chars: int = 4000
    max_attempts: int = 5
    retry_backoff_seconds: float = 15.0
    retry_backoff_cap: float = 60.0
    model: str | None = None
    temperature: float | None = None
    max_tokens: int = 4096
    input_cost_per_million: float = 3.0
    output_cost_per_million: float = 15.0
    conclusion_chars: int = 500
    on_step: Callable[[StepResult], None] | None = None
    on_progress: Callable[[str], None] | None = None

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.compress_every < 1:
            raise ValueError("compress_every must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
