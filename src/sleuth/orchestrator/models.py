"""Research loop result models.

Provides ToolCall, StepResult, TokenUsage, CostEstimate and
ResearchResult, plus the pure ``estimate_cost`` function.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sleuth.orchestrator.config import AgentState


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the reasoning engine."""

    id: str
    name: str
    arguments: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StepResult:
    """Result of a single tool call within an iteration.

    Frozen: step results are immutable records of what happened.
    """

    iteration: int
    step: int
    tool_call: ToolCall
    result_output: str = ""
    result_error: str = ""
    success: bool = True


@dataclass
class TokenUsage:
    """Running token totals reported by the reasoning engine."""

    input_tokens: int = 0
    output_tokens: int = 0

    def add(self, input_tokens: int, output_tokens: int) -> None:
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens


@dataclass(frozen=True)
class CostEstimate:
    input_tokens: int
    output_tokens: int
    estimated_usd: float


def estimate_cost(
    input_tokens: int,
    output_tokens: int,
    input_rate: float = 3.0,
    output_rate: float = 15.0,
) -> CostEstimate:
    """Estimate USD cost from token counts.

    Args:
        input_tokens: Prompt tokens consumed.
        output_tokens: Completion tokens produced.
        input_rate: USD per million input tokens.
        output_rate: USD per million output tokens.
    """
    usd = input_tokens / 1_000_000 * input_rate + output_tokens / 1_000_000 * output_rate
    return CostEstimate(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        estimated_usd=usd,
    )


@dataclass(frozen=True)
class ResearchResult:
    """Final result of a research run.

    Frozen: the result is immutable once the run completes.

    Attributes:
        answer: Final report text, or a stop notice.
        iterations: Reasoning-engine iterations performed.
        tool_calls: Total tool calls executed.
        candidates_evaluated: Candidates recorded through ``evaluate``.
        state: Terminal AgentState.
        cost: Token cost estimate for the engine calls made.
        export_ref: Export location, None if nothing was exported.
        session_id: Id of the persisted session, None if nothing was saved.
        steps: Every tool call made during the run.
    """

    answer: str
    iterations: int
    tool_calls: int
    candidates_evaluated: int
    state: AgentState
    cost: CostEstimate | None = None
    export_ref: str | None = None
    session_id: str | None = None
    steps: tuple[StepResult, ...] = ()

    @property
    def failed_steps(self) -> list[StepResult]:
        """Return all tool calls that failed."""
        return [s for s in self.steps if not s.success]
