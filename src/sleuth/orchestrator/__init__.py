"""Research loop: configuration, result models and the ResearchAgent."""

from sleuth.orchestrator.config import AgentConfig, AgentState
from sleuth.orchestrator.loop import ResearchAgent
from sleuth.orchestrator.models import (
    CostEstimate,
    ResearchResult,
    StepResult,
    TokenUsage,
    ToolCall,
    estimate_cost,
)

__all__ = [
    "AgentConfig",
    "AgentState",
    "ResearchAgent",
    "ResearchResult",
    "StepResult",
    "ToolCall",
    "TokenUsage",
    "CostEstimate",
    "estimate_cost",
]
