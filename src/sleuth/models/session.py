"""Session and candidate models.

A CandidateRecord is created once per ``evaluate`` tool invocation and
never mutated afterwards. A ResearchSession is assembled when the research
loop terminates and persisted exactly once.

SessionState is the in-flight accumulator for a single run. It is created
by the loop, passed to every gateway invocation, and never shared between
sessions.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sleuth.models.criteria import CriteriaSet


class Verdict(str, enum.Enum):
    """Outcome of evaluating a candidate."""

    PASS = "pass"
    FAIL = "fail"
    NEEDS_MORE_INFO = "needs_more_info"

    @classmethod
    def _missing_(cls, value: object) -> Verdict | None:
        # Older memory documents recorded inconclusive candidates as "partial".
        if value == "partial":
            return cls.NEEDS_MORE_INFO
        return None


class SessionStatus(str, enum.Enum):
    """How a persisted session ended."""

    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class _Record(BaseModel):
    """Base for persisted records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class HardResult(_Record):
    model_config = ConfigDict(frozen=True)

    criterion: str
    passed: bool
    evidence: str = ""


class SoftScore(_Record):
    model_config = ConfigDict(frozen=True)

    criterion: str
    score: float = Field(ge=0, le=10)
    reasoning: str = ""


class CandidateRecord(_Record):
    """A concrete option evaluated against the criteria set."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: Optional[str] = None
    verdict: Verdict
    hard_results: tuple[HardResult, ...] = ()
    soft_scores: tuple[SoftScore, ...] = ()
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None

    @property
    def hard_passed(self) -> int:
        """Number of hard criteria this candidate passed."""
        return sum(1 for r in self.hard_results if r.passed)


class ResearchSession(_Record):
    """One complete research run, as persisted to memory."""

    id: str = Field(default_factory=lambda: f"session_{uuid.uuid4().hex[:12]}")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    task: str
    criteria: CriteriaSet = Field(default_factory=CriteriaSet)
    candidates: list[CandidateRecord] = Field(default_factory=list)
    best_match: Optional[str] = None
    search_queries: list[str] = Field(default_factory=list)
    conclusion: str = ""
    status: SessionStatus = SessionStatus.COMPLETED


@dataclass
class SessionState:
    """Session-scoped accumulators filled in by tool execution.

    Nothing recorded here is durable until the loop persists the session.
    """

    candidates: list[CandidateRecord] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)

    @property
    def has_work(self) -> bool:
        """Return True once any query or evaluation has been recorded."""
        return bool(self.candidates or self.queries)

    def best_match(self) -> str | None:
        """Name of the first candidate with a passing verdict."""
        for candidate in self.candidates:
            if candidate.verdict == Verdict.PASS:
                return candidate.name
        return None
