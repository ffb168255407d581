"""Domain models for Sleuth: criteria, candidates, sessions and memory."""

from sleuth.models.criteria import CriteriaSet, HardCriterion, SoftCriterion
from sleuth.models.memory import (
    MAX_SERVICE_NOTES,
    MAX_SESSIONS,
    KnownService,
    MemoryDocument,
    MemoryStats,
)
from sleuth.models.session import (
    CandidateRecord,
    HardResult,
    ResearchSession,
    SessionState,
    SessionStatus,
    SoftScore,
    Verdict,
)

__all__ = [
    "HardCriterion",
    "SoftCriterion",
    "CriteriaSet",
    "Verdict",
    "HardResult",
    "SoftScore",
    "CandidateRecord",
    "ResearchSession",
    "SessionState",
    "SessionStatus",
    "KnownService",
    "MemoryDocument",
    "MemoryStats",
    "MAX_SESSIONS",
    "MAX_SERVICE_NOTES",
]
