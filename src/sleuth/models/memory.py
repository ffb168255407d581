"""Memory document models.

The memory store is one JSON document holding recent sessions and facts
accumulated per service across sessions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import Field

from sleuth.models.session import ResearchSession, _Record

MAX_SESSIONS = 50
MAX_SERVICE_NOTES = 10


class KnownService(_Record):
    """Cross-session fact record for a previously evaluated candidate."""

    url: Optional[str] = None
    last_checked: datetime
    facts: dict[str, str] = Field(default_factory=dict)
    verdict: Optional[str] = None
    notes: list[str] = Field(default_factory=list)


class MemoryDocument(_Record):
    """Full contents of the durable memory store."""

    sessions: list[ResearchSession] = Field(default_factory=list)
    known_services: dict[str, KnownService] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.sessions and not self.known_services


@dataclass(frozen=True)
class MemoryStats:
    """Summary counts for the memory store."""

    sessions: int
    services: int
    last_research: datetime | None = None
