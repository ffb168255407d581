"""Acceptance criteria models.

Hard criteria are binary and non-negotiable; soft criteria carry a weight
and are scored per candidate. Both are frozen once parsed for a session.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HardCriterion(BaseModel):
    """A binary acceptance condition."""

    model_config = ConfigDict(frozen=True)

    field: str
    description: str


class SoftCriterion(BaseModel):
    """A weighted, scored acceptance condition (weight 1-5)."""

    model_config = ConfigDict(frozen=True)

    description: str
    weight: int = Field(default=3, ge=1, le=5)


class CriteriaSet(BaseModel):
    """Ordered hard and soft criteria for one research session."""

    model_config = ConfigDict(frozen=True)

    hard: tuple[HardCriterion, ...] = ()
    soft: tuple[SoftCriterion, ...] = ()

    def is_complete(self) -> bool:
        """Return True when both hard and soft criteria are present."""
        return bool(self.hard) and bool(self.soft)
