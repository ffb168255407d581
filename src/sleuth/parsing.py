"""Free-text research requests to structured criteria.

``parse_request`` makes a single JSON-mode call to a text generator. When
the call fails or the reply is unusable, it substitutes generic fallback
criteria and says so on the returned ParsedRequest, so callers can tell
the user their request was not understood precisely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, Field, ValidationError

from sleuth.exceptions import CriteriaParseError
from sleuth.llm.errors import LLMClientError
from sleuth.models.criteria import CriteriaSet, HardCriterion, SoftCriterion
from sleuth.prompts.criteria import build_criteria_prompt

if TYPE_CHECKING:
    from sleuth.llm.protocols import TextGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedRequest:
    """A research task with its criteria.

    Attributes:
        task: Task description handed to the research loop.
        criteria: Criteria for the session.
        used_fallback: True when the generic fallback criteria were used.
        fallback_reason: Why parsing fell back, empty otherwise.
    """

    task: str
    criteria: CriteriaSet
    used_fallback: bool = False
    fallback_reason: str = ""


class _Payload(BaseModel):
    task: str = Field(min_length=1)
    criteria: CriteriaSet


def fallback_criteria(text: str) -> CriteriaSet:
    """Generic criteria used when a request cannot be parsed."""
    return CriteriaSet(
        hard=(
            HardCriterion(
                field="exists",
                description="Must be a real, currently operational service",
            ),
            HardCriterion(
                field="core_match",
                description=f"Must match core request: {text[:300]}",
            ),
        ),
        soft=(
            SoftCriterion(description="Good reputation and established presence", weight=3),
            SoftCriterion(description="Reasonable and transparent pricing", weight=3),
        ),
    )


def _parse_payload(raw: str) -> tuple[str, CriteriaSet]:
    try:
        payload = _Payload.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise CriteriaParseError(f"Invalid criteria document: {exc}") from exc
    if not payload.criteria.is_complete():
        raise CriteriaParseError("Criteria document needs at least one hard and one soft criterion")
    return payload.task, payload.criteria


def parse_request(
    text: str,
    generator: TextGenerator,
    *,
    strict: bool = False,
) -> ParsedRequest:
    """Parse a natural-language request into a task and criteria.

    Args:
        text: The user's request, in any language.
        generator: Text generator used in JSON mode.
        strict: Raise instead of falling back.

    Raises:
        CriteriaParseError: Only when ``strict`` is set and parsing failed.
    """
    try:
        raw = generator.generate(build_criteria_prompt(text), json_mode=True)
        task, criteria = _parse_payload(raw)
    except (CriteriaParseError, LLMClientError, httpx.HTTPError) as exc:
        if strict:
            if isinstance(exc, CriteriaParseError):
                raise
            raise CriteriaParseError(str(exc)) from exc
        reason = f"{type(exc).__name__}: {exc}"
        logger.warning("Criteria parsing failed, using fallback criteria: %s", reason)
        return ParsedRequest(
            task=text,
            criteria=fallback_criteria(text),
            used_fallback=True,
            fallback_reason=reason,
        )

    logger.info("Parsed request: %d hard + %d soft criteria", len(criteria.hard), len(criteria.soft))
    return ParsedRequest(task=task, criteria=criteria)
