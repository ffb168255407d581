"""Evaluation tool: argument validation and the textual report."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from sleuth.models.session import CandidateRecord, HardResult, SoftScore, Verdict

_RULE = "-" * 50


class EvaluateArgs(BaseModel):
    """Arguments of the ``evaluate`` tool as sent by the reasoning engine."""

    name: str = Field(min_length=1)
    url: Optional[str] = None
    hard_criteria: list[HardResult] = Field(min_length=1)
    soft_criteria: list[SoftScore] = Field(default_factory=list)
    verdict: Verdict
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None

    def to_record(self) -> CandidateRecord:
        return CandidateRecord(
            name=self.name,
            url=self.url or None,
            verdict=self.verdict,
            hard_results=tuple(self.hard_criteria),
            soft_scores=tuple(self.soft_criteria),
            rejection_reason=self.rejection_reason or None,
            notes=self.notes or None,
        )


def format_report(candidate: CandidateRecord) -> str:
    """Render the deterministic evaluation report for a candidate."""
    total = len(candidate.hard_results)
    passed = candidate.hard_passed
    status = "ALL PASSED" if passed == total else "FAILED"

    verdict = candidate.verdict.value.upper()
    if candidate.rejection_reason:
        verdict += f" - {candidate.rejection_reason}"

    # verdict leads so clipped previews of the report still carry it
    lines = [f"EVALUATION: {candidate.name} [{verdict}]", _RULE]
    lines.append(f"Hard criteria: {passed}/{total} {status}")
    for r in candidate.hard_results:
        lines.append(f"  [{'PASS' if r.passed else 'FAIL'}] {r.criterion}")
        lines.append(f"     {r.evidence}")

    if candidate.soft_scores:
        avg = sum(s.score for s in candidate.soft_scores) / len(candidate.soft_scores)
        lines.append("")
        lines.append(f"Soft criteria: avg {avg:.1f}/10")
        for s in candidate.soft_scores:
            lines.append(f"  {s.score:g}/10 - {s.criterion}")
            lines.append(f"     {s.reasoning}")

    lines.append("")
    lines.append(f"Verdict: {verdict}")
    if candidate.notes:
        lines.append(f"Notes: {candidate.notes}")

    return "\n".join(lines) + "\n"
