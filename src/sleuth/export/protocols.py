"""Export protocol and the no-op exporter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sleuth.models.session import ResearchSession
    from sleuth.orchestrator.models import CostEstimate


@runtime_checkable
class Exporter(Protocol):
    """Receives a finished session for external reporting.

    ``export()`` returns a reference to the written report (a URL or a
    path), or an empty string when nothing was written. Calling it again
    for the same session must not duplicate rows.
    """

    def export(self, session: ResearchSession, cost: CostEstimate | None = None) -> str:
        ...


class NullExporter:
    """Exporter that writes nothing."""

    def export(self, session: ResearchSession, cost: CostEstimate | None = None) -> str:
        return ""
