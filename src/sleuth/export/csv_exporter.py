"""CSV report exporter.

Writes three fixed sections into a directory, one file each:

- ``summary.csv``: one row per session (task, best match, counts, cost)
- ``candidates.csv``: one row per evaluated candidate
- ``search_log.csv``: one row per recorded query

Headers are written when a file is created. Every row starts with the
session id, and rows for a session already present in a file are not
written again.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sleuth.exceptions import ExportError

if TYPE_CHECKING:
    from sleuth.models.session import ResearchSession
    from sleuth.orchestrator.models import CostEstimate

logger = logging.getLogger(__name__)

DISCOVER_PREFIX = "[discover] "
_EMPTY = "-"

SUMMARY_HEADER = [
    "Session",
    "Date",
    "Task",
    "Status",
    "Best Match",
    "Candidates Checked",
    "Queries",
    "Cost ($)",
    "Conclusion",
]
CANDIDATES_HEADER = [
    "Session",
    "Date",
    "Session Task",
    "Name",
    "URL",
    "Verdict",
    "Rejection Reason",
    "Hard Criteria (details)",
    "Hard Pass Count",
    "Hard Total",
    "Soft Avg Score",
    "Soft Criteria (details)",
    "Notes",
]
SEARCH_LOG_HEADER = ["Session", "Date", "Session Task", "#", "Query Type", "Query"]


class CsvExporter:
    """Appends session reports to CSV files under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def export(self, session: ResearchSession, cost: CostEstimate | None = None) -> str:
        """Write the session to all three sections.

        Returns:
            The export directory as a string.

        Raises:
            ExportError: If a section cannot be written.
        """
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            self._append("summary.csv", SUMMARY_HEADER, session.id, [_summary_row(session, cost)])
            self._append(
                "candidates.csv",
                CANDIDATES_HEADER,
                session.id,
                [_candidate_row(session, c) for c in session.candidates],
            )
            self._append(
                "search_log.csv",
                SEARCH_LOG_HEADER,
                session.id,
                [_query_row(session, i, q) for i, q in enumerate(session.search_queries, 1)],
            )
        except OSError as exc:
            raise ExportError(f"Cannot write CSV export to {self._directory}: {exc}") from exc

        logger.info("Exported session %s to %s", session.id, self._directory)
        return str(self._directory)

    def _append(self, filename: str, header: list[str], session_id: str, rows: list[list[str]]) -> None:
        path = self._directory / filename
        exists = path.exists()
        if exists and session_id in _session_ids(path):
            logger.debug("Session %s already in %s, skipping", session_id, filename)
            return
        if not rows and exists:
            return

        with path.open("a", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            if not exists:
                writer.writerow(header)
            writer.writerows(rows)


def _session_ids(path: Path) -> set[str]:
    with path.open(newline="", encoding="utf-8") as fh:
        reader = csv.reader(fh)
        next(reader, None)
        return {row[0] for row in reader if row}


def _date(session: ResearchSession) -> str:
    return session.timestamp.strftime("%Y-%m-%d %H:%M")


def _summary_row(session: ResearchSession, cost: CostEstimate | None) -> list[str]:
    return [
        session.id,
        _date(session),
        session.task[:300],
        session.status.value,
        session.best_match or _EMPTY,
        str(len(session.candidates)),
        str(len(session.search_queries)),
        f"{cost.estimated_usd:.3f}" if cost else _EMPTY,
        session.conclusion[:500],
    ]


def _candidate_row(session: ResearchSession, candidate) -> list[str]:
    hard_details = "\n".join(
        f"{'PASS' if r.passed else 'FAIL'} {r.criterion}: {r.evidence}"
        for r in candidate.hard_results
    )
    soft_details = "\n".join(
        f"{s.score:g}/10 {s.criterion}: {s.reasoning}" for s in candidate.soft_scores
    )
    if candidate.soft_scores:
        avg = sum(s.score for s in candidate.soft_scores) / len(candidate.soft_scores)
        soft_avg = f"{avg:.1f}"
    else:
        soft_avg = _EMPTY

    return [
        session.id,
        _date(session),
        session.task[:150],
        candidate.name,
        candidate.url or _EMPTY,
        candidate.verdict.value.upper(),
        candidate.rejection_reason or _EMPTY,
        hard_details,
        str(candidate.hard_passed),
        str(len(candidate.hard_results)),
        soft_avg,
        soft_details,
        candidate.notes or _EMPTY,
    ]


def _query_row(session: ResearchSession, index: int, query: str) -> list[str]:
    discover = query.startswith(DISCOVER_PREFIX)
    return [
        session.id,
        _date(session),
        session.task[:150],
        str(index),
        "Discover" if discover else "Search",
        query[len(DISCOVER_PREFIX):] if discover else query,
    ]
