"""File-backed research memory.

The whole store is a single JSON document. Every read loads it fresh and
every write rewrites it in full. There is no locking: with concurrent
writers the last full rewrite wins.

Before each new session the agent receives:
1. Past sessions whose task/conclusion share keywords with the new task
2. Known facts about previously evaluated services that look relevant
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from sleuth.exceptions import MemoryStoreError
from sleuth.memory.keywords import extract_keywords, overlap
from sleuth.models.memory import (
    MAX_SERVICE_NOTES,
    MAX_SESSIONS,
    KnownService,
    MemoryDocument,
    MemoryStats,
)

if TYPE_CHECKING:
    from sleuth.models.session import CandidateRecord, ResearchSession

logger = logging.getLogger(__name__)

NO_HISTORY = "No prior research history."
NO_RELEVANT_HISTORY = "No relevant prior research found for this task."

DEFAULT_MEMORY_PATH = "memory.json"
_MAX_SERVICES_IN_CONTEXT = 15
_MAX_QUERIES_IN_CONTEXT = 8


def default_memory_path() -> Path:
    """Resolve the memory path from SLEUTH_MEMORY_PATH or the working directory."""
    return Path(os.environ.get("SLEUTH_MEMORY_PATH") or DEFAULT_MEMORY_PATH)


class MemoryStore:
    """Durable record of past sessions and per-service facts.

    Usage::

        memory = MemoryStore("memory.json")
        context = memory.get_context("SMS provider for Argentina")
        ...
        memory.save_session(session)
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        max_context_chars: int = 8000,
    ) -> None:
        self._path = Path(path) if path is not None else default_memory_path()
        self._max_context_chars = max_context_chars

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> MemoryDocument:
        """Load the memory document, or an empty one if missing or unreadable."""
        doc, _ = self._read()
        return doc

    def get_context(self, task: str, max_sessions: int = 5) -> str:
        """Render past research relevant to ``task`` as a prompt section.

        Returns NO_HISTORY when the store is empty and NO_RELEVANT_HISTORY
        when nothing in it shares keywords with the task.
        """
        doc = self.load()
        if doc.is_empty():
            return NO_HISTORY

        task_words = extract_keywords(task)

        scored = [
            (overlap(task_words, extract_keywords(f"{s.task} {s.conclusion}")), s)
            for s in doc.sessions
        ]
        # sorted() is stable, so equal scores keep their stored order
        relevant = sorted(
            (item for item in scored if item[0] > 0),
            key=lambda item: item[0],
            reverse=True,
        )[:max_sessions]

        parts: list[str] = []
        if relevant:
            parts.append("## RELEVANT PAST RESEARCH\n")
            for _, session in relevant:
                parts.append(_render_session(session))

        services = [
            (name, info)
            for name, info in doc.known_services.items()
            if task_words & _service_keywords(name, info)
        ]
        if services:
            parts.append("## KNOWN SERVICES\n")
            for name, info in services[:_MAX_SERVICES_IN_CONTEXT]:
                parts.append(_render_service(name, info))

        if not parts:
            return NO_RELEVANT_HISTORY

        context = "\n".join(parts)
        if len(context) > self._max_context_chars:
            context = (
                context[: self._max_context_chars]
                + "\n[Memory context truncated]"
            )
        return context

    def save_session(self, session: ResearchSession) -> None:
        """Append a session and merge its candidates into known services.

        Keeps the most recent MAX_SESSIONS sessions and rewrites the whole
        document.

        Raises:
            MemoryStoreError: If the document cannot be written.
        """
        doc, readable = self._read()
        if not readable:
            self._quarantine()

        doc.sessions.append(session)
        for candidate in session.candidates:
            _upsert_service(doc, candidate, session)

        if len(doc.sessions) > MAX_SESSIONS:
            doc.sessions = doc.sessions[-MAX_SESSIONS:]

        self._write(doc)
        logger.info(
            "Saved session %s (%d candidates) to %s",
            session.id,
            len(session.candidates),
            self._path,
        )

    def stats(self) -> MemoryStats:
        """Return session/service counts and the latest research timestamp."""
        doc = self.load()
        return MemoryStats(
            sessions=len(doc.sessions),
            services=len(doc.known_services),
            last_research=doc.sessions[-1].timestamp if doc.sessions else None,
        )

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _read(self) -> tuple[MemoryDocument, bool]:
        """Return (document, readable). Missing files count as readable."""
        if not self._path.exists():
            return MemoryDocument(), True
        try:
            raw = self._path.read_text(encoding="utf-8")
            return MemoryDocument.model_validate_json(raw), True
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Failed to load memory from %s, starting fresh: %s", self._path, exc
            )
            return MemoryDocument(), False

    def _quarantine(self) -> None:
        """Keep an unreadable document aside instead of overwriting it."""
        target = self._path.with_name(self._path.name + ".corrupt")
        try:
            self._path.replace(target)
            logger.warning("Moved unreadable memory document to %s", target)
        except OSError as exc:
            logger.warning("Could not preserve unreadable memory document: %s", exc)

    def _write(self, doc: MemoryDocument) -> None:
        payload = doc.model_dump_json(indent=2, by_alias=True, exclude_none=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise MemoryStoreError(
                f"Cannot write memory document {self._path}: {exc}"
            ) from exc


def _service_key(name: str) -> str:
    return name.lower().strip()


def _service_keywords(name: str, info: KnownService) -> frozenset[str]:
    text = " ".join([name, *info.facts.values(), *info.notes])
    return extract_keywords(text)


def _upsert_service(
    doc: MemoryDocument, candidate: CandidateRecord, session: ResearchSession
) -> None:
    key = _service_key(candidate.name)
    svc = doc.known_services.get(key)
    if svc is None:
        svc = KnownService(last_checked=session.timestamp)
        doc.known_services[key] = svc

    svc.last_checked = session.timestamp
    if candidate.url:
        svc.url = candidate.url
    svc.verdict = candidate.verdict.value

    for hr in candidate.hard_results:
        svc.facts[hr.criterion] = f"{'YES' if hr.passed else 'NO'} - {hr.evidence}"
    for sr in candidate.soft_scores:
        svc.facts[f"soft:{sr.criterion}"] = f"{sr.score:g}/10 - {sr.reasoning}"

    if candidate.rejection_reason:
        svc.notes.append(
            f"Rejected ({session.timestamp.date().isoformat()}): "
            f"{candidate.rejection_reason}"
        )
    if candidate.notes:
        svc.notes.append(candidate.notes)
    if len(svc.notes) > MAX_SERVICE_NOTES:
        svc.notes = svc.notes[-MAX_SERVICE_NOTES:]


def _render_session(session: ResearchSession) -> str:
    lines = [
        f"### Session: {session.timestamp.date().isoformat()}",
        f"Task: {session.task}",
        f"Conclusion: {session.conclusion}",
    ]
    if session.candidates:
        lines.append("Candidates evaluated:")
        for c in session.candidates:
            line = (
                f"  - {c.name} [{c.verdict.value.upper()}] - hard: "
                f"{c.hard_passed}/{len(c.hard_results)}"
            )
            if c.rejection_reason:
                line += f" - rejected: {c.rejection_reason}"
            lines.append(line)
    if session.search_queries:
        queries = ", ".join(session.search_queries[:_MAX_QUERIES_IN_CONTEXT])
        lines.append(f"Queries tried: {queries}")
    return "\n".join(lines) + "\n"


def _render_service(name: str, info: KnownService) -> str:
    header = f"**{name}**"
    if info.url:
        header += f" ({info.url})"
    lines = [header, f"  Last checked: {info.last_checked.date().isoformat()}"]
    if info.verdict:
        lines.append(f"  Previous verdict: {info.verdict}")
    for key, value in info.facts.items():
        lines.append(f"  {key}: {value}")
    if info.notes:
        lines.append(f"  Notes: {'; '.join(info.notes[-3:])}")
    return "\n".join(lines) + "\n"
