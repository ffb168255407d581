"""History compression for the research loop.

Every few iterations the middle of the conversation is replaced by a
progress summary written by a cheap text-generation model:

    [original task] + [acknowledgement] + [summary] + [last N exchanges]

Messages are grouped into turns before slicing. A non-tool message is one
turn; a run of consecutive tool messages is one turn. Slicing on turn
boundaries keeps every tool message next to the assistant message that
requested it.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from sleuth.exceptions import CompressionError
from sleuth.prompts.summarize import (
    ACKNOWLEDGEMENT,
    build_progress_summary_prompt,
    wrap_summary,
)

if TYPE_CHECKING:
    from sleuth.llm.protocols import TextGenerator

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 3.5
_TOOL_ARGS_PREVIEW = 200
_TOOL_RESULT_PREVIEW = 1000


def estimate_tokens(messages: list[dict]) -> int:
    """Rough token estimate for a conversation (chars / 3.5)."""
    chars = 0
    for msg in messages:
        content = msg.get("content")
        if isinstance(content, str):
            chars += len(content)
        for call in msg.get("tool_calls") or []:
            chars += len(call.get("function", {}).get("arguments") or "")
    return math.ceil(chars / CHARS_PER_TOKEN)


def group_turns(messages: list[dict]) -> list[list[dict]]:
    """Group messages into turns. Consecutive tool messages share a turn."""
    turns: list[list[dict]] = []
    for msg in messages:
        if msg.get("role") == "tool" and turns and turns[-1][-1].get("role") == "tool":
            turns[-1].append(msg)
        else:
            turns.append([msg])
    return turns


def serialize_messages(messages: list[dict]) -> str:
    """Flatten messages into a readable transcript for the summarizer."""
    parts: list[str] = []
    for msg in messages:
        role = str(msg.get("role", "")).upper()
        content = msg.get("content")

        if role == "TOOL":
            text = content if isinstance(content, str) else str(content)
            preview = text[:_TOOL_RESULT_PREVIEW]
            ellipsis = "..." if len(text) >= _TOOL_RESULT_PREVIEW else ""
            parts.append(f"[TOOL_RESULT]: {preview}{ellipsis}")
            continue

        tool_calls = msg.get("tool_calls") or []
        if role == "ASSISTANT" and tool_calls:
            if isinstance(content, str) and content.strip():
                parts.append(f"[ASSISTANT - thinking]: {content}")
            for call in tool_calls:
                fn = call.get("function", {})
                args = (fn.get("arguments") or "")[:_TOOL_ARGS_PREVIEW]
                parts.append(f"[ASSISTANT - tool_call]: {fn.get('name', '?')}({args})")
            continue

        if isinstance(content, str):
            parts.append(f"[{role}]: {content}")

    return "\n\n".join(parts)


class HistoryCompressor:
    """Collapses the middle of a research conversation into a summary turn.

    Args:
        summarizer: Text generator used to write the progress summary.
        min_turns: Conversations with fewer turns are left alone.
        min_middle_turns: Minimum turns between the task and the tail.
    """

    def __init__(
        self,
        summarizer: TextGenerator,
        *,
        min_turns: int = 6,
        min_middle_turns: int = 4,
    ) -> None:
        self._summarizer = summarizer
        self._min_turns = min_turns
        self._min_middle_turns = min_middle_turns

    def compress(self, messages: list[dict], keep_last_exchanges: int = 2) -> list[dict]:
        """Return a compressed conversation, or ``messages`` unchanged.

        The input list is never modified. Summarizer failures are logged
        and fall back to the uncompressed history.
        """
        turns = group_turns(messages)
        if len(turns) < self._min_turns:
            return messages

        tail_count = keep_last_exchanges * 2
        tail_turns = turns[-tail_count:] if tail_count else []
        middle_turns = turns[1 : len(turns) - tail_count]
        if len(middle_turns) < self._min_middle_turns:
            return messages

        middle = [msg for turn in middle_turns for msg in turn]
        before = estimate_tokens(messages)
        logger.info(
            "Compressing history: ~%d tokens, %d messages to summarize",
            before,
            len(middle),
        )

        try:
            summary = self._summarize(serialize_messages(middle))
        except Exception as exc:
            logger.warning("Compression failed, keeping full history: %s", exc)
            return messages

        compressed = [
            *turns[0],
            {"role": "assistant", "content": ACKNOWLEDGEMENT},
            {"role": "user", "content": wrap_summary(summary, len(middle))},
            *(msg for turn in tail_turns for msg in turn),
        ]

        after = estimate_tokens(compressed)
        if before:
            logger.info(
                "Compressed history: %d -> %d tokens (%d%% reduction)",
                before,
                after,
                round((1 - after / before) * 100),
            )
        return compressed

    def _summarize(self, transcript: str) -> str:
        summary = self._summarizer.generate(build_progress_summary_prompt(transcript))
        if not summary or not summary.strip():
            raise CompressionError("Summarizer returned an empty summary")
        return summary
