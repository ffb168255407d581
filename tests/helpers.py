"""Shared test helpers: scripted reasoning engines and fake collaborators.

No helper here touches the network.
"""

from __future__ import annotations

import json

from sleuth.models import (
    CandidateRecord,
    CriteriaSet,
    HardCriterion,
    HardResult,
    SoftCriterion,
    SoftScore,
    Verdict,
)


# ---------------------------------------------------------------------------
# OpenAI-format responses
# ---------------------------------------------------------------------------


def _usage(prompt_tokens: int, completion_tokens: int) -> dict:
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


def no_tool_call_response(
    text: str = "Final report.",
    prompt_tokens: int = 100,
    completion_tokens: int = 50,
) -> dict:
    """LLM response with no tool calls (finish intent)."""
    return {
        "choices": [{"message": {"role": "assistant", "content": text}}],
        "usage": _usage(prompt_tokens, completion_tokens),
    }


def tool_call_response(
    tool_name: str,
    arguments: dict,
    call_id: str = "call_1",
    text: str = "",
    prompt_tokens: int = 100,
    completion_tokens: int = 50,
) -> dict:
    """LLM response with a single tool call."""
    return multi_tool_call_response(
        [(tool_name, arguments, call_id)],
        text=text,
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
    )


def multi_tool_call_response(
    calls: list[tuple[str, dict, str]],
    text: str = "",
    prompt_tokens: int = 100,
    completion_tokens: int = 50,
) -> dict:
    """LLM response with multiple tool calls.

    Args:
        calls: List of (tool_name, arguments, call_id) tuples.
        text: Optional text content.
    """
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": text,
                    "tool_calls": [
                        {
                            "id": cid,
                            "type": "function",
                            "function": {"name": name, "arguments": json.dumps(args)},
                        }
                        for name, args, cid in calls
                    ],
                }
            }
        ],
        "usage": _usage(prompt_tokens, completion_tokens),
    }


class ScriptedLLM:
    """Reasoning engine that replays a script of responses.

    A script entry that is an exception instance is raised instead of
    returned. Once the script runs out the last entry repeats.
    """

    def __init__(self, script: list) -> None:
        self.script = list(script)
        self.calls: list[dict] = []
        self.closed = False

    def chat(self, messages, **kwargs):
        self.calls.append({"messages": [dict(m) for m in messages], **kwargs})
        idx = min(len(self.calls) - 1, len(self.script) - 1)
        entry = self.script[idx]
        if isinstance(entry, BaseException):
            raise entry
        return entry

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Text generators
# ---------------------------------------------------------------------------


class EchoGenerator:
    """Returns the prompt, so summaries contain everything they were given."""

    def __init__(self) -> None:
        self.prompts: list[str] = []
        self.calls: list[dict] = []

    def generate(self, prompt: str, *, grounded: bool = False, json_mode: bool = False) -> str:
        self.prompts.append(prompt)
        self.calls.append({"grounded": grounded, "json_mode": json_mode})
        return prompt


class CannedGenerator:
    """Returns a fixed reply."""

    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.prompts: list[str] = []

    def generate(self, prompt: str, *, grounded: bool = False, json_mode: bool = False) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingGenerator:
    """Raises the given exception on every call."""

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    def generate(self, prompt: str, *, grounded: bool = False, json_mode: bool = False) -> str:
        raise self.exc


# ---------------------------------------------------------------------------
# Search and page collaborators
# ---------------------------------------------------------------------------


class FakeSearcher:
    def __init__(self, reply: str = "[1] Acme SMS\n    URL: https://acme.example\n") -> None:
        self.reply = reply
        self.queries: list[str] = []

    def search(self, query: str) -> str:
        self.queries.append(query)
        return self.reply


class FakeDiscoverer:
    def __init__(self, reply: str = "Acme SMS and Beta SMS cover Argentina.") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def discover(self, query: str, context: str) -> str:
        self.calls.append((query, context))
        return self.reply


class FakeReader:
    def __init__(self, reply: str = "Page text") -> None:
        self.reply = reply

    def read(self, url: str) -> str:
        return self.reply


class FakeExtractor:
    def __init__(self, reply: str | None = None, exc: BaseException | None = None) -> None:
        self.reply = reply
        self.exc = exc

    def extract(self, url: str, goal: str) -> str:
        if self.exc is not None:
            raise self.exc
        return self.reply or f"Extracted from {url}:\n\n{goal}"


# ---------------------------------------------------------------------------
# Domain objects
# ---------------------------------------------------------------------------


SMS_TASK = "find an SMS provider with direct routes to Argentina, REST API, price under $0.05/SMS"


def sms_criteria() -> CriteriaSet:
    return CriteriaSet(
        hard=(
            HardCriterion(field="coverage", description="Direct routes to Argentina"),
            HardCriterion(field="price", description="Price under $0.05 per SMS"),
        ),
        soft=(SoftCriterion(description="Responsive support", weight=3),),
    )


def acme_evaluation(verdict: str = "pass", **overrides) -> dict:
    """Arguments for an ``evaluate`` call on Acme SMS."""
    args = {
        "name": "Acme SMS",
        "url": "https://acme.example",
        "hard_criteria": [
            {"criterion": "Direct routes to Argentina", "passed": True, "evidence": "Coverage page lists AR direct"},
            {"criterion": "Price under $0.05 per SMS", "passed": True, "evidence": "$0.031 per SMS"},
        ],
        "soft_criteria": [
            {"criterion": "Responsive support", "score": 8, "reasoning": "24/7 chat"},
        ],
        "verdict": verdict,
    }
    args.update(overrides)
    return args


def make_candidate(
    name: str = "Acme SMS",
    verdict: Verdict = Verdict.PASS,
    *,
    passed: tuple[bool, ...] = (True, True),
    rejection_reason: str | None = None,
    notes: str | None = None,
) -> CandidateRecord:
    return CandidateRecord(
        name=name,
        url=f"https://{name.lower().replace(' ', '')}.example",
        verdict=verdict,
        hard_results=tuple(
            HardResult(criterion=f"criterion {i}", passed=p, evidence=f"evidence {i}")
            for i, p in enumerate(passed, 1)
        ),
        soft_scores=(SoftScore(criterion="support", score=7, reasoning="ok"),),
        rejection_reason=rejection_reason,
        notes=notes,
    )
