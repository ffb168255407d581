"""Summarization prompt for research history compression.

The summary replaces the middle of the conversation, so it must keep every
concrete data point, verdict and rejection reason the agent has produced.
"""

from __future__ import annotations

PROGRESS_SUMMARY_INSTRUCTIONS: str = (
    "Create a CONCISE progress summary with these sections:\n\n"
    "## Search Progress\n"
    "- Queries executed (list briefly)\n"
    "- Sources visited (URL + what was found, 1 line each)\n\n"
    "## Candidates Evaluated\n"
    "For each candidate:\n"
    "- Name + URL\n"
    "- Verdict: PASS / FAIL / NEEDS_MORE_INFO\n"
    "- Key evidence for/against (1-2 lines)\n"
    "- Rejection reason if failed\n\n"
    "## Key Findings\n"
    "- Important facts discovered (pricing, features, limitations)\n"
    "- Contradictions or red flags noticed\n\n"
    "## Current Strategy\n"
    "- What approach is being used\n"
    "- What hasn't been tried yet\n"
    "- Suggested next steps based on progress\n\n"
    "RULES:\n"
    "- Preserve ALL specific data points (prices, percentages, names, URLs)\n"
    "- Preserve ALL verdicts and rejection reasons\n"
    "- Drop verbose tool outputs, keep only extracted facts\n"
    "- Keep it under 2000 words\n"
    "- Do NOT add your own analysis, just compress what happened"
)

ACKNOWLEDGEMENT: str = (
    "I'll begin researching this. Let me start by reviewing my progress so far."
)


def build_progress_summary_prompt(transcript: str) -> str:
    """Build the summarizer prompt for a flattened conversation transcript."""
    return (
        "You are a research progress summarizer. Below is a conversation "
        "between a research agent and its tools. Compress it into a "
        "structured progress report.\n\n"
        f"CONVERSATION TO COMPRESS:\n{transcript}\n\n"
        f"{PROGRESS_SUMMARY_INSTRUCTIONS}"
    )


def wrap_summary(summary: str, exchanges: int) -> str:
    """Frame a summary as a user turn the agent will treat as its own notes."""
    return (
        f"[RESEARCH PROGRESS SUMMARY - compressed from {exchanges} previous "
        f"exchanges]\n\n{summary}\n\n[END SUMMARY - continuing research from here]"
    )
