"""Prompts for the discovery and page-distillation collaborators."""

from __future__ import annotations


def build_discovery_prompt(query: str, context: str) -> str:
    """Prompt for grounded broad discovery."""
    return (
        f'Research query: "{query}"\n'
        f"Context: {context}\n\n"
        "Search the web thoroughly for this information. For each finding:\n"
        "- Name of company/service/product\n"
        "- Website URL (exact, not guessed)\n"
        "- Concrete facts: pricing, features, coverage, limitations\n"
        "- Source of information\n"
        "- Any red flags or concerns\n\n"
        "Be precise. Don't invent URLs or pricing. If unsure, say \"unverified\"."
    )


def build_extraction_prompt(url: str, content: str, goal: str) -> str:
    """Prompt for distilling fetched page content toward an extraction goal."""
    return (
        f"Source URL: {url}\n\n"
        f"PAGE CONTENT:\n{content}\n\n"
        "---\n\n"
        f"EXTRACTION TASK: {goal}\n\n"
        "Instructions:\n"
        "1. Extract ONLY information that is ACTUALLY PRESENT on this page\n"
        "2. For prices, quote the EXACT numbers and currencies shown\n"
        "3. For features/capabilities, quote the actual text or paraphrase precisely\n"
        '4. If information is NOT on this page, say "NOT FOUND ON THIS PAGE"\n'
        "5. Note if anything seems outdated, contradictory, or suspicious\n"
        "6. Include specific quotes as evidence where relevant\n\n"
        "Format your response clearly with labeled sections."
    )
