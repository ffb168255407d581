"""Prompt for turning a free-text request into structured criteria."""

from __future__ import annotations


def build_criteria_prompt(user_text: str) -> str:
    """Build the JSON-mode prompt for criteria parsing.

    Input may be in any language; the task description comes back in English.
    """
    return f"""Parse this research request into structured criteria.
Input may be in Russian, English, or mixed.

Request: "{user_text}"

Return JSON:
{{
  "task": "Detailed English description of what to search for (expand on user's request with context)",
  "criteria": {{
    "hard": [
      {{"field": "short_snake_name", "description": "Criterion that MUST be met"}}
    ],
    "soft": [
      {{"description": "Desired but negotiable criterion", "weight": 3}}
    ]
  }}
}}

Rules:
- "must", "strictly", "обязательно", price limits, technical requirements -> HARD
- "preferably", "would be nice", "желательно", subjective -> SOFT
- Ambiguous -> SOFT weight 3
- weight: 1=nice, 2=somewhat, 3=important, 4=very, 5=near-mandatory
- Minimum 2 hard + 2 soft. Infer reasonable ones if the user is vague.
- Be specific in descriptions: include numbers, countries, technologies mentioned."""
