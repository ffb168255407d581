"""LLM client infrastructure for Sleuth.

Provides the OpenAI-compatible reasoning-engine client, the Gemini
text-generation client, their protocols and the LLM error hierarchy.
"""

from sleuth.llm.client import OpenAIClient
from sleuth.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)
from sleuth.llm.gemini import GeminiClient
from sleuth.llm.protocols import LLMClient, TextGenerator

__all__ = [
    "OpenAIClient",
    "GeminiClient",
    "LLMClient",
    "TextGenerator",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
