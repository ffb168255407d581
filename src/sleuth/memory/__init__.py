"""Persistent cross-session research memory."""

from sleuth.memory.keywords import STOP_WORDS, extract_keywords
from sleuth.memory.store import (
    NO_HISTORY,
    NO_RELEVANT_HISTORY,
    MemoryStore,
    default_memory_path,
)

__all__ = [
    "MemoryStore",
    "NO_HISTORY",
    "NO_RELEVANT_HISTORY",
    "STOP_WORDS",
    "default_memory_path",
    "extract_keywords",
]
