"""Shared test fixtures for Sleuth.

Provides a file-backed memory store in a temporary directory and a clean
environment with no collaborator credentials.
"""

import pytest

from sleuth.memory import MemoryStore

_ENV_VARS = (
    "SLEUTH_OPENAI_API_KEY",
    "SLEUTH_OPENAI_BASE_URL",
    "SLEUTH_MODEL",
    "GEMINI_API_KEY",
    "SLEUTH_GEMINI_MODEL",
    "SERPER_API_KEY",
    "JINA_API_KEY",
    "SLEUTH_MEMORY_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove credentials so no test can reach a real service."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_path(tmp_path):
    return tmp_path / "memory.json"


@pytest.fixture
def memory(memory_path) -> MemoryStore:
    """Memory store backed by a file in a temporary directory."""
    return MemoryStore(memory_path)
