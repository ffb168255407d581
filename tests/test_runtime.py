"""Tests for runtime construction from settings."""

from __future__ import annotations

import logging

import pytest

from sleuth.llm.errors import LLMConfigError
from sleuth.orchestrator import AgentConfig, ResearchAgent
from sleuth.runtime import open_runtime
from sleuth.settings import Settings


def test_wires_collaborators(tmp_path):
    settings = Settings(openai_api_key="sk-test", memory_path=tmp_path / "m.json")
    config = AgentConfig(max_iterations=2)

    with open_runtime(settings, config, export_dir=tmp_path / "out") as rt:
        assert isinstance(rt.agent, ResearchAgent)
        assert rt.agent.config is config
        assert rt.memory.path == tmp_path / "m.json"
        assert not rt.generator.configured


def test_warns_about_missing_collaborators(tmp_path, caplog):
    settings = Settings(openai_api_key="sk-test", memory_path=tmp_path / "m.json")
    with caplog.at_level(logging.WARNING, logger="sleuth.runtime"):
        with open_runtime(settings):
            pass
    assert "GEMINI_API_KEY not set" in caplog.text
    assert "SERPER_API_KEY not set" in caplog.text


def test_requires_engine_key(tmp_path):
    with pytest.raises(LLMConfigError):
        with open_runtime(Settings(memory_path=tmp_path / "m.json")):
            pass
