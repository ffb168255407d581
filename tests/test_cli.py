"""CLI tests for Sleuth -- all three commands via Click's CliRunner.

Commands receive Settings and a fake runtime factory through ``obj`` so
no test builds real HTTP clients.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from types import SimpleNamespace

import click
import httpx
import pytest
from click.testing import CliRunner

from sleuth.cli import cli
from sleuth.cli.commands.run import parse_hard, parse_soft
from sleuth.memory import MemoryStore
from sleuth.models import ResearchSession
from sleuth.orchestrator import ResearchAgent
from sleuth.settings import Settings
from sleuth.toolkit import ToolGateway
from tests.helpers import (
    CannedGenerator,
    FakeSearcher,
    ScriptedLLM,
    make_candidate,
    no_tool_call_response,
    tool_call_response,
)

PARSED = {
    "task": "Find an SMS provider for Argentina",
    "criteria": {
        "hard": [{"field": "routes", "description": "Direct routes to Argentina"}],
        "soft": [{"description": "Cheap", "weight": 4}],
    },
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


class FakeRuntime:
    """Runtime factory that records how it was opened."""

    def __init__(self, memory_path, script=None, generator_reply: str = "") -> None:
        self.memory = MemoryStore(memory_path)
        self.llm = ScriptedLLM(script or [no_tool_call_response("Acme SMS is the best match.")])
        self.generator = CannedGenerator(generator_reply)
        self.opened: list[dict] = []
        self.agents: list[ResearchAgent] = []

    @contextmanager
    def __call__(self, settings, config=None, *, export_dir=None):
        self.opened.append({"settings": settings, "config": config, "export_dir": export_dir})
        agent = ResearchAgent(
            self.llm,
            ToolGateway(searcher=FakeSearcher()),
            self.memory,
            config=config,
        )
        self.agents.append(agent)
        yield SimpleNamespace(agent=agent, memory=self.memory, generator=self.generator)


def invoke(runner, args, settings, factory=None):
    obj = {"settings": settings}
    if factory is not None:
        obj["runtime_factory"] = factory
    return runner.invoke(cli, args, obj=obj, catch_exceptions=False)


@pytest.fixture
def settings(memory_path) -> Settings:
    return Settings(openai_api_key="sk-test", memory_path=memory_path)


# ---------------------------------------------------------------------------
# Option parsing
# ---------------------------------------------------------------------------


class TestCriteriaOptions:
    def test_hard_with_and_without_field(self):
        parsed = parse_hard(("price=Under $0.05 per SMS", "Direct routes"))
        assert [(c.field, c.description) for c in parsed] == [
            ("price", "Under $0.05 per SMS"),
            ("hard_2", "Direct routes"),
        ]

    def test_soft_weights(self):
        parsed = parse_soft(("5:Good docs", "Cheap", "support: 24/7"))
        assert [(c.weight, c.description) for c in parsed] == [
            (5, "Good docs"),
            (3, "Cheap"),
            (3, "support: 24/7"),
        ]

    def test_soft_weight_out_of_range(self):
        with pytest.raises(click.BadParameter, match="1-5"):
            parse_soft(("9:Too important",))

    def test_hard_empty_description(self):
        with pytest.raises(click.BadParameter):
            parse_hard(("price=",))


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_runs_and_persists(self, runner, settings, memory_path):
        factory = FakeRuntime(memory_path)
        result = invoke(
            runner,
            ["run", "SMS provider for Argentina", "--hard", "routes=Direct routes", "--soft", "4:Cheap"],
            settings,
            factory,
        )

        assert result.exit_code == 0, result.output
        assert "Acme SMS is the best match." in result.output
        assert "Direct routes" in result.output
        assert len(MemoryStore(memory_path).load().sessions) == 1
        assert factory.opened[0]["settings"] is settings
        assert factory.opened[0]["config"].max_iterations == 10

    def test_options_forwarded(self, runner, settings, memory_path, tmp_path):
        factory = FakeRuntime(memory_path)
        invoke(
            runner,
            [
                "run", "task", "--hard", "a=b", "--soft", "c",
                "--max-iterations", "3", "--export-dir", str(tmp_path / "out"),
            ],
            settings,
            factory,
        )
        opened = factory.opened[0]
        assert opened["config"].max_iterations == 3
        assert opened["export_dir"] == str(tmp_path / "out")

    def test_progress_printed(self, runner, settings, memory_path):
        factory = FakeRuntime(
            memory_path,
            script=[tool_call_response("precise_search", {"query": "q"}), no_tool_call_response("done")],
        )
        result = invoke(runner, ["run", "task", "--hard", "a=b", "--soft", "c"], settings, factory)
        assert "Iteration 1/10" in result.output
        assert "Iteration 2/10" in result.output

    def test_incomplete_criteria_rejected(self, runner, settings, memory_path):
        factory = FakeRuntime(memory_path)
        result = invoke(runner, ["run", "task", "--hard", "a=b"], settings, factory)
        assert result.exit_code == 1
        assert "At least one hard and one soft criterion" in result.output
        assert factory.opened == []

    def test_criteria_file(self, runner, settings, memory_path, tmp_path):
        path = tmp_path / "criteria.json"
        path.write_text(json.dumps(PARSED), encoding="utf-8")
        factory = FakeRuntime(memory_path)

        result = invoke(runner, ["run", "task", "--criteria-file", str(path)], settings, factory)

        assert result.exit_code == 0, result.output
        session = MemoryStore(memory_path).load().sessions[0]
        assert session.criteria.hard[0].field == "routes"
        assert session.criteria.soft[0].weight == 4

    def test_bad_criteria_file(self, runner, settings, memory_path, tmp_path):
        path = tmp_path / "criteria.json"
        path.write_text("{broken", encoding="utf-8")
        result = runner.invoke(
            cli,
            ["run", "task", "--criteria-file", str(path)],
            obj={"settings": settings, "runtime_factory": FakeRuntime(memory_path)},
        )
        assert result.exit_code == 2
        assert "--criteria-file" in result.output

    def test_engine_http_failure_reported(self, runner, settings, memory_path):
        request = httpx.Request("POST", "https://api.example/v1/chat/completions")
        outage = httpx.HTTPStatusError(
            "Server error '502 Bad Gateway'", request=request, response=httpx.Response(502, request=request)
        )
        factory = FakeRuntime(memory_path, script=[outage])

        result = invoke(runner, ["run", "task", "--hard", "a=b", "--soft", "c"], settings, factory)

        assert result.exit_code == 1
        assert "502 Bad Gateway" in result.output
        assert MemoryStore(memory_path).load().sessions == []

    def test_missing_engine_key(self, runner, memory_path):
        settings = Settings(memory_path=memory_path)
        result = invoke(runner, ["run", "task", "--hard", "a=b", "--soft", "c"], settings)
        assert result.exit_code == 1
        assert "SLEUTH_OPENAI_API_KEY" in result.output


# ---------------------------------------------------------------------------
# ask
# ---------------------------------------------------------------------------


class TestAskCommand:
    def test_parsed_criteria_shown_and_used(self, runner, settings, memory_path):
        factory = FakeRuntime(memory_path, generator_reply=json.dumps(PARSED))

        result = invoke(runner, ["ask", "нужен SMS провайдер для Аргентины"], settings, factory)

        assert result.exit_code == 0, result.output
        assert "Find an SMS provider for Argentina" in result.output
        assert "Warning" not in result.output
        session = MemoryStore(memory_path).load().sessions[0]
        assert session.task == PARSED["task"]

    def test_fallback_warning(self, runner, settings, memory_path):
        factory = FakeRuntime(memory_path, generator_reply="not json")

        result = invoke(runner, ["ask", "something vague"], settings, factory)

        assert result.exit_code == 0, result.output
        assert "Could not parse criteria" in result.output
        session = MemoryStore(memory_path).load().sessions[0]
        assert session.task == "something vague"
        assert len(session.criteria.hard) == 2

    def test_connection_failure_reported(self, runner, settings, memory_path):
        factory = FakeRuntime(
            memory_path,
            script=[httpx.ConnectError("connection refused")],
            generator_reply=json.dumps(PARSED),
        )

        result = invoke(runner, ["ask", "SMS provider for Argentina"], settings, factory)

        assert result.exit_code == 1
        assert "connection refused" in result.output


# ---------------------------------------------------------------------------
# memory
# ---------------------------------------------------------------------------


class TestMemoryCommand:
    def test_empty(self, runner, settings):
        result = invoke(runner, ["memory"], settings)
        assert result.exit_code == 0
        assert "Sessions: 0" in result.output
        assert "No research yet." in result.output

    def test_stats_and_recent(self, runner, settings, memory_path):
        store = MemoryStore(memory_path)
        store.save_session(ResearchSession(task="Old task", best_match=None))
        store.save_session(
            ResearchSession(task="SMS for AR", candidates=[make_candidate()], best_match="Acme SMS")
        )

        result = invoke(runner, ["memory", "--recent", "1"], settings)

        assert result.exit_code == 0
        assert "Sessions: 2" in result.output
        assert "Known services: 1" in result.output
        assert "SMS for AR" in result.output
        assert "Old task" not in result.output
