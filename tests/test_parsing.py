"""Tests for free-text request parsing and its fallback criteria."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from sleuth.exceptions import CriteriaParseError
from sleuth.llm.errors import LLMConfigError
from sleuth.parsing import fallback_criteria, parse_request
from tests.helpers import CannedGenerator, FailingGenerator

REQUEST = "нужен SMS провайдер для Аргентины, обязательно прямые маршруты, желательно дешево"

PARSED = {
    "task": "Find an SMS provider with direct routes to Argentina, preferably cheap",
    "criteria": {
        "hard": [{"field": "direct_routes", "description": "Direct routes to Argentina"}],
        "soft": [{"description": "Low price per SMS", "weight": 4}],
    },
}


class TestParseRequest:
    def test_parses_json_reply(self):
        generator = CannedGenerator(json.dumps(PARSED))

        parsed = parse_request(REQUEST, generator)

        assert not parsed.used_fallback
        assert parsed.task == PARSED["task"]
        assert parsed.criteria.hard[0].field == "direct_routes"
        assert parsed.criteria.soft[0].weight == 4
        assert REQUEST in generator.prompts[0]

    def test_soft_weight_defaults(self):
        doc = json.loads(json.dumps(PARSED))
        del doc["criteria"]["soft"][0]["weight"]
        parsed = parse_request(REQUEST, CannedGenerator(json.dumps(doc)))
        assert parsed.criteria.soft[0].weight == 3

    @pytest.mark.parametrize(
        "reply",
        [
            "not json at all",
            "[]",
            json.dumps({"task": "x", "criteria": {"hard": [], "soft": []}}),
            json.dumps({"task": "x", "criteria": {"hard": [{"field": "a", "description": "b"}], "soft": [{"description": "c", "weight": 9}]}}),
        ],
    )
    def test_unusable_reply_falls_back(self, reply):
        parsed = parse_request(REQUEST, CannedGenerator(reply))

        assert parsed.used_fallback
        assert parsed.fallback_reason.startswith("CriteriaParseError")
        assert parsed.task == REQUEST
        assert parsed.criteria == fallback_criteria(REQUEST)

    @pytest.mark.parametrize(
        "exc",
        [LLMConfigError("GEMINI_API_KEY not set"), httpx.ConnectError("down")],
    )
    def test_generator_failure_falls_back(self, exc):
        parsed = parse_request(REQUEST, FailingGenerator(exc))
        assert parsed.used_fallback
        assert type(exc).__name__ in parsed.fallback_reason

    def test_fallback_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sleuth.parsing"):
            parse_request(REQUEST, CannedGenerator("nope"))
        assert "fallback criteria" in caplog.text

    def test_strict_raises(self):
        with pytest.raises(CriteriaParseError):
            parse_request(REQUEST, CannedGenerator("nope"), strict=True)

    def test_strict_wraps_generator_errors(self):
        with pytest.raises(CriteriaParseError, match="GEMINI_API_KEY"):
            parse_request(REQUEST, FailingGenerator(LLMConfigError("GEMINI_API_KEY not set")), strict=True)


class TestFallbackCriteria:
    def test_complete(self):
        criteria = fallback_criteria("anything")
        assert criteria.is_complete()
        assert len(criteria.hard) == 2
        assert len(criteria.soft) == 2

    def test_request_embedded_and_capped(self):
        criteria = fallback_criteria("x" * 1000)
        core = criteria.hard[1].description
        assert core == "Must match core request: " + "x" * 300
