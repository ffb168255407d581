"""Core research loop.

Provides the ResearchAgent class that runs a bounded tool-calling loop:
seed the conversation with the task, send tools + conversation to the
reasoning engine, execute tool calls through the gateway, repeat until the
engine replies without tool calls or the iteration cap is reached. The
conversation is compressed at fixed iteration boundaries, and the session
is persisted to memory and handed to the exporter when the loop ends.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from typing import TYPE_CHECKING, Any

import tenacity

from sleuth.exceptions import MemoryStoreError, OrchestratorError
from sleuth.llm.client import OpenAIClient
from sleuth.llm.errors import LLMRateLimitError
from sleuth.memory.store import NO_HISTORY, NO_RELEVANT_HISTORY
from sleuth.models.session import ResearchSession, SessionState, SessionStatus
from sleuth.orchestrator.config import AgentConfig, AgentState
from sleuth.orchestrator.models import (
    ResearchResult,
    StepResult,
    TokenUsage,
    ToolCall,
    estimate_cost,
)
from sleuth.prompts.system import build_system_prompt
from sleuth.toolkit.gateway import truncate_result
from sleuth.toolkit.models import ToolResult

if TYPE_CHECKING:
    from sleuth.compression import HistoryCompressor
    from sleuth.export.protocols import Exporter
    from sleuth.llm.protocols import LLMClient
    from sleuth.memory.store import MemoryStore
    from sleuth.models.criteria import CriteriaSet
    from sleuth.orchestrator.models import CostEstimate
    from sleuth.toolkit.gateway import ToolGateway

logger = logging.getLogger(__name__)


class ResearchAgent:
    """Criteria-driven research agent.

    Collaborators are injected and owned by the caller; the agent never
    closes them. One instance runs one session at a time. Concurrent
    sessions use separate instances that may share collaborators and the
    memory store.

    Usage::

        agent = ResearchAgent(llm, gateway, memory, compressor=compressor)
        result = agent.run("find an SMS provider ...", criteria)
        print(result.answer)
    """

    def __init__(
        self,
        llm: LLMClient,
        gateway: ToolGateway,
        memory: MemoryStore,
        *,
        compressor: HistoryCompressor | None = None,
        exporter: Exporter | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        self._llm = llm
        self._gateway = gateway
        self._memory = memory
        self._compressor = compressor
        self._exporter = exporter
        self._config = config or AgentConfig()
        self._state = AgentState.IDLE
        self._stop_event = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        """Return the current agent state."""
        return self._state

    @property
    def config(self) -> AgentConfig:
        return self._config

    def run(self, task: str, criteria: CriteriaSet) -> ResearchResult:
        """Research ``task`` against ``criteria`` until done or capped.

        Returns:
            ResearchResult describing the finished, exhausted or stopped run.

        Raises:
            LLMRateLimitError: Rate limiting outlasted every retry attempt.
            LLMClientError: Any other reasoning-engine failure. Nothing is
                persisted in that case.
            OrchestratorError: The agent is already running a session.
        """
        if self._state == AgentState.RUNNING:
            raise OrchestratorError("Agent is already running a session")

        cfg = self._config
        session_state = SessionState()
        usage = TokenUsage()
        steps: list[StepResult] = []
        iterations = 0
        answer: str | None = None
        self._state = AgentState.RUNNING

        try:
            memory_context = self._memory.get_context(task)
            system_prompt = build_system_prompt(criteria, memory_context)
            messages: list[dict[str, Any]] = [{"role": "user", "content": task}]
            tools = self._gateway.schemas()

            logger.info(
                "Research starting: %d hard + %d soft criteria",
                len(criteria.hard),
                len(criteria.soft),
            )
            if memory_context not in (NO_HISTORY, NO_RELEVANT_HISTORY):
                self._progress("Loaded relevant memory from past sessions")

            while iterations < cfg.max_iterations:
                if self._stop_event.is_set():
                    break
                iterations += 1
                self._progress(f"Iteration {iterations}/{cfg.max_iterations}")

                if self._is_compression_boundary(iterations):
                    messages = self._compress(messages)

                response = self._call_llm(system_prompt, messages, tools)
                usage.add(*OpenAIClient.extract_usage(response))

                tool_calls = self._extract_tool_calls(response)
                if not tool_calls:
                    answer = self._extract_text(response)
                    break

                results: list[ToolResult] = []
                for tc in tool_calls:
                    result = self._execute_tool_call(tc, session_state)
                    step = StepResult(
                        iteration=iterations,
                        step=len(steps) + 1,
                        tool_call=tc,
                        result_output=result.output,
                        result_error=result.error,
                        success=result.success,
                    )
                    steps.append(step)
                    results.append(result)
                    self._notify_step(step)

                messages.extend(self._format_tool_results(response, tool_calls, results))

            cost = estimate_cost(
                usage.input_tokens,
                usage.output_tokens,
                cfg.input_cost_per_million,
                cfg.output_cost_per_million,
            )

            if self._stop_event.is_set():
                return self._finish_stopped(task, criteria, session_state, iterations, steps, cost)

            if answer is not None:
                self._state = AgentState.FINISHED
                session = self._build_session(
                    task,
                    criteria,
                    session_state,
                    conclusion=answer[: cfg.conclusion_chars],
                    status=SessionStatus.COMPLETED,
                )
            else:
                self._state = AgentState.EXHAUSTED
                answer = (
                    f"Research stopped after {cfg.max_iterations} iterations. "
                    f"Evaluated {len(session_state.candidates)} candidates. "
                    "Results saved to memory."
                )
                session = self._build_session(
                    task,
                    criteria,
                    session_state,
                    conclusion=(
                        f"Reached max iterations ({cfg.max_iterations}). "
                        f"Evaluated {len(session_state.candidates)} candidates."
                    ),
                    status=SessionStatus.EXHAUSTED,
                )

            saved = self._persist(session)
            export_ref = self._export(session, cost)
            logger.info(
                "Research %s after %d iterations: %d candidates, $%.3f (%d in + %d out)",
                self._state.value,
                iterations,
                len(session_state.candidates),
                cost.estimated_usd,
                cost.input_tokens,
                cost.output_tokens,
            )

            return ResearchResult(
                answer=answer,
                iterations=iterations,
                tool_calls=len(steps),
                candidates_evaluated=len(session_state.candidates),
                state=self._state,
                cost=cost,
                export_ref=export_ref,
                session_id=session.id if saved else None,
                steps=tuple(steps),
            )
        finally:
            if self._state == AgentState.RUNNING:
                self._state = AgentState.IDLE

    def stop(self) -> None:
        """Signal the agent to stop.

        The loop exits before its next iteration, or before persisting a
        finished answer if the engine has already replied.
        """
        self._stop_event.set()

    def reset(self) -> None:
        """Reset the agent for reuse.

        Clears the stop signal and returns to IDLE state.
        """
        self._stop_event.clear()
        self._state = AgentState.IDLE

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _is_compression_boundary(self, iteration: int) -> bool:
        every = self._config.compress_every
        return iteration > 1 and (iteration - 1) % every == 0

    def _compress(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if self._compressor is None:
            return messages
        compressed = self._compressor.compress(messages, self._config.keep_last_exchanges)
        if compressed is not messages:
            self._progress(f"Compressed history: {len(messages)} -> {len(compressed)} messages")
        return compressed

    def _call_llm(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict],
    ) -> dict:
        """Call the reasoning engine, retrying only on rate limits.

        Uses tenacity.Retrying programmatically so the attempt count and
        backoff come from AgentConfig.
        """
        cfg = self._config
        kwargs: dict[str, Any] = {"tools": tools, "max_tokens": cfg.max_tokens}
        if cfg.model:
            kwargs["model"] = cfg.model
        if cfg.temperature is not None:
            kwargs["temperature"] = cfg.temperature

        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception_type(LLMRateLimitError),
            wait=self._rate_limit_wait,
            stop=tenacity.stop_after_attempt(cfg.max_attempts),
            before_sleep=self._before_retry_sleep,
            reraise=True,
        )
        return retryer(
            self._llm.chat,
            [{"role": "system", "content": system_prompt}, *messages],
            **kwargs,
        )

    def _rate_limit_wait(self, retry_state: tenacity.RetryCallState) -> float:
        cfg = self._config
        return min(cfg.retry_backoff_seconds * retry_state.attempt_number, cfg.retry_backoff_cap)

    def _before_retry_sleep(self, retry_state: tenacity.RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Rate limited, waiting %.0fs (attempt %d/%d)",
            wait,
            retry_state.attempt_number,
            self._config.max_attempts,
        )
        self._progress(f"Rate limited, waiting {wait:.0f}s")

    def _extract_tool_calls(self, response: dict) -> list[ToolCall]:
        """Parse OpenAI-format response to extract tool calls.

        Returns:
            List of ToolCall instances. Empty means finish intent.
        """
        try:
            choices = response.get("choices", [])
            if not choices:
                return []
            raw_calls = choices[0].get("message", {}).get("tool_calls") or []

            result: list[ToolCall] = []
            for raw in raw_calls:
                call_id = raw.get("id") or f"call_{uuid.uuid4().hex[:8]}"
                func = raw.get("function", {})
                name = func.get("name", "")
                raw_args = func.get("arguments") or "{}"
                try:
                    arguments = json.loads(raw_args) if isinstance(raw_args, str) else raw_args
                except json.JSONDecodeError:
                    arguments = {}
                    logger.warning("Malformed JSON in tool call arguments for %s", name)
                result.append(ToolCall(id=call_id, name=name, arguments=arguments))
            return result
        except (AttributeError, KeyError, IndexError, TypeError) as exc:
            logger.debug("Failed to extract tool calls: %s", exc)
            return []

    @staticmethod
    def _extract_text(response: dict) -> str:
        """Join every textual part of the engine's reply."""
        try:
            content = response["choices"][0]["message"].get("content")
        except (KeyError, IndexError, TypeError):
            return ""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return "\n".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return ""

    def _execute_tool_call(self, tc: ToolCall, session_state: SessionState) -> ToolResult:
        result = self._gateway.execute(tc, session_state)
        limit = self._config.max_tool_result_chars
        if result.success:
            output = truncate_result(result.output, limit)
            if output is not result.output:
                result = ToolResult(tool_name=tc.name, success=True, output=output)
        else:
            logger.info("Tool %s failed: %s", tc.name, result.error)
            error = truncate_result(result.error, limit)
            if error is not result.error:
                result = ToolResult(tool_name=tc.name, success=False, error=error)
        if tc.name == "evaluate" and result.success:
            latest = session_state.candidates[-1]
            self._progress(f"Evaluated {latest.name}: {latest.verdict.value.upper()}")
        return result

    def _format_tool_results(
        self,
        response: dict,
        tool_calls: list[ToolCall],
        results: list[ToolResult],
    ) -> list[dict]:
        """Format tool execution results for the conversation.

        Returns the assistant message (with its tool_calls intact) followed
        by one tool message per call, in call order.
        """
        formatted: list[dict] = []

        try:
            formatted.append(copy.deepcopy(response["choices"][0]["message"]))
        except (KeyError, IndexError, TypeError):
            formatted.append({"role": "assistant", "content": ""})

        for tc, tr in zip(tool_calls, results):
            formatted.append({
                "role": "tool",
                "tool_call_id": tc.id,
                "content": tr.content,
            })

        return formatted

    def _build_session(
        self,
        task: str,
        criteria: CriteriaSet,
        session_state: SessionState,
        *,
        conclusion: str,
        status: SessionStatus,
    ) -> ResearchSession:
        return ResearchSession(
            task=task,
            criteria=criteria,
            candidates=list(session_state.candidates),
            best_match=session_state.best_match(),
            search_queries=list(session_state.queries),
            conclusion=conclusion,
            status=status,
        )

    def _finish_stopped(
        self,
        task: str,
        criteria: CriteriaSet,
        session_state: SessionState,
        iterations: int,
        steps: list[StepResult],
        cost: CostEstimate,
    ) -> ResearchResult:
        self._state = AgentState.STOPPED
        saved_id: str | None = None
        if session_state.has_work:
            session = self._build_session(
                task,
                criteria,
                session_state,
                conclusion=(
                    f"Cancelled after {iterations} iterations. "
                    f"Evaluated {len(session_state.candidates)} candidates."
                ),
                status=SessionStatus.CANCELLED,
            )
            if self._persist(session):
                saved_id = session.id
        logger.info("Research stopped after %d iterations", iterations)
        return ResearchResult(
            answer=f"Research cancelled after {iterations} iterations.",
            iterations=iterations,
            tool_calls=len(steps),
            candidates_evaluated=len(session_state.candidates),
            state=AgentState.STOPPED,
            cost=cost,
            session_id=saved_id,
            steps=tuple(steps),
        )

    def _persist(self, session: ResearchSession) -> bool:
        try:
            self._memory.save_session(session)
        except MemoryStoreError as exc:
            logger.error("Failed to save session %s: %s", session.id, exc)
            return False
        return True

    def _export(self, session: ResearchSession, cost: CostEstimate) -> str | None:
        if self._exporter is None:
            return None
        try:
            ref = self._exporter.export(session, cost)
        except Exception as exc:
            logger.warning("Export failed for session %s: %s", session.id, exc, exc_info=True)
            return None
        return ref or None

    def _notify_step(self, step: StepResult) -> None:
        if self._config.on_step is None:
            return
        try:
            self._config.on_step(step)
        except Exception:
            logger.debug("on_step callback error", exc_info=True)

    def _progress(self, message: str) -> None:
        logger.debug(message)
        if self._config.on_progress is None:
            return
        try:
            self._config.on_progress(message)
        except Exception:
            logger.debug("on_progress callback error", exc_info=True)
