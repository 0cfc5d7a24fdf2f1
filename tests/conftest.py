"""Shared test fixtures: scripted agents and a mock LLM, no network."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from agentwire.a2a.executor import A2ASendMessageExecutor
from agentwire.kernel.agent import BaseAgent
from agentwire.kernel.events import Event, EventActions
from agentwire.kernel.runner import Runner
from agentwire.llm.base import BaseLLMProvider, LLMResponse
from agentwire.sessions.service import InMemorySessionService
from agentwire.tools.builtins import register_builtin_tools
from agentwire.tools.registry import ToolRegistry
from agentwire.types import Content

APP = "test-app"


class ScriptedAgent(BaseAgent):
    """Emits a fixed list of steps, optionally failing or stalling.

    A step is either text or a dict of Event fields. ``fail_after`` raises
    once that many events were emitted, with ``error`` in place of a
    RuntimeError when given. ``delay`` sleeps before each step.
    """

    def __init__(
        self,
        name: str = "scripted",
        steps: list[str | dict[str, Any]] | None = None,
        fail_after: int | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        super().__init__(name)
        self.error = error
        self.steps = steps if steps is not None else ["ok"]
        self.fail_after = fail_after
        self.delay = delay
        self.seen: list[str] = []

    async def _run_async_impl(self, ctx):
        self.seen.append(ctx.user_text)
        for index, step in enumerate(self.steps):
            if self.fail_after is not None and index == self.fail_after:
                raise self.error or RuntimeError("scripted failure")
            if self.delay:
                await asyncio.sleep(self.delay)
            if isinstance(step, str):
                yield Event(author=self.name, content=Content.from_text(step, role="model"))
            else:
                yield Event(author=self.name, **step)
        if self.fail_after is not None and self.fail_after >= len(self.steps):
            raise self.error or RuntimeError("scripted failure")


class CountingAgent(BaseAgent):
    """Increments ``count`` in session state once per turn."""

    def __init__(self, name: str = "counter", delay: float = 0.0):
        super().__init__(name)
        self.delay = delay

    async def _run_async_impl(self, ctx):
        current = ctx.session.state.get("count", 0)
        if self.delay:
            await asyncio.sleep(self.delay)
        yield Event(
            author=self.name,
            content=Content.from_text(f"count={current + 1}", role="model"),
            actions=EventActions(state_delta={"count": current + 1}),
        )


class MockLLMProvider(BaseLLMProvider):
    """LLM provider that returns canned responses. No API calls."""

    def __init__(self, responses: list[LLMResponse] | None = None):
        self._responses = responses or []
        self._call_count = 0
        self.calls: list[dict] = []  # record all calls for assertions

    async def complete(self, messages, system=None, tools=None, max_tokens=4096):
        self.calls.append({
            "messages": list(messages),
            "system": system,
            "tools": tools,
            "max_tokens": max_tokens,
        })
        if self._call_count < len(self._responses):
            resp = self._responses[self._call_count]
            self._call_count += 1
            return resp
        return LLMResponse(
            content="Done.",
            stop_reason="end_turn",
            input_tokens=10,
            output_tokens=5,
        )


def transfer_step(target: str, text: str | None = None) -> dict[str, Any]:
    step: dict[str, Any] = {"actions": EventActions(transfer_to_agent=target)}
    if text is not None:
        step["content"] = Content.from_text(text, role="model")
    return step


@pytest.fixture
def mock_llm():
    return MockLLMProvider()


@pytest.fixture
def mock_llm_with_responses():
    def _factory(responses: list[LLMResponse]) -> MockLLMProvider:
        return MockLLMProvider(responses=responses)
    return _factory


@pytest.fixture
def tool_registry():
    registry = ToolRegistry()
    register_builtin_tools(registry)
    return registry


@pytest.fixture
def session_service():
    return InMemorySessionService()


@pytest.fixture
def make_runner(session_service):
    def _factory(agent: BaseAgent, timeout: float | None = None) -> Runner:
        return Runner(agent, app_name=APP, session_service=session_service, timeout=timeout)
    return _factory


@pytest.fixture
def make_executor(make_runner):
    def _factory(agent: BaseAgent, timeout: float | None = None) -> A2ASendMessageExecutor:
        return A2ASendMessageExecutor(make_runner(agent, timeout=timeout))
    return _factory


@pytest.fixture
def send_request():
    """Builds a message/send request body."""

    def _build(
        text: str | None = "hello",
        context_id: str | None = None,
        parts: list[dict] | None = None,
        request_id: int | str | None = 1,
        message_id: str = "m-1",
        role: str = "user",
        metadata: dict | None = None,
    ) -> dict[str, Any]:
        message: dict[str, Any] = {
            "kind": "message",
            "role": role,
            "messageId": message_id,
            "parts": parts if parts is not None else [{"kind": "text", "text": text}],
        }
        if context_id is not None:
            message["contextId"] = context_id
        params: dict[str, Any] = {"message": message}
        if metadata is not None:
            params["metadata"] = metadata
        return {"jsonrpc": "2.0", "id": request_id, "method": "message/send", "params": params}

    return _build


# Helper classes, exposed as fixtures
@pytest.fixture
def scripted_agent_cls():
    return ScriptedAgent


@pytest.fixture
def counting_agent_cls():
    return CountingAgent


@pytest.fixture
def transfer():
    return transfer_step
