"""The Agent capability: anything that turns a user turn into events."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, AsyncIterator

from agentwire.exceptions import LlmCallsLimitExceededError
from agentwire.kernel.events import Event
from agentwire.types import Content, RunConfig, new_uuid

if TYPE_CHECKING:
    from agentwire.sessions.service import InMemorySessionService
    from agentwire.sessions.session import Session

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class InvocationContext:
    """Everything an agent may look at while producing one turn.

    The session is borrowed for the turn only; agents must not keep it.
    """

    def __init__(
        self,
        session: Session,
        user_content: Content,
        run_config: RunConfig | None = None,
        session_service: InMemorySessionService | None = None,
        invocation_id: str | None = None,
    ):
        self.invocation_id = invocation_id or f"e-{new_uuid()}"
        self.session = session
        self.user_content = user_content
        self.run_config = run_config or RunConfig()
        self.session_service = session_service
        self.llm_calls = 0

    @property
    def user_text(self) -> str:
        return self.user_content.text

    def increment_llm_call_count(self) -> None:
        self.llm_calls += 1
        limit = self.run_config.max_llm_calls
        if limit > 0 and self.llm_calls > limit:
            raise LlmCallsLimitExceededError(
                f"Max number of LLM calls ({limit}) exceeded in invocation {self.invocation_id}"
            )


class BaseAgent(ABC):
    """A conversational agent.

    Subclasses implement ``_run_async_impl`` as an async generator. Callers
    consume ``run_async``, which yields events lazily and in emission order.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        sub_agents: list[BaseAgent] | None = None,
    ):
        if not _NAME_RE.match(name):
            raise ValueError(f"Agent name must be a valid identifier, got {name!r}")
        if name == "user":
            raise ValueError("Agent name 'user' is reserved for end-user input")
        self.name = name
        self.description = description
        self.parent_agent: BaseAgent | None = None
        self.sub_agents: list[BaseAgent] = list(sub_agents or [])
        for sub in self.sub_agents:
            if sub.parent_agent is not None:
                raise ValueError(
                    f"Agent {sub.name} already has parent {sub.parent_agent.name}"
                )
            sub.parent_agent = self

    @property
    def root_agent(self) -> BaseAgent:
        agent = self
        while agent.parent_agent is not None:
            agent = agent.parent_agent
        return agent

    def find_agent(self, name: str) -> BaseAgent | None:
        """Depth-first lookup of ``name`` in this agent's tree."""
        if self.name == name:
            return self
        for sub in self.sub_agents:
            found = sub.find_agent(name)
            if found is not None:
                return found
        return None

    async def run_async(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        async for event in self._run_async_impl(ctx):
            yield event

    @abstractmethod
    def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
