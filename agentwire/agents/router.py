"""RouterAgent: hands the turn to a sub-agent chosen by keyword."""

from __future__ import annotations

import logging
import re
from contextlib import aclosing
from typing import AsyncIterator

from agentwire.kernel.agent import BaseAgent, InvocationContext
from agentwire.kernel.events import Event, EventActions
from agentwire.types import Content, ContentPart, FunctionCall, FunctionResponse

_logger = logging.getLogger(__name__)

TRANSFER_TOOL = "transfer_to_agent"


def transfer_events(
    ctx: InvocationContext, author: str, target: str, call_id: str | None = None,
) -> list[Event]:
    """The call/response pair that announces a hand-off to ``target``."""
    call = FunctionCall(name=TRANSFER_TOOL, args={"agent_name": target})
    if call_id:
        call = call.model_copy(update={"id": call_id})
    return [
        Event(
            invocation_id=ctx.invocation_id,
            author=author,
            content=Content(role="model", parts=[ContentPart(function_call=call)]),
        ),
        Event(
            invocation_id=ctx.invocation_id,
            author=author,
            content=Content(role="user", parts=[ContentPart(function_response=FunctionResponse(
                id=call.id, name=TRANSFER_TOOL, response={"result": None},
            ))]),
            actions=EventActions(transfer_to_agent=target),
        ),
    ]


class RouterAgent(BaseAgent):
    """Routes on whole-word keywords in the user text.

    ``routes`` maps a keyword to one of the sub-agents. The first keyword
    found wins; with no match the router answers with ``fallback``.
    """

    def __init__(
        self,
        name: str,
        routes: dict[str, BaseAgent],
        description: str = "",
        fallback: str | None = None,
    ):
        sub_agents: list[BaseAgent] = []
        for agent in routes.values():
            if agent not in sub_agents:
                sub_agents.append(agent)
        super().__init__(name, description=description, sub_agents=sub_agents)
        self._routes = [
            (re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE), agent)
            for keyword, agent in routes.items()
        ]
        self.fallback = fallback or (
            "I can help with: " + ", ".join(sorted(routes)) + "."
        )

    def route(self, text: str) -> BaseAgent | None:
        for pattern, agent in self._routes:
            if pattern.search(text):
                return agent
        return None

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        target = self.route(ctx.user_text)
        if target is None:
            yield Event(
                invocation_id=ctx.invocation_id,
                author=self.name,
                content=Content.from_text(self.fallback, role="model"),
            )
            return

        _logger.debug("%s routing turn %s to %s", self.name, ctx.invocation_id, target.name)
        for event in transfer_events(ctx, self.name, target.name):
            yield event
        async with aclosing(target.run_async(ctx)) as stream:
            async for event in stream:
                yield event
