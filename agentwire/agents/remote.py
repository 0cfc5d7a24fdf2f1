"""RemoteA2AAgent: a sub-agent that lives behind another A2A server."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator

from agentwire.a2a.card import load_card_file
from agentwire.a2a.client import A2AClient
from agentwire.a2a.converters import message_to_events, session_to_message
from agentwire.a2a.models import A2AMessage, A2ATask, AgentCard
from agentwire.exceptions import A2AClientError, AgentCardResolutionError
from agentwire.kernel.agent import BaseAgent, InvocationContext
from agentwire.kernel.events import Event
from agentwire.types import Content

_logger = logging.getLogger(__name__)


class RemoteA2AAgent(BaseAgent):
    """Forwards the session transcript to a remote agent over ``message/send``.

    ``agent_card`` may be an AgentCard, an http(s) URL to discover it
    from, or a path to a JSON card file. It is resolved on first use.
    """

    def __init__(
        self,
        name: str,
        agent_card: AgentCard | str | Path,
        client: A2AClient | None = None,
        description: str = "",
    ):
        super().__init__(name, description=description)
        self._card_source = agent_card
        self._card: AgentCard | None = agent_card if isinstance(agent_card, AgentCard) else None
        self._client = client or A2AClient()

    @property
    def card(self) -> AgentCard | None:
        return self._card

    async def resolve_card(self) -> AgentCard:
        if self._card is not None:
            return self._card
        source = str(self._card_source)
        if source.startswith(("http://", "https://")):
            try:
                card = await self._client.discover(source)
            except A2AClientError as e:
                raise AgentCardResolutionError(
                    f"Failed to resolve agent card for {self.name} from {source}: {e}"
                ) from e
        else:
            card = load_card_file(Path(source))
        if not self.description and card.description:
            self.description = card.description
        self._card = card
        _logger.info("Resolved remote agent %s -> %s at %s", self.name, card.name, card.url)
        return card

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        card = await self.resolve_card()
        message = session_to_message(ctx.session.events, context_id=ctx.session.id)
        if message is None:
            _logger.warning("No content to send to remote agent %s", self.name)
            return

        result = await self._client.send_message(card, message)
        for event in self._result_events(ctx, result):
            yield event

    def _result_events(self, ctx: InvocationContext, result: A2AMessage | A2ATask) -> list[Event]:
        if isinstance(result, A2AMessage):
            return message_to_events(result, self.name, ctx.invocation_id)
        if result.result is not None:
            return message_to_events(result.result, self.name, ctx.invocation_id)
        # No reply yet: surface the remote task as pending work
        return [Event(
            invocation_id=ctx.invocation_id,
            author=self.name,
            content=Content.from_text(
                f"Remote task {result.id} is {result.status.value}.", role="model",
            ),
            long_running_tool_ids=[] if result.status.is_terminal else [result.id],
        )]
