"""Runner: drives one conversational turn against an agent."""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from typing import Sequence

from agentwire.exceptions import (
    AgentExecutionError,
    AgentTimeoutError,
    InvalidMessageError,
)
from agentwire.kernel.agent import BaseAgent, InvocationContext
from agentwire.kernel.events import Event
from agentwire.sessions.service import InMemorySessionService
from agentwire.sessions.session import Session
from agentwire.types import Content, RunConfig, new_uuid

_logger = logging.getLogger(__name__)


def validate_user_content(content: Content | None) -> Content:
    if content is None:
        raise InvalidMessageError("Message is missing")
    if content.role != "user":
        raise InvalidMessageError(f"Message role must be 'user', got {content.role!r}")
    if not content.parts:
        raise InvalidMessageError("Message must contain at least one part")
    return content


class Runner:
    """Executes turns of ``agent`` against sessions of ``session_service``.

    ``run_turn`` is synchronous from the caller's point of view: it returns
    only once the agent's event stream is exhausted, failed, or timed out.
    Turns on the same session are serialized through the session's turn lock.
    """

    def __init__(
        self,
        agent: BaseAgent,
        app_name: str,
        session_service: InMemorySessionService,
        timeout: float | None = None,
    ):
        self.agent = agent
        self.app_name = app_name
        self.session_service = session_service
        self.timeout = timeout

    async def run_turn(
        self,
        session: Session,
        new_message: Content,
        run_config: RunConfig | None = None,
        history_events: Sequence[Event] = (),
        user_event_id: str | None = None,
    ) -> list[Event]:
        """Run one turn and return the agent's events in emission order.

        Every event is appended to the session history as it arrives, so a
        failure or timeout leaves the already-emitted prefix in place.
        ``user_event_id`` keeps the id a replaying client gave the message.
        """
        validate_user_content(new_message)
        ctx = InvocationContext(
            session=session,
            user_content=new_message,
            run_config=run_config,
            session_service=self.session_service,
        )

        async with self.session_service.turn_lock(session):
            for event in history_events:
                if not session.has_event(event.id):
                    await self.session_service.append_event(session, event)
            if not user_event_id or session.has_event(user_event_id):
                user_event_id = new_uuid()
            await self.session_service.append_event(session, Event(
                id=user_event_id,
                invocation_id=ctx.invocation_id,
                author="user",
                content=new_message,
            ))

            emitted: list[Event] = []
            deadline = asyncio.timeout(self.timeout)
            try:
                async with deadline:
                    await self._drain(ctx, emitted)
            except TimeoutError as e:
                if not deadline.expired():
                    # Raised by the agent itself, not by our deadline
                    raise self._execution_error(session, emitted, e) from e
                _logger.warning(
                    "Agent %s exceeded %ss on session %s after %d events",
                    self.agent.name, self.timeout, session.id, len(emitted),
                )
                raise AgentTimeoutError(
                    f"Agent execution exceeded {self.timeout}s"
                ) from e
            except asyncio.CancelledError:
                _logger.info(
                    "Turn %s cancelled after %d events", ctx.invocation_id, len(emitted),
                )
                raise
            except Exception as e:
                raise self._execution_error(session, emitted, e) from e

        _logger.debug("Turn %s produced %d events", ctx.invocation_id, len(emitted))
        return emitted

    def _execution_error(
        self, session: Session, emitted: list[Event], cause: Exception,
    ) -> AgentExecutionError:
        _logger.error(
            "Agent %s failed on session %s after %d events: %s",
            self.agent.name, session.id, len(emitted), cause,
        )
        return AgentExecutionError(f"Agent {self.agent.name} failed: {type(cause).__name__}")

    async def _drain(self, ctx: InvocationContext, sink: list[Event]) -> None:
        async with aclosing(self.agent.run_async(ctx)) as stream:
            async for event in stream:
                if not event.invocation_id:
                    event = event.model_copy(update={"invocation_id": ctx.invocation_id})
                await self.session_service.append_event(ctx.session, event)
                sink.append(event)
