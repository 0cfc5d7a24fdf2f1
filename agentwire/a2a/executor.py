"""A2A ``message/send`` executor: one inbound request, one response.

RECEIVED -> VALIDATED -> SESSION_RESOLVED -> EXECUTED -> RESPONDED,
or FAILED from any of them. The executor keeps nothing between requests:
sessions live in the session service, tasks are not stored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from agentwire.a2a import codec
from agentwire.a2a.converters import events_to_message, final_text_parts, prepare_input
from agentwire.a2a.lifecycle import RequestLifecycle, RequestPhase
from agentwire.a2a.models import (
    A2AMessage,
    A2ATask,
    MessageSendParams,
    SendMessageRequest,
    SendMessageResponse,
    TaskState,
)
from agentwire.exceptions import (
    AgentExecutionError,
    AgentTimeoutError,
    InvalidMessageError,
    MalformedRequestError,
)
from agentwire.kernel.events import Event
from agentwire.kernel.runner import Runner
from agentwire.sessions.session import Session
from agentwire.types import RunConfig, new_uuid

_logger = logging.getLogger(__name__)

APP_NAME_KEY = "appName"
USER_ID_KEY = "userId"


def user_id_for(context_id: str) -> str:
    return f"user-{context_id}"


class A2ASendMessageExecutor:
    """Bridges ``message/send`` to a Runner."""

    def __init__(self, runner: Runner, run_config: RunConfig | None = None) -> None:
        self._runner = runner
        self._run_config = run_config or RunConfig()

    @property
    def app_name(self) -> str:
        return self._runner.app_name

    async def handle_send_message(
        self, request: bytes | str | dict[str, Any],
    ) -> SendMessageResponse:
        """Answer one JSON-RPC request. Failures become JSON-RPC errors."""
        lifecycle = RequestLifecycle(new_uuid()[:8])
        request_id = request.get("id") if isinstance(request, dict) else None
        try:
            rpc = codec.decode_request(request)
            request_id = rpc.id
            lifecycle.transition(RequestPhase.VALIDATED)
            result = await self._execute(rpc, lifecycle)
            lifecycle.transition(RequestPhase.RESPONDED)
            return SendMessageResponse.success(rpc.id, result)
        except MalformedRequestError as e:
            lifecycle.fail()
            _logger.warning("Rejected malformed A2A request: %s", e)
            return codec.error_response(e.request_id, e)
        except InvalidMessageError as e:
            lifecycle.fail()
            _logger.warning("Rejected A2A request %s: %s", request_id, e)
            return codec.error_response(request_id, e)
        except AgentTimeoutError as e:
            lifecycle.fail()
            return codec.error_response(request_id, e)
        except AgentExecutionError as e:
            lifecycle.fail()
            _logger.error("A2A request %s failed during execution: %s", request_id, e)
            return codec.error_response(request_id, e)
        except asyncio.CancelledError:
            lifecycle.fail()
            raise
        except Exception as e:
            lifecycle.fail()
            _logger.exception("Unexpected error handling A2A request %s", request_id)
            return codec.error_response(request_id, e)

    async def _execute(
        self, rpc: SendMessageRequest, lifecycle: RequestLifecycle,
    ) -> A2AMessage | A2ATask:
        params = rpc.params
        inbound = params.message
        if inbound.role != "user":
            raise InvalidMessageError(f"Message role must be 'user', got {inbound.role!r}")
        if not inbound.parts:
            raise InvalidMessageError("Message must contain at least one part")

        context_id = inbound.context_id or new_uuid()
        if not inbound.context_id:
            _logger.debug("Request %s lacked contextId; generated %s", rpc.id, context_id)

        prepared = prepare_input(inbound)
        if prepared.user_content is None:
            raise InvalidMessageError("Message has no usable parts")

        session = await self._resolve_session(params, context_id)
        lifecycle.transition(RequestPhase.SESSION_RESOLVED)

        events = await self._runner.run_turn(
            session,
            prepared.user_content,
            self._run_config,
            history_events=prepared.history_events,
            user_event_id=prepared.user_event_id,
        )
        lifecycle.transition(RequestPhase.EXECUTED)
        return build_result(events, context_id, inbound.task_id)

    async def _resolve_session(self, params: MessageSendParams, context_id: str) -> Session:
        meta = {**(params.message.metadata or {}), **params.metadata}
        app_name = str(meta.get(APP_NAME_KEY) or self.app_name)
        user_id = str(meta.get(USER_ID_KEY) or user_id_for(context_id))
        session, created = await self._runner.session_service.get_or_create_session(
            app_name, user_id, context_id,
        )
        if created:
            _logger.debug("New session %s for %s/%s", context_id, app_name, user_id)
        return session


def build_result(
    events: Sequence[Event],
    context_id: str,
    task_id: str | None = None,
) -> A2AMessage | A2ATask:
    """Fold a finished turn into a Message, or a Task when work was handed off.

    A Task's status is decided in this order:

    - ``completed``, carrying the reply as ``result``, when a final text
      response follows the last transfer (the handed-off work already ran
      inline and finished in this turn)
    - ``working`` when some event carried content
    - ``submitted`` otherwise
    """
    transfer_indices = [i for i, e in enumerate(events) if e.has_transfer]
    if not transfer_indices:
        return events_to_message(events, context_id, task_id)

    task = A2ATask(id=new_uuid(), context_id=context_id)
    tail = events[transfer_indices[-1] + 1:]
    if final_text_parts(tail):
        result = events_to_message(tail, context_id, task.id)
        task.advance(TaskState.COMPLETED, result)
    elif any(e.content is not None for e in events):
        task.advance(TaskState.WORKING)
    return task

