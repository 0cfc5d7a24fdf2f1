"""A2A Client: discovers and calls remote A2A agents.

Usage:
    client = A2AClient()
    card = await client.discover("http://localhost:9877")
    result = await client.send_message(
        card,
        A2AMessage(parts=[TextPart(text="Is 7 prime?")]),
    )
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from agentwire.a2a import codec
from agentwire.a2a.models import (
    A2AMessage,
    A2ATask,
    AgentCard,
    MessageSendParams,
    SendMessageRequest,
    send_message_result_adapter,
)
from agentwire.exceptions import A2AClientError

_logger = logging.getLogger(__name__)

AGENT_CARD_PATH = "/.well-known/agent-card.json"
RPC_PATH = "/a2a"


def card_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith(".json"):
        return base
    return f"{base}{AGENT_CARD_PATH}"


def rpc_url(url: str) -> str:
    base = url.rstrip("/")
    if base.endswith(RPC_PATH):
        return base
    return f"{base}{RPC_PATH}"


class A2AClient:
    """HTTP client for interacting with remote A2A agents."""

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._next_id = 0

    async def discover(self, base_url: str) -> AgentCard:
        """Fetch an agent's card from /.well-known/agent-card.json."""
        url = card_url(base_url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise A2AClientError(f"Could not fetch agent card from {url}: {e}") from e
        try:
            return AgentCard.model_validate(data)
        except ValidationError as e:
            raise A2AClientError(f"Invalid agent card at {url}: {e}") from e

    async def send_message(
        self,
        target: AgentCard | str,
        message: A2AMessage,
        metadata: dict[str, Any] | None = None,
    ) -> A2AMessage | A2ATask:
        """Send ``message/send`` and return the typed result."""
        url = rpc_url(target.url if isinstance(target, AgentCard) else target)
        self._next_id += 1
        request = SendMessageRequest(
            id=self._next_id,
            params=MessageSendParams(message=message, metadata=metadata or {}),
        )
        data = await self._rpc_call(url, codec.encode_request(request))
        try:
            return send_message_result_adapter.validate_python(data)
        except ValidationError as e:
            raise A2AClientError(f"Unexpected message/send result from {url}: {e}") from e

    async def _rpc_call(self, url: str, body: bytes) -> Any:
        """Execute a JSON-RPC call against a remote A2A endpoint."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    url, content=body, headers={"Content-Type": "application/json"},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise A2AClientError(f"A2A call to {url} failed: {e}") from e
        except ValueError as e:
            raise A2AClientError(f"A2A endpoint {url} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise A2AClientError(f"A2A endpoint {url} returned a non-object response")
        if data.get("error"):
            error = data["error"]
            raise A2AClientError(
                f"A2A RPC error {error.get('code')}: {error.get('message', error)}"
            )
        if "result" not in data:
            raise A2AClientError(f"A2A response from {url} has neither result nor error")
        _logger.debug("A2A call to %s succeeded", url)
        return data["result"]
