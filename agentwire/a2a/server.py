"""A2A Server: serves one agent over the A2A protocol.

Routes:
  GET  /.well-known/agent-card.json   agent discovery
  GET  /.well-known/agent.json        legacy discovery path
  POST /a2a                           JSON-RPC ``message/send`` endpoint

The RPC route hands raw bytes to the executor and always answers HTTP 200
with a JSON-RPC body; protocol errors travel inside that body.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from agentwire.a2a import codec
from agentwire.a2a.card import AgentCardRegistry
from agentwire.a2a.executor import A2ASendMessageExecutor
from agentwire.a2a.models import AgentCard

_logger = logging.getLogger(__name__)

router = APIRouter()

JSON_MEDIA_TYPE = "application/json"


class A2AServer:
    """Binds a card registry to a ``message/send`` executor."""

    def __init__(self, cards: AgentCardRegistry, executor: A2ASendMessageExecutor) -> None:
        self.cards = cards
        self.executor = executor

    @property
    def card(self) -> AgentCard:
        return self.cards.get_card()

    async def handle_rpc(self, body: bytes) -> bytes:
        response = await self.executor.handle_send_message(body)
        return codec.encode_response(response)


# ── Module-level state (injected by app.configure) ───────────

_server: A2AServer | None = None


def set_server(server: A2AServer | None) -> None:
    global _server
    _server = server


def get_server() -> A2AServer | None:
    return _server


def _not_ready() -> JSONResponse:
    return JSONResponse({"error": "A2A not initialized"}, status_code=503)


# ── Routes ────────────────────────────────────────────────────


@router.get("/.well-known/agent-card.json")
async def agent_card() -> Response:
    """Serve the Agent Card for A2A discovery."""
    if _server is None:
        return _not_ready()
    return Response(content=_server.cards.card_json(), media_type=JSON_MEDIA_TYPE)


@router.get("/.well-known/agent.json")
async def legacy_agent_card() -> Response:
    return await agent_card()


@router.post("/a2a")
async def a2a_rpc(request: Request) -> Response:
    """JSON-RPC 2.0 endpoint for A2A protocol."""
    if _server is None:
        return _not_ready()
    body = await request.body()
    return Response(content=await _server.handle_rpc(body), media_type=JSON_MEDIA_TYPE)
