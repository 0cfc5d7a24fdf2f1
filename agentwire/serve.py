"""agentwire server: one agent exposed over A2A."""

from __future__ import annotations

import asyncio
import logging

import uvicorn

from agentwire.a2a.card import AgentCardRegistry
from agentwire.a2a.executor import A2ASendMessageExecutor
from agentwire.a2a.server import A2AServer
from agentwire.agents.samples import build_card, create_agent
from agentwire.app import app, configure
from agentwire.config import AgentWireSettings, settings
from agentwire.kernel.runner import Runner
from agentwire.sessions.service import InMemorySessionService
from agentwire.types import RunConfig

_logger = logging.getLogger(__name__)


def build_server(config: AgentWireSettings | None = None) -> A2AServer:
    """Wire settings -> agent -> sessions -> runner -> executor -> card.

    Any configuration problem raises here, before a socket is opened.
    """
    config = config or settings
    agent = create_agent(config.agent, config)
    runner = Runner(
        agent,
        app_name=config.app_name,
        session_service=InMemorySessionService(),
        timeout=config.agent_timeout_seconds,
    )
    executor = A2ASendMessageExecutor(runner, RunConfig(max_llm_calls=config.max_llm_calls))
    if config.agent_card_path is not None:
        cards = AgentCardRegistry.from_file(config.agent_card_path)
    else:
        cards = AgentCardRegistry(build_card(agent, config))
    return A2AServer(cards, executor)


async def main(config: AgentWireSettings | None = None) -> None:
    config = config or settings
    configure(build_server(config))
    _logger.info(
        "Serving agent %r for app %s on %s", config.agent, config.app_name, config.base_url,
    )

    # Run uvicorn in the same event loop
    server = uvicorn.Server(uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level="warning",
    ))
    try:
        await server.serve()
    finally:
        configure(None)


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    asyncio.run(main())
