"""FastAPI application hosting the A2A routes."""

from __future__ import annotations

from fastapi import FastAPI

from agentwire import __version__
from agentwire.a2a import server as a2a_server
from agentwire.a2a.server import A2AServer

app = FastAPI(title="agentwire", version=__version__)
app.include_router(a2a_server.router)


def configure(server: A2AServer | None = None) -> None:
    a2a_server.set_server(server)
