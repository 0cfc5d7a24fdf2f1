"""agentwire CLI.

`agentwire serve` exposes a sample agent over A2A.
`agentwire send URL TEXT` talks to any A2A agent.
`agentwire run PROMPT...` drives a sample agent locally, no HTTP involved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from agentwire.config import settings
from agentwire.exceptions import A2AClientError, AgentWireError, ConfigurationError

console = Console()

app = typer.Typer(
    name="agentwire",
    help="agentwire -- expose conversational agents over the A2A protocol.",
    no_args_is_help=True,
)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    agent: Optional[str] = typer.Option(None, "--agent", "-a", help="roll | prime | root | llm"),
):
    """Serve a sample agent over A2A."""
    from agentwire import serve as server_main

    updates = {k: v for k, v in {"host": host, "port": port, "agent": agent}.items() if v is not None}
    config = settings.model_copy(update=updates)
    logging.basicConfig(level=config.log_level)
    console.print(Panel(
        f"Agent [cyan]{config.agent}[/cyan] at [bold]{config.base_url}[/bold]\n"
        f"Card: {config.base_url}/.well-known/agent-card.json",
        title="agentwire",
    ))
    try:
        asyncio.run(server_main.main(config))
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")


@app.command("card")
def card(
    agent: Optional[str] = typer.Option(None, "--agent", "-a", help="roll | prime | root | llm"),
):
    """Print the Agent Card the server would publish."""
    from agentwire.serve import build_server

    config = settings.model_copy(update={"agent": agent}) if agent else settings
    try:
        server = build_server(config)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")
    console.print_json(server.cards.card_json().decode())


@app.command("discover")
def discover(url: str = typer.Argument(help="Base URL of the remote agent")):
    """Fetch a remote Agent Card and list its skills."""
    from agentwire.a2a.client import A2AClient

    try:
        remote = asyncio.run(A2AClient(timeout=settings.client_timeout_seconds).discover(url))
    except A2AClientError as e:
        _fail(str(e))

    console.print(f"[bold]{remote.name}[/bold] v{remote.version} at {remote.url}")
    if remote.description:
        console.print(f"[dim]{remote.description}[/dim]")
    table = Table(title="Skills")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description", style="white")
    table.add_column("Tags", style="blue")
    for skill in remote.skills:
        table.add_row(skill.id, skill.name, skill.description, ", ".join(skill.tags))
    console.print(table)


@app.command("send")
def send(
    url: str = typer.Argument(help="Remote agent URL (base or /a2a endpoint)"),
    text: str = typer.Argument(help="Message text"),
    context_id: Optional[str] = typer.Option(None, "--context-id", "-c", help="Continue a conversation"),
    raw: bool = typer.Option(False, "--raw", help="Print the JSON result"),
):
    """Send one message/send request and print the reply."""
    from agentwire.a2a.client import A2AClient
    from agentwire.a2a.models import A2AMessage, A2ATask, TextPart

    message = A2AMessage(parts=[TextPart(text=text)], context_id=context_id)
    try:
        result = asyncio.run(
            A2AClient(timeout=settings.client_timeout_seconds).send_message(url, message)
        )
    except A2AClientError as e:
        _fail(str(e))

    if raw:
        console.print_json(orjson.dumps(
            result.model_dump(by_alias=True, mode="json", exclude_none=True)
        ).decode())
        return
    if isinstance(result, A2ATask):
        console.print(f"[yellow]task[/yellow] {result.id} [bold]{result.status.value}[/bold]")
        if result.result is not None:
            console.print(result.result.text)
    else:
        console.print(result.text)
    console.print(f"[dim]context: {result.context_id}[/dim]")


@app.command("run")
def run(
    prompts: list[str] = typer.Argument(help="One or more user turns"),
    agent: Optional[str] = typer.Option(None, "--agent", "-a", help="roll | prime | root | llm"),
):
    """Run a sample agent locally, one turn per prompt, in one session."""
    from agentwire.agents.samples import create_agent
    from agentwire.kernel.runner import Runner
    from agentwire.sessions.service import InMemorySessionService
    from agentwire.types import Content, RunConfig

    config = settings.model_copy(update={"agent": agent}) if agent else settings

    async def _run() -> dict:
        runner = Runner(
            create_agent(config.agent, config),
            app_name=config.app_name,
            session_service=InMemorySessionService(),
            timeout=config.agent_timeout_seconds,
        )
        session = await runner.session_service.create_session(config.app_name, "cli-user")
        for prompt in prompts:
            console.print(f"[bold green]user[/bold green] > {prompt}")
            events = await runner.run_turn(
                session, Content.from_text(prompt), RunConfig(max_llm_calls=config.max_llm_calls),
            )
            for event in events:
                if event.actions.transfer_to_agent:
                    console.print(f"  [yellow]-> transfer to {event.actions.transfer_to_agent}[/yellow]")
                for call in event.function_calls():
                    console.print(f"  [dim]{event.author} calls {call.name}({call.args})[/dim]")
                if event.is_final_response() and event.text:
                    console.print(f"[bold cyan]{event.author}[/bold cyan] > {event.text}")
        return session.state

    try:
        state = asyncio.run(_run())
    except AgentWireError as e:
        _fail(f"{type(e).__name__}: {e}")
    if state:
        console.print(f"[dim]session state: {state}[/dim]")


@app.command("version")
def version_cmd():
    """Show agentwire version."""
    from agentwire import __version__
    console.print(f"agentwire v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
