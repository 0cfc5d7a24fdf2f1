"""ToolAgent: answers every turn with exactly one tool call."""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable

from agentwire.exceptions import ToolExecutionError
from agentwire.kernel.agent import BaseAgent, InvocationContext
from agentwire.kernel.events import Event, EventActions
from agentwire.tools.registry import ToolContext, ToolRegistry
from agentwire.types import Content, ContentPart, FunctionCall, FunctionResponse

ArgParser = Callable[[str], dict[str, Any]]
Renderer = Callable[[dict[str, Any]], str]


def _no_args(text: str) -> dict[str, Any]:
    return {}


def _render_result(response: dict[str, Any]) -> str:
    return str(response.get("result", response))


class ToolAgent(BaseAgent):
    """Deterministic agent: parse the user text, call the tool, report back.

    Emits three events per turn: the function call, the function response
    (carrying whatever state the tool wrote), and the final text.
    """

    def __init__(
        self,
        name: str,
        tool_name: str,
        registry: ToolRegistry,
        parse_args: ArgParser | None = None,
        render: Renderer | None = None,
        description: str = "",
    ):
        super().__init__(name, description=description)
        if not registry.has(tool_name):
            raise ValueError(f"Tool '{tool_name}' is not registered")
        self.tool_name = tool_name
        self.registry = registry
        self._parse_args = parse_args or _no_args
        self._render = render or _render_result

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        args = self._parse_args(ctx.user_text)
        call = FunctionCall(name=self.tool_name, args=args)
        yield Event(
            invocation_id=ctx.invocation_id,
            author=self.name,
            content=Content(role="model", parts=[ContentPart(function_call=call)]),
        )

        tool_ctx = ToolContext(ctx, function_call_id=call.id)
        result = await self.registry.execute(self.tool_name, args, tool_ctx)
        if not result.success:
            raise ToolExecutionError(f"Tool {self.tool_name} failed: {result.error}")
        response = result.result if isinstance(result.result, dict) else {"result": result.result}

        yield Event(
            invocation_id=ctx.invocation_id,
            author=self.name,
            content=Content(role="user", parts=[ContentPart(
                function_response=FunctionResponse(id=call.id, name=self.tool_name, response=response),
            )]),
            actions=EventActions(
                state_delta=dict(tool_ctx.state_delta),
                transfer_to_agent=tool_ctx.transfer_to_agent,
            ),
        )
        yield Event(
            invocation_id=ctx.invocation_id,
            author=self.name,
            content=Content.from_text(self._render(response), role="model"),
        )
