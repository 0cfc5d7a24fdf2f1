"""Tool Registry: the tools agents can call, plus the context they run in."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Awaitable

from pydantic import BaseModel

from agentwire.tools.schema import ToolSchema
from agentwire.exceptions import ToolNotFoundError

if TYPE_CHECKING:
    from agentwire.kernel.agent import InvocationContext

ToolHandler = Callable[..., Awaitable[Any]]


class ToolContext:
    """What a tool sees of the session while it runs.

    Reads fall through to the session state; writes are collected as a
    delta and only reach the session when the agent emits them on an event.
    """

    def __init__(self, invocation_context: InvocationContext, function_call_id: str = ""):
        self.invocation_context = invocation_context
        self.function_call_id = function_call_id
        self.state_delta: dict[str, Any] = {}
        self.transfer_to_agent: str | None = None

    def get_state(self, key: str, default: Any = None) -> Any:
        if key in self.state_delta:
            return self.state_delta[key]
        return self.invocation_context.session.state.get(key, default)

    def set_state(self, key: str, value: Any) -> None:
        self.state_delta[key] = value


class ToolExecutionResult(BaseModel):
    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    execution_time_ms: float = 0.0


class ToolRegistry:
    """Central registry of all tools available to agents.

    Tools are registered with a schema and an async handler. Handlers take
    the ToolContext first, then the tool arguments as keywords.
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolSchema, ToolHandler]] = {}

    def register(self, schema: ToolSchema, handler: ToolHandler) -> None:
        self._tools[schema.name] = (schema, handler)

    def unregister(self, tool_name: str) -> None:
        self._tools.pop(tool_name, None)

    def has(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def list_tools(self) -> list[ToolSchema]:
        return [schema for schema, _ in self._tools.values()]

    def get_anthropic_tools(self) -> list[dict]:
        """Get all tools in Anthropic API format."""
        return [schema.to_anthropic_tool() for schema, _ in self._tools.values()]

    async def execute(
        self, tool_name: str, arguments: dict, tool_context: ToolContext,
    ) -> ToolExecutionResult:
        """Execute a tool by name with the given arguments."""
        entry = self._tools.get(tool_name)
        if entry is None:
            raise ToolNotFoundError(f"Tool '{tool_name}' not found")

        schema, handler = entry
        start = time.monotonic()

        try:
            result = await handler(tool_context, **arguments)
            elapsed = (time.monotonic() - start) * 1000
            return ToolExecutionResult(
                tool_name=tool_name,
                success=True,
                result=result,
                execution_time_ms=elapsed,
            )
        except Exception as e:
            elapsed = (time.monotonic() - start) * 1000
            return ToolExecutionResult(
                tool_name=tool_name,
                success=False,
                error=f"{type(e).__name__}: {e}",
                execution_time_ms=elapsed,
            )
