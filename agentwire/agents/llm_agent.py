"""LlmAgent: a model-driven agent with a tool loop."""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator

from agentwire.agents.router import TRANSFER_TOOL, transfer_events
from agentwire.exceptions import ToolNotFoundError
from agentwire.kernel.agent import BaseAgent, InvocationContext
from agentwire.kernel.events import Event, EventActions
from agentwire.llm.base import BaseLLMProvider, LLMMessage, LLMResponse
from agentwire.tools.registry import ToolContext, ToolRegistry
from agentwire.types import Content, ContentPart, FunctionCall, FunctionResponse

_logger = logging.getLogger(__name__)


class LlmAgent(BaseAgent):
    """Calls the model, runs the tools it asks for, repeats until it answers.

    When the agent has sub-agents it also offers a ``transfer_to_agent``
    tool; a transfer ends this agent's part of the turn and runs the
    target inline.
    """

    def __init__(
        self,
        name: str,
        llm: BaseLLMProvider,
        instruction: str = "",
        registry: ToolRegistry | None = None,
        sub_agents: list[BaseAgent] | None = None,
        description: str = "",
        max_tokens: int = 1024,
    ):
        super().__init__(name, description=description, sub_agents=sub_agents)
        self.llm = llm
        self.instruction = instruction
        self.registry = registry or ToolRegistry()
        self.max_tokens = max_tokens

    def _tools(self) -> list[dict]:
        tools = self.registry.get_anthropic_tools()
        if self.sub_agents:
            tools.append({
                "name": TRANSFER_TOOL,
                "description": "Hand the conversation to another agent. Available: "
                + "; ".join(f"{a.name}: {a.description}" for a in self.sub_agents),
                "input_schema": {
                    "type": "object",
                    "properties": {"agent_name": {"type": "string", "enum": [a.name for a in self.sub_agents]}},
                    "required": ["agent_name"],
                },
            })
        return tools

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        messages = history_to_messages(ctx)
        tools = self._tools() or None

        while True:
            ctx.increment_llm_call_count()
            response = await self.llm.complete(
                messages=messages,
                system=self.instruction or None,
                tools=tools,
                max_tokens=self.max_tokens,
            )

            if not response.tool_calls:
                yield Event(
                    invocation_id=ctx.invocation_id,
                    author=self.name,
                    content=Content.from_text(response.content or "", role="model"),
                )
                return

            transfer = next((tc for tc in response.tool_calls if tc.name == TRANSFER_TOOL), None)
            if transfer is not None:
                target = self._transfer_target(transfer.arguments)
                if target is not None:
                    for event in transfer_events(ctx, self.name, target.name, call_id=transfer.id):
                        yield event
                    async with aclosing(target.run_async(ctx)) as stream:
                        async for event in stream:
                            yield event
                    return

            yield Event(
                invocation_id=ctx.invocation_id,
                author=self.name,
                content=Content(role="model", parts=_call_parts(response)),
            )
            results, tool_ctx = await self._run_tools(ctx, response)
            yield Event(
                invocation_id=ctx.invocation_id,
                author=self.name,
                content=Content(role="user", parts=[
                    ContentPart(function_response=r) for r in results
                ]),
                actions=EventActions(state_delta=dict(tool_ctx.state_delta)),
            )
            messages.append(LLMMessage(role="assistant", content=_tool_use_blocks(response)))
            messages.append(LLMMessage(role="user", content=[
                {
                    "type": "tool_result",
                    "tool_use_id": r.id,
                    "content": str(r.response.get("result", r.response.get("error", ""))),
                    "is_error": "error" in r.response,
                }
                for r in results
            ]))

    def _transfer_target(self, arguments: dict[str, Any]) -> BaseAgent | None:
        name = str(arguments.get("agent_name", ""))
        for sub in self.sub_agents:
            if sub.name == name:
                return sub
        _logger.warning("%s asked to transfer to unknown agent %r", self.name, name)
        return None

    async def _run_tools(
        self, ctx: InvocationContext, response: LLMResponse,
    ) -> tuple[list[FunctionResponse], ToolContext]:
        # All tools in one step share a single state delta
        tool_ctx = ToolContext(ctx)
        results: list[FunctionResponse] = []
        for tc in response.tool_calls:
            tool_ctx.function_call_id = tc.id
            try:
                result = await self.registry.execute(tc.name, tc.arguments, tool_ctx)
            except ToolNotFoundError as e:
                results.append(FunctionResponse(id=tc.id, name=tc.name, response={"error": str(e)}))
                continue
            if result.success:
                payload = result.result if isinstance(result.result, dict) else {"result": result.result}
            else:
                payload = {"error": result.error}
            results.append(FunctionResponse(id=tc.id, name=tc.name, response=payload))
        return results, tool_ctx


def _call_parts(response: LLMResponse) -> list[ContentPart]:
    parts = []
    if response.content:
        parts.append(ContentPart(text=response.content))
    for tc in response.tool_calls:
        parts.append(ContentPart(function_call=FunctionCall(id=tc.id, name=tc.name, args=tc.arguments)))
    return parts


def _tool_use_blocks(response: LLMResponse) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    if response.content:
        blocks.append({"type": "text", "text": response.content})
    for tc in response.tool_calls:
        blocks.append({"type": "tool_use", "id": tc.id, "name": tc.name, "input": tc.arguments})
    return blocks


def history_to_messages(ctx: InvocationContext) -> list[LLMMessage]:
    """Session transcript as alternating user/assistant text turns.

    Tool traffic from earlier turns is left out; consecutive turns of the
    same role are merged.
    """
    messages: list[LLMMessage] = []
    for event in ctx.session.events:
        if not event.is_final_response() or not event.text:
            continue
        role = "user" if event.author == "user" else "assistant"
        if messages and messages[-1].role == role:
            messages[-1] = LLMMessage(role=role, content=f"{messages[-1].content}\n{event.text}")
        else:
            messages.append(LLMMessage(role=role, content=event.text))
    while messages and messages[0].role != "user":
        messages.pop(0)
    if not messages:
        messages.append(LLMMessage(role="user", content=ctx.user_text))
    return messages
