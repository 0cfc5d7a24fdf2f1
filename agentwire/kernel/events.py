"""Agent events: the immutable output units of a conversational turn."""

from __future__ import annotations

import copy
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentwire.types import Content, FunctionCall, FunctionResponse, new_uuid


class EventActions(BaseModel):
    """Side effects an event asks the host to perform."""

    model_config = ConfigDict(frozen=True)

    state_delta: dict[str, Any] = Field(default_factory=dict)
    transfer_to_agent: str | None = None
    escalate: bool = False

    @field_validator("state_delta", mode="after")
    @classmethod
    def _detach_delta(cls, value: dict[str, Any]) -> dict[str, Any]:
        # The producer keeps its own dict; later writes to it must not show up here
        return copy.deepcopy(value)


class Event(BaseModel):
    """One unit of agent output. Frozen once emitted."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_uuid)
    invocation_id: str = ""
    author: str
    content: Content | None = None
    actions: EventActions = Field(default_factory=EventActions)
    partial: bool = False
    long_running_tool_ids: tuple[str, ...] = ()
    timestamp: float = Field(default_factory=time.time)

    def function_calls(self) -> list[FunctionCall]:
        if self.content is None:
            return []
        return [p.function_call for p in self.content.parts if p.function_call]

    def function_responses(self) -> list[FunctionResponse]:
        if self.content is None:
            return []
        return [p.function_response for p in self.content.parts if p.function_response]

    def is_final_response(self) -> bool:
        """True when the event is user-facing output rather than an intermediate step."""
        return (
            self.content is not None
            and bool(self.content.parts)
            and not self.partial
            and not self.long_running_tool_ids
            and not self.function_calls()
            and not self.function_responses()
        )

    @property
    def has_transfer(self) -> bool:
        return bool(self.actions.transfer_to_agent or self.long_running_tool_ids)

    @property
    def text(self) -> str:
        return self.content.text if self.content else ""
