"""Core types shared across all agentwire subsystems."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ── ID Types ──────────────────────────────────────────────────────────────────

AppName: TypeAlias = str
UserId: TypeAlias = str
SessionId: TypeAlias = str
InvocationId: TypeAlias = str


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def new_uuid() -> str:
    return str(uuid.uuid4())


_FROZEN = ConfigDict(frozen=True)


# ── Content ──────────────────────────────────────────────────────────────────


class FunctionCall(BaseModel):
    model_config = _FROZEN

    id: str = Field(default_factory=new_id)
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    model_config = _FROZEN

    id: str = ""
    name: str
    response: dict[str, Any] = Field(default_factory=dict)


class FileData(BaseModel):
    """Reference to content stored elsewhere."""

    model_config = _FROZEN

    file_uri: str
    mime_type: str | None = None
    display_name: str | None = None


class Blob(BaseModel):
    """Inline binary content."""

    model_config = _FROZEN

    data: bytes
    mime_type: str | None = None
    display_name: str | None = None


_PAYLOAD_FIELDS = ("text", "function_call", "function_response", "file_data", "inline_data")


class ContentPart(BaseModel):
    """One piece of a Content. Exactly one payload is set."""

    model_config = _FROZEN

    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None
    file_data: FileData | None = None
    inline_data: Blob | None = None

    @model_validator(mode="after")
    def _one_payload(self) -> ContentPart:
        populated = [f for f in _PAYLOAD_FIELDS if getattr(self, f) is not None]
        if len(populated) != 1:
            raise ValueError(
                f"ContentPart needs exactly one payload, got {populated or 'none'}"
            )
        return self


class Content(BaseModel):
    """A turn of conversation content as the agent sees it."""

    model_config = _FROZEN

    role: str = "user"  # "user" | "model"
    parts: tuple[ContentPart, ...] = ()

    @classmethod
    def from_text(cls, text: str, role: str = "user") -> Content:
        return cls(role=role, parts=[ContentPart(text=text)])

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if p.text)


# ── Run Config ───────────────────────────────────────────────────────────────


class StreamingMode(str, Enum):
    NONE = "none"
    SSE = "sse"


class RunConfig(BaseModel):
    """Per-turn execution knobs handed to the agent."""

    streaming_mode: StreamingMode = StreamingMode.NONE
    max_llm_calls: int = 20
