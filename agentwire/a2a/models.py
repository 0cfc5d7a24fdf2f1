"""A2A protocol data models (protocol version 0.3).

Covers Agent Cards, Messages, Tasks, and JSON-RPC 2.0 wrappers. Field
names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from agentwire.types import new_uuid

_WIRE = {"populate_by_name": True}


# ── Agent Card ────────────────────────────────────────────────


class AgentSkill(BaseModel):
    """A capability that an agent advertises."""

    id: str
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    input_modes: list[str] = Field(
        default_factory=lambda: ["text/plain"],
        alias="inputModes",
    )
    output_modes: list[str] = Field(
        default_factory=lambda: ["text/plain"],
        alias="outputModes",
    )

    model_config = {**_WIRE, "frozen": True}


class AgentExtension(BaseModel):
    """A protocol extension the agent understands."""

    uri: str
    description: str = ""
    required: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    model_config = {**_WIRE, "frozen": True}


class AgentCapabilities(BaseModel):
    """Protocol features the agent supports."""

    streaming: bool = False
    push_notifications: bool = Field(default=False, alias="pushNotifications")
    state_transition_history: bool = Field(default=False, alias="stateTransitionHistory")
    extensions: list[AgentExtension] = Field(default_factory=list)

    model_config = {**_WIRE, "frozen": True}


class AgentProvider(BaseModel):
    """Who provides this agent."""

    organization: str = "agentwire"
    url: str = ""

    model_config = {**_WIRE, "frozen": True}


class AgentCard(BaseModel):
    """A2A Agent Card: the identity document of an agent.

    Published at /.well-known/agent-card.json so other agents
    can discover this agent's capabilities.
    """

    name: str
    description: str = ""
    url: str = ""
    version: str = "1.0.0"
    protocol_version: str = Field(default="0.3.0", alias="protocolVersion")
    provider: AgentProvider = Field(default_factory=AgentProvider)
    capabilities: AgentCapabilities = Field(default_factory=AgentCapabilities)
    skills: list[AgentSkill] = Field(default_factory=list)
    default_input_modes: list[str] = Field(
        default_factory=lambda: ["text/plain"],
        alias="defaultInputModes",
    )
    default_output_modes: list[str] = Field(
        default_factory=lambda: ["text/plain"],
        alias="defaultOutputModes",
    )
    security: list[dict[str, list[str]]] = Field(default_factory=list)

    model_config = {**_WIRE, "frozen": True}


# ── Messages & Parts ─────────────────────────────────────────


class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str
    metadata: dict[str, Any] | None = None


class DataPart(BaseModel):
    """Structured JSON content, e.g. a function call or response."""

    kind: Literal["data"] = "data"
    data: dict[str, Any]
    metadata: dict[str, Any] | None = None


class FileWithUri(BaseModel):
    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    name: str | None = None

    model_config = _WIRE


class FileWithBytes(BaseModel):
    bytes: str  # base64
    mime_type: str | None = Field(default=None, alias="mimeType")
    name: str | None = None

    model_config = _WIRE


class FilePart(BaseModel):
    """Binary content, inline (base64) or by reference."""

    kind: Literal["file"] = "file"
    file: FileWithBytes | FileWithUri
    metadata: dict[str, Any] | None = None


Part = Annotated[Union[TextPart, DataPart, FilePart], Field(discriminator="kind")]


class A2AMessage(BaseModel):
    """A single communication turn."""

    kind: Literal["message"] = "message"
    role: Literal["user", "agent"] = "user"
    parts: list[Part] = Field(default_factory=list)
    message_id: str = Field(default_factory=new_uuid, alias="messageId")
    context_id: str | None = Field(default=None, alias="contextId")
    task_id: str | None = Field(default=None, alias="taskId")
    metadata: dict[str, Any] | None = None

    model_config = _WIRE

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))


# ── Tasks ─────────────────────────────────────────────────────


class TaskState(str, Enum):
    """A2A task lifecycle states, in the order they may be reached."""

    SUBMITTED = "submitted"
    WORKING = "working"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED, TaskState.CANCELED)

    def can_move_to(self, target: TaskState) -> bool:
        """Status never regresses, and terminal states are final."""
        if self.is_terminal:
            return False
        return _TASK_ORDER[target] >= _TASK_ORDER[self]


_TASK_ORDER = {
    TaskState.SUBMITTED: 0,
    TaskState.WORKING: 1,
    TaskState.COMPLETED: 2,
    TaskState.FAILED: 2,
    TaskState.CANCELED: 2,
}


class A2ATask(BaseModel):
    """Durable handle for work that outlives one response."""

    kind: Literal["task"] = "task"
    id: str = Field(default_factory=new_uuid)
    context_id: str | None = Field(default=None, alias="contextId")
    status: TaskState = TaskState.SUBMITTED
    result: A2AMessage | None = None
    metadata: dict[str, Any] | None = None

    model_config = _WIRE

    def advance(self, target: TaskState, result: A2AMessage | None = None) -> None:
        if not self.status.can_move_to(target):
            raise ValueError(f"Task {self.id} cannot move from {self.status.value} to {target.value}")
        self.status = target
        if result is not None:
            self.result = result


SendMessageResult = Annotated[Union[A2AMessage, A2ATask], Field(discriminator="kind")]

send_message_result_adapter: TypeAdapter[A2AMessage | A2ATask] = TypeAdapter(SendMessageResult)


# ── JSON-RPC 2.0 ─────────────────────────────────────────────


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request. Unknown top-level fields are ignored."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class MessageSendParams(BaseModel):
    """Params of ``message/send``."""

    message: A2AMessage
    metadata: dict[str, Any] = Field(default_factory=dict)
    configuration: dict[str, Any] | None = None


class SendMessageRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    method: Literal["message/send"] = "message/send"
    params: MessageSendParams


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Any = None


class SendMessageResponse(BaseModel):
    """JSON-RPC 2.0 response carrying exactly one of ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    result: SendMessageResult | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> SendMessageResponse:
        if (self.result is None) == (self.error is None):
            raise ValueError("Response must carry exactly one of result or error")
        return self

    @classmethod
    def success(cls, id: int | str | None, result: A2AMessage | A2ATask) -> SendMessageResponse:
        return cls(id=id, result=result)

    @classmethod
    def err(cls, id: int | str | None, code: int, message: str) -> SendMessageResponse:
        return cls(id=id, error=JsonRpcError(code=code, message=message))
