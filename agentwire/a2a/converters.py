"""Conversions between A2A wire messages and agent events.

Server side: an inbound message becomes history events plus the new user
content. Client side: a remote reply becomes events for the local session.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import orjson

from agentwire.a2a.models import (
    A2AMessage,
    DataPart,
    FilePart,
    FileWithBytes,
    FileWithUri,
    Part,
    TextPart,
)
from agentwire.kernel.events import Event
from agentwire.types import (
    Blob,
    Content,
    ContentPart,
    FileData,
    FunctionCall,
    FunctionResponse,
    new_uuid,
)

_logger = logging.getLogger(__name__)

METADATA_TYPE_KEY = "type"
METADATA_EVENT_ID_KEY = "eventId"
TYPE_FUNCTION_CALL = "function_call"
TYPE_FUNCTION_RESPONSE = "function_response"


# ── Parts ─────────────────────────────────────────────────────


def to_content_part(part: Part) -> ContentPart | None:
    """Wire part -> internal part. Returns None for parts that cannot be used."""
    if isinstance(part, TextPart):
        return ContentPart(text=part.text)

    if isinstance(part, FilePart):
        file = part.file
        if isinstance(file, FileWithUri):
            return ContentPart(file_data=FileData(
                file_uri=file.uri, mime_type=file.mime_type, display_name=file.name,
            ))
        try:
            data = base64.b64decode(file.bytes, validate=True)
        except (binascii.Error, ValueError):
            _logger.warning("Dropping file part with undecodable base64 content")
            return None
        return ContentPart(inline_data=Blob(
            data=data, mime_type=file.mime_type, display_name=file.name,
        ))

    if isinstance(part, DataPart):
        data = dict(part.data)
        kind = str((part.metadata or {}).get(METADATA_TYPE_KEY, ""))
        if kind == TYPE_FUNCTION_CALL or ("name" in data and "args" in data):
            return ContentPart(function_call=FunctionCall(
                id=str(data.get("id") or ""),
                name=str(data.get("name", "")),
                args=_coerce_map(data.get("args")),
            ))
        if kind == TYPE_FUNCTION_RESPONSE or ("name" in data and "response" in data):
            return ContentPart(function_response=FunctionResponse(
                id=str(data.get("id") or ""),
                name=str(data.get("name", "")),
                response=_coerce_map(data.get("response")),
            ))
        return ContentPart(text=orjson.dumps(data).decode())

    _logger.warning("Unsupported A2A part type: %s", type(part).__name__)
    return None


def from_content_part(part: ContentPart, metadata: dict[str, Any] | None = None) -> Part | None:
    """Internal part -> wire part."""
    if part.text is not None:
        return TextPart(text=part.text, metadata=metadata)
    if part.file_data is not None:
        fd = part.file_data
        return FilePart(
            file=FileWithUri(uri=fd.file_uri, mime_type=fd.mime_type, name=fd.display_name),
            metadata=metadata,
        )
    if part.inline_data is not None:
        blob = part.inline_data
        return FilePart(
            file=FileWithBytes(
                bytes=base64.b64encode(blob.data).decode(),
                mime_type=blob.mime_type,
                name=blob.display_name,
            ),
            metadata=metadata,
        )
    if part.function_call is not None:
        fc = part.function_call
        return DataPart(
            data={"id": fc.id, "name": fc.name, "args": fc.args},
            metadata={**(metadata or {}), METADATA_TYPE_KEY: TYPE_FUNCTION_CALL},
        )
    if part.function_response is not None:
        fr = part.function_response
        return DataPart(
            data={"id": fr.id, "name": fr.name, "response": fr.response},
            metadata={**(metadata or {}), METADATA_TYPE_KEY: TYPE_FUNCTION_RESPONSE},
        )
    return None


def _coerce_map(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items()}
    if isinstance(value, str):
        if not value:
            return {}
        try:
            parsed = orjson.loads(value)
        except orjson.JSONDecodeError:
            return {"value": value}
        return parsed if isinstance(parsed, dict) else {"value": parsed}
    return {"value": value}


# ── Inbound (server side) ─────────────────────────────────────


@dataclass
class PreparedInput:
    """An inbound message split into replayed history and the new user turn."""

    history_events: list[Event] = field(default_factory=list)
    user_content: Content | None = None
    user_event_id: str | None = None


def inbound_to_events(message: A2AMessage, invocation_id: str = "") -> list[Event]:
    """One event per convertible part, in order.

    Function calls are attributed to the model, everything else to the user.
    Event ids come from ``metadata.eventId`` when the sender stamped one.
    """
    events: list[Event] = []
    for index, part in enumerate(message.parts):
        converted = to_content_part(part)
        if converted is None:
            continue
        author = "model" if converted.function_call is not None else "user"
        event_id = (part.metadata or {}).get(METADATA_EVENT_ID_KEY) or f"{message.message_id}-{index}"
        events.append(Event(
            id=str(event_id),
            invocation_id=invocation_id,
            author=author,
            content=Content(role=author, parts=[converted]),
        ))
    return events


def prepare_input(message: A2AMessage, invocation_id: str = "") -> PreparedInput:
    """Pick the last text-bearing part as the new turn; the rest is history."""
    events = inbound_to_events(message, invocation_id)
    if not events:
        return PreparedInput()

    for index in range(len(events) - 1, -1, -1):
        content = events[index].content
        if content is not None and any(p.text is not None for p in content.parts):
            history = events[:index] + events[index + 1:]
            return PreparedInput(
                history_events=history,
                user_content=Content(role="user", parts=list(content.parts)),
                user_event_id=events[index].id,
            )

    # No text at all: the whole message is the turn
    parts = [p for e in events if e.content for p in e.content.parts]
    return PreparedInput(user_content=Content(role="user", parts=parts))


# ── Outbound (server side) ────────────────────────────────────


def final_text_parts(events: Sequence[Event]) -> list[TextPart]:
    """Text parts of the user-facing events, in emission order."""
    parts: list[TextPart] = []
    for event in events:
        if not event.is_final_response() or event.author == "user":
            continue
        for part in event.content.parts:
            if part.text is not None:
                parts.append(TextPart(text=part.text))
    return parts


def events_to_message(
    events: Sequence[Event],
    context_id: str | None = None,
    task_id: str | None = None,
) -> A2AMessage:
    """Fold a turn's events into one agent reply."""
    parts: list[Part] = list(final_text_parts(events)) or [TextPart(text="")]
    return A2AMessage(
        role="agent",
        parts=parts,
        message_id=new_uuid(),
        context_id=context_id,
        task_id=task_id,
    )


# ── Client side ───────────────────────────────────────────────


def session_to_message(events: Sequence[Event], context_id: str | None = None) -> A2AMessage | None:
    """Aggregate a session transcript into one outbound user message."""
    parts: list[Part] = []
    for event in events:
        if event.content is None:
            continue
        for content_part in event.content.parts:
            converted = from_content_part(content_part, {METADATA_EVENT_ID_KEY: event.id})
            if converted is not None:
                parts.append(converted)
    if not parts:
        return None
    return A2AMessage(role="user", parts=parts, context_id=context_id)


def message_to_events(message: A2AMessage, author: str, invocation_id: str = "") -> list[Event]:
    """Turn a remote reply into local events, one per part."""
    role = "model" if message.role == "agent" else "user"
    events: list[Event] = []
    for part in message.parts:
        converted = to_content_part(part)
        if converted is None:
            continue
        events.append(Event(
            invocation_id=invocation_id,
            author=author,
            content=Content(role=role, parts=[converted]),
        ))
    return events
