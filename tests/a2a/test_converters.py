"""Tests for A2A <-> event conversions."""

import base64

from agentwire.a2a.converters import (
    METADATA_EVENT_ID_KEY,
    events_to_message,
    final_text_parts,
    from_content_part,
    inbound_to_events,
    message_to_events,
    prepare_input,
    session_to_message,
    to_content_part,
)
from agentwire.a2a.models import (
    A2AMessage,
    DataPart,
    FilePart,
    FileWithBytes,
    FileWithUri,
    TextPart,
)
from agentwire.kernel.events import Event
from agentwire.types import Content, ContentPart, FunctionCall


class TestPartConversion:
    def test_text(self):
        assert to_content_part(TextPart(text="hi")).text == "hi"

    def test_file_uri(self):
        part = to_content_part(FilePart(file=FileWithUri(uri="gs://x/y.png", mime_type="image/png")))
        assert part.file_data.file_uri == "gs://x/y.png"
        assert part.file_data.mime_type == "image/png"

    def test_file_bytes(self):
        encoded = base64.b64encode(b"\x00\x01").decode()
        part = to_content_part(FilePart(file=FileWithBytes(bytes=encoded, name="f.bin")))
        assert part.inline_data.data == b"\x00\x01"
        assert part.inline_data.display_name == "f.bin"

    def test_bad_base64_is_dropped(self):
        assert to_content_part(FilePart(file=FileWithBytes(bytes="***"))) is None

    def test_function_call_by_metadata(self):
        part = to_content_part(DataPart(
            data={"id": "c1", "name": "roll_die", "args": {"sides": 6}},
            metadata={"type": "function_call"},
        ))
        assert part.function_call.name == "roll_die"
        assert part.function_call.args == {"sides": 6}

    def test_function_response_by_shape(self):
        part = to_content_part(DataPart(data={"name": "roll_die", "response": {"result": 3}}))
        assert part.function_response.response == {"result": 3}

    def test_string_args_are_parsed(self):
        part = to_content_part(DataPart(data={"name": "f", "args": '{"a": 1}'}))
        assert part.function_call.args == {"a": 1}

    def test_plain_data_becomes_json_text(self):
        part = to_content_part(DataPart(data={"k": "v"}))
        assert part.text == '{"k":"v"}'

    def test_function_call_back_to_data_part(self):
        part = from_content_part(ContentPart(function_call=FunctionCall(id="c", name="f", args={"x": 1})))
        assert isinstance(part, DataPart)
        assert part.metadata["type"] == "function_call"
        assert part.data == {"id": "c", "name": "f", "args": {"x": 1}}


class TestInbound:
    def test_one_event_per_part_with_stable_ids(self):
        msg = A2AMessage(
            message_id="m1",
            parts=[
                TextPart(text="earlier", metadata={METADATA_EVENT_ID_KEY: "ev-1"}),
                TextPart(text="now"),
            ],
        )
        events = inbound_to_events(msg)
        assert [e.id for e in events] == ["ev-1", "m1-1"]
        assert all(e.author == "user" for e in events)

    def test_function_calls_are_model_authored(self):
        msg = A2AMessage(parts=[DataPart(data={"name": "f", "args": {}})])
        assert inbound_to_events(msg)[0].author == "model"

    def test_last_text_part_is_the_turn(self):
        msg = A2AMessage(
            message_id="m1",
            parts=[TextPart(text="first"), DataPart(data={"name": "f", "args": {}}), TextPart(text="last")],
        )
        prepared = prepare_input(msg)
        assert prepared.user_content.text == "last"
        assert prepared.user_content.role == "user"
        assert [e.id for e in prepared.history_events] == ["m1-0", "m1-1"]
        assert prepared.user_event_id == "m1-2"

    def test_no_text_uses_all_parts(self):
        msg = A2AMessage(parts=[
            FilePart(file=FileWithUri(uri="a")),
            FilePart(file=FileWithUri(uri="b")),
        ])
        prepared = prepare_input(msg)
        assert prepared.history_events == []
        assert len(prepared.user_content.parts) == 2

    def test_nothing_usable(self):
        prepared = prepare_input(A2AMessage(parts=[FilePart(file=FileWithBytes(bytes="***"))]))
        assert prepared.user_content is None


class TestOutbound:
    def test_only_final_agent_text(self):
        events = [
            Event(author="user", content=Content.from_text("hi")),
            Event(author="a", content=Content(role="model", parts=[
                ContentPart(function_call=FunctionCall(name="f")),
            ])),
            Event(author="a", content=Content.from_text("partial", role="model"), partial=True),
            Event(author="a", content=Content.from_text("one", role="model")),
            Event(author="a", content=Content.from_text("two", role="model")),
        ]
        assert [p.text for p in final_text_parts(events)] == ["one", "two"]

    def test_empty_turn_gives_one_empty_part(self):
        msg = events_to_message([], context_id="c1")
        assert msg.role == "agent"
        assert msg.context_id == "c1"
        assert len(msg.parts) == 1
        assert msg.parts[0].text == ""


class TestClientSide:
    def test_session_to_message_stamps_event_ids(self):
        events = [
            Event(id="e1", author="user", content=Content.from_text("a")),
            Event(id="e2", author="bot"),
            Event(id="e3", author="bot", content=Content.from_text("b", role="model")),
        ]
        msg = session_to_message(events, context_id="s1")
        assert msg.role == "user"
        assert msg.context_id == "s1"
        assert [p.metadata[METADATA_EVENT_ID_KEY] for p in msg.parts] == ["e1", "e3"]

    def test_session_to_message_empty(self):
        assert session_to_message([Event(author="x")]) is None

    def test_replayed_transcript_dedupes_on_the_server(self):
        events = [Event(id="e1", author="user", content=Content.from_text("a"))]
        msg = session_to_message(events)
        assert inbound_to_events(msg)[0].id == "e1"

    def test_message_to_events(self):
        msg = A2AMessage(role="agent", parts=[TextPart(text="7 is prime number.")])
        events = message_to_events(msg, author="prime_agent", invocation_id="e-1")
        assert len(events) == 1
        assert events[0].author == "prime_agent"
        assert events[0].content.role == "model"
        assert events[0].invocation_id == "e-1"
        assert events[0].is_final_response()
