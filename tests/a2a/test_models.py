"""Tests for A2A protocol models."""

import pytest
from pydantic import ValidationError

from agentwire.a2a.models import (
    A2AMessage,
    A2ATask,
    AgentCard,
    AgentSkill,
    DataPart,
    FilePart,
    FileWithUri,
    SendMessageResponse,
    TaskState,
    TextPart,
    send_message_result_adapter,
)


class TestAgentCard:
    def test_camel_case_aliases(self):
        card = AgentCard(
            name="roll_agent",
            url="http://localhost:9876/a2a",
            skills=[AgentSkill(id="roll_die", name="Roll Die")],
        )
        data = card.model_dump(by_alias=True)
        assert data["protocolVersion"] == "0.3.0"
        assert data["defaultInputModes"] == ["text/plain"]
        assert data["skills"][0]["inputModes"] == ["text/plain"]
        assert data["capabilities"]["pushNotifications"] is False

    def test_parses_wire_form(self):
        card = AgentCard.model_validate({
            "name": "remote",
            "url": "http://remote/a2a",
            "defaultOutputModes": ["application/json"],
            "skills": [{"id": "s1", "name": "S1", "outputModes": ["text/plain"]}],
        })
        assert card.default_output_modes == ["application/json"]
        assert card.skills[0].output_modes == ["text/plain"]

    def test_card_is_immutable(self):
        card = AgentCard(name="a", url="http://a")
        with pytest.raises(ValidationError):
            card.name = "b"


class TestParts:
    def test_discriminated_by_kind(self):
        msg = A2AMessage.model_validate({
            "messageId": "m1",
            "role": "user",
            "parts": [
                {"kind": "text", "text": "hi"},
                {"kind": "data", "data": {"a": 1}},
                {"kind": "file", "file": {"uri": "gs://b/f.png", "mimeType": "image/png"}},
            ],
        })
        assert isinstance(msg.parts[0], TextPart)
        assert isinstance(msg.parts[1], DataPart)
        assert isinstance(msg.parts[2], FilePart)
        assert isinstance(msg.parts[2].file, FileWithUri)
        assert msg.parts[2].file.mime_type == "image/png"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            A2AMessage.model_validate({"parts": [{"kind": "video", "url": "x"}]})

    def test_message_text_joins_text_parts(self):
        msg = A2AMessage(parts=[TextPart(text="a"), DataPart(data={}), TextPart(text="b")])
        assert msg.text == "ab"

    def test_message_id_generated(self):
        assert A2AMessage().message_id != A2AMessage().message_id


class TestTask:
    def test_status_only_moves_forward(self):
        task = A2ATask(context_id="c1")
        assert task.status == TaskState.SUBMITTED
        task.advance(TaskState.WORKING)
        task.advance(TaskState.COMPLETED, A2AMessage(role="agent"))
        assert task.result is not None
        with pytest.raises(ValueError):
            task.advance(TaskState.WORKING)

    def test_working_cannot_regress(self):
        task = A2ATask(status=TaskState.WORKING)
        with pytest.raises(ValueError):
            task.advance(TaskState.SUBMITTED)

    def test_terminal_states(self):
        assert TaskState.COMPLETED.is_terminal
        assert TaskState.CANCELED.is_terminal
        assert not TaskState.WORKING.is_terminal


class TestSendMessageResult:
    def test_result_union_by_kind(self):
        message = send_message_result_adapter.validate_python(
            {"kind": "message", "role": "agent", "messageId": "x", "parts": []}
        )
        task = send_message_result_adapter.validate_python(
            {"kind": "task", "id": "t1", "status": "working"}
        )
        assert isinstance(message, A2AMessage)
        assert isinstance(task, A2ATask)
        assert task.status == TaskState.WORKING


class TestSendMessageResponse:
    def test_needs_exactly_one_of_result_or_error(self):
        with pytest.raises(ValidationError):
            SendMessageResponse(id=1)
        with pytest.raises(ValidationError):
            SendMessageResponse(
                id=1,
                result=A2AMessage(role="agent"),
                error={"code": -32603, "message": "x"},
            )

    def test_err_helper(self):
        resp = SendMessageResponse.err(7, -32601, "Method not found")
        assert resp.error.code == -32601
        assert resp.result is None
