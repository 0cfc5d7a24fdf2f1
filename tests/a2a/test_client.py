"""Tests for the A2A client: discover and message/send."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from agentwire.a2a.client import A2AClient, card_url, rpc_url
from agentwire.a2a.models import A2AMessage, A2ATask, AgentCard, AgentSkill, TaskState, TextPart
from agentwire.exceptions import A2AClientError


def _mock_http(method: str, payload=None, error: Exception | None = None):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock(return_value=None)

    instance = AsyncMock()
    if error is not None:
        setattr(instance, method, AsyncMock(side_effect=error))
    else:
        setattr(instance, method, AsyncMock(return_value=response))
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


def test_urls():
    assert card_url("http://h:1/") == "http://h:1/.well-known/agent-card.json"
    assert card_url("http://h/custom/card.json") == "http://h/custom/card.json"
    assert rpc_url("http://h:1") == "http://h:1/a2a"
    assert rpc_url("http://h:1/a2a/") == "http://h:1/a2a"


class TestDiscover:
    @pytest.mark.asyncio
    async def test_parses_card(self):
        card_data = AgentCard(
            name="prime_agent",
            url="http://remote:9877/a2a",
            skills=[AgentSkill(id="check_prime", name="Check Prime")],
        ).model_dump(by_alias=True)

        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("get", card_data)
            card = await A2AClient().discover("http://remote:9877")

        assert card.name == "prime_agent"
        assert card.skills[0].id == "check_prime"

    @pytest.mark.asyncio
    async def test_connection_error(self):
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("get", error=httpx.ConnectError("refused"))
            with pytest.raises(A2AClientError, match="agent card"):
                await A2AClient().discover("http://remote:9877")

    @pytest.mark.asyncio
    async def test_invalid_card(self):
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("get", {"description": "no name"})
            with pytest.raises(A2AClientError, match="Invalid agent card"):
                await A2AClient().discover("http://remote:9877")


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_message_result(self):
        payload = {
            "jsonrpc": "2.0", "id": 1,
            "result": {"kind": "message", "role": "agent", "messageId": "r1",
                       "parts": [{"kind": "text", "text": "7 is prime number."}]},
        }
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            instance = _mock_http("post", payload)
            MockClient.return_value = instance
            result = await A2AClient().send_message(
                "http://remote:9877", A2AMessage(parts=[TextPart(text="is 7 prime?")]),
            )

        assert isinstance(result, A2AMessage)
        assert result.text == "7 is prime number."
        url = instance.post.call_args.args[0]
        assert url == "http://remote:9877/a2a"

    @pytest.mark.asyncio
    async def test_task_result_to_card_url(self):
        payload = {"jsonrpc": "2.0", "id": 1, "result": {"kind": "task", "id": "t1", "status": "working"}}
        card = AgentCard(name="r", url="http://remote:9877/a2a")
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            instance = _mock_http("post", payload)
            MockClient.return_value = instance
            result = await A2AClient().send_message(card, A2AMessage(parts=[TextPart(text="x")]))

        assert isinstance(result, A2ATask)
        assert result.status == TaskState.WORKING
        assert instance.post.call_args.args[0] == "http://remote:9877/a2a"

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self):
        payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "Internal error"}}
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("post", payload)
            with pytest.raises(A2AClientError, match="-32603"):
                await A2AClient().send_message("http://remote", A2AMessage())

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("post", error=httpx.ReadTimeout("slow"))
            with pytest.raises(A2AClientError):
                await A2AClient().send_message("http://remote", A2AMessage())

    @pytest.mark.asyncio
    async def test_unexpected_result_raises(self):
        payload = {"jsonrpc": "2.0", "id": 1, "result": {"kind": "artifact"}}
        with patch("agentwire.a2a.client.httpx.AsyncClient") as MockClient:
            MockClient.return_value = _mock_http("post", payload)
            with pytest.raises(A2AClientError, match="Unexpected"):
                await A2AClient().send_message("http://remote", A2AMessage())
