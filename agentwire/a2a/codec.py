"""JSON-RPC 2.0 envelope codec for ``message/send``.

Decoding turns raw bytes into a typed SendMessageRequest or raises
MalformedRequestError with the JSON-RPC code to answer with. Encoding
always produces a body with exactly one of ``result`` / ``error``.
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import ValidationError

from agentwire.a2a.models import (
    A2AMessage,
    JsonRpcError,
    MessageSendParams,
    SendMessageRequest,
    SendMessageResponse,
)
from agentwire.exceptions import (
    AgentTimeoutError,
    InvalidMessageError,
    MalformedRequestError,
)

SEND_MESSAGE_METHOD = "message/send"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
AGENT_TIMEOUT = -32001

INTERNAL_ERROR_MESSAGE = "Internal error processing message/send request"
TIMEOUT_MESSAGE = "Agent execution timed out"


def decode_request(raw: bytes | str | dict[str, Any]) -> SendMessageRequest:
    """Parse and validate a ``message/send`` envelope."""
    if isinstance(raw, dict):
        body = raw
    else:
        try:
            body = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise MalformedRequestError("Parse error", code=PARSE_ERROR) from e
        if not isinstance(body, dict):
            raise MalformedRequestError("Parse error", code=PARSE_ERROR)

    request_id = body.get("id")
    if not isinstance(request_id, (int, str)) or isinstance(request_id, bool):
        request_id = None

    if body.get("jsonrpc") != "2.0":
        raise MalformedRequestError(
            "Invalid Request: jsonrpc must be '2.0'", request_id=request_id,
        )
    method = body.get("method")
    if not isinstance(method, str) or not method:
        raise MalformedRequestError("Invalid Request: method is required", request_id=request_id)
    if method != SEND_MESSAGE_METHOD:
        raise MalformedRequestError(
            f"Method not found: {method}", code=METHOD_NOT_FOUND, request_id=request_id,
        )
    params = body.get("params")
    if not isinstance(params, dict):
        raise MalformedRequestError("Invalid Request: params is required", request_id=request_id)
    if not isinstance(params.get("message"), dict):
        raise MalformedRequestError(
            "Invalid Request: params.message is required", request_id=request_id,
        )

    try:
        send_params = MessageSendParams.model_validate(params)
    except ValidationError as e:
        raise MalformedRequestError(
            f"Invalid params: {_first_error(e)}", code=INVALID_PARAMS, request_id=request_id,
        ) from e
    return SendMessageRequest(id=request_id, params=send_params)


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(p) for p in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


def error_for(exc: BaseException) -> JsonRpcError:
    """Map an exception to a stable JSON-RPC error. Never echoes internals."""
    if isinstance(exc, MalformedRequestError):
        return JsonRpcError(code=exc.code, message=str(exc))
    if isinstance(exc, InvalidMessageError):
        return JsonRpcError(code=INVALID_PARAMS, message=f"Invalid params: {exc}")
    if isinstance(exc, AgentTimeoutError):
        return JsonRpcError(code=AGENT_TIMEOUT, message=TIMEOUT_MESSAGE)
    # AgentExecutionError and anything unexpected look the same to the caller
    return JsonRpcError(code=INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)


def error_response(request_id: int | str | None, exc: BaseException) -> SendMessageResponse:
    return SendMessageResponse(id=request_id, error=error_for(exc))


def response_to_dict(response: SendMessageResponse) -> dict[str, Any]:
    data = response.model_dump(by_alias=True, mode="json", exclude_none=True)
    data["id"] = response.id  # JSON-RPC wants an explicit null id
    return data


def encode_response(response: SendMessageResponse) -> bytes:
    return orjson.dumps(response_to_dict(response))


def encode_request(request: SendMessageRequest) -> bytes:
    return orjson.dumps(request.model_dump(by_alias=True, mode="json", exclude_none=True))


def encode_message(message: A2AMessage) -> bytes:
    return orjson.dumps(message.model_dump(by_alias=True, mode="json", exclude_none=True))


def decode_message(raw: bytes | str) -> A2AMessage:
    return A2AMessage.model_validate(orjson.loads(raw))
