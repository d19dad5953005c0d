"""Live API JSON message codec.

Server messages carry ``serverContent`` (model turn parts and the
``turnComplete`` flag), ``toolCall`` (function calls) or bookkeeping such as
``setupComplete``. Client messages are ``setup``, ``clientContent``,
``realtimeInput`` and ``toolResponse``.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from turnstream.errors import ProtocolViolationError
from turnstream.types import Event, MediaFragment, TextFragment, ToolCall, ToolCallRequest, ToolResult, TurnComplete


def decode_server_message(message: Mapping[str, Any]) -> list[Event]:
    """Translate one server message into core events, in wire order."""
    if not isinstance(message, Mapping):
        raise ProtocolViolationError(f"server message must be an object, got {type(message).__name__}")

    events: list[Event] = []
    tool_call = message.get("toolCall")
    if tool_call is not None:
        events.append(_decode_tool_call(tool_call))

    if "toolCallCancellation" in message:
        ids = _mapping(message["toolCallCancellation"], "toolCallCancellation").get("ids", [])
        logger.info("wire.tool_call_cancellation ids={}", ids)

    server_content = message.get("serverContent")
    if server_content is not None:
        content = _mapping(server_content, "serverContent")
        model_turn = content.get("modelTurn")
        if model_turn:
            for part in _sequence(_mapping(model_turn, "modelTurn").get("parts", []), "parts"):
                event = _decode_part(_mapping(part, "part"))
                if event is not None:
                    events.append(event)
        if content.get("turnComplete"):
            events.append(TurnComplete())
    return events


def _decode_tool_call(tool_call: Any) -> ToolCallRequest:
    calls: list[ToolCall] = []
    for raw in _sequence(_mapping(tool_call, "toolCall").get("functionCalls", []), "functionCalls"):
        fc = _mapping(raw, "functionCall")
        name = fc.get("name")
        if not isinstance(name, str) or not name:
            raise ProtocolViolationError("functionCall without a name")
        args = fc.get("args") or {}
        calls.append(ToolCall(id=str(fc.get("id", "")), name=name, arguments=_mapping(args, "args")))
    return ToolCallRequest(calls=tuple(calls))


def _decode_part(part: Mapping[str, Any]) -> Event | None:
    inline_data = part.get("inlineData")
    if inline_data:
        blob = _mapping(inline_data, "inlineData")
        try:
            data = base64.b64decode(blob.get("data", ""), validate=True)
        except (binascii.Error, TypeError, ValueError) as exc:
            raise ProtocolViolationError(f"inlineData is not valid base64: {exc}") from exc
        return MediaFragment(mime_type=str(blob.get("mimeType", "application/octet-stream")), data=data)
    text = part.get("text")
    if text:
        return TextFragment(text=str(text))
    return None


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ProtocolViolationError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _sequence(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise ProtocolViolationError(f"{what} must be a list, got {type(value).__name__}")
    return value


def encode_setup(
    model: str,
    *,
    response_modality: str = "TEXT",
    system_instruction: str | None = None,
    function_declarations: Sequence[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    if not model.startswith("models/"):
        model = f"models/{model}"
    setup: dict[str, Any] = {
        "model": model,
        "generationConfig": {"responseModalities": [response_modality.upper()]},
    }
    if system_instruction:
        setup["systemInstruction"] = {"role": "user", "parts": [{"text": system_instruction}]}
    if function_declarations:
        setup["tools"] = [{"functionDeclarations": [dict(item) for item in function_declarations]}]
    return {"setup": setup}


def encode_client_content(text: str, *, turn_complete: bool = True) -> dict[str, Any]:
    return {
        "clientContent": {
            "turnComplete": turn_complete,
            "turns": [{"role": "user", "parts": [{"text": text}]}],
        }
    }


def encode_realtime_input(data: bytes, mime_type: str) -> dict[str, Any]:
    key = "audio" if mime_type.startswith("audio/") else "video"
    return {
        "realtimeInput": {
            key: {
                "data": base64.b64encode(data).decode("ascii"),
                "mimeType": mime_type,
            }
        }
    }


def encode_tool_response(results: Sequence[ToolResult]) -> dict[str, Any]:
    return {"toolResponse": {"functionResponses": [result.to_dict() for result in results]}}


def is_setup_complete(message: Mapping[str, Any]) -> bool:
    return "setupComplete" in message
