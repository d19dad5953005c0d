"""Live API transport over a raw websocket."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from turnstream.errors import ProtocolViolationError, TransportError
from turnstream.transport import EventSink
from turnstream.types import ToolResult
from turnstream.wire import (
    decode_server_message,
    encode_client_content,
    encode_realtime_input,
    encode_tool_response,
    is_setup_complete,
)

LIVE_HOST = "generativelanguage.googleapis.com"
LIVE_PATH = "/ws/google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"

_CLOSE = object()


def build_live_url(api_key: str, host: str = LIVE_HOST) -> str:
    return f"wss://{host}{LIVE_PATH}?key={api_key}"


class WebSocketTransport:
    """Streams Live API messages over one websocket connection.

    A reader task decodes server messages into the bound sink; a writer task
    drains the outbound queue so sends keep their order without making the
    caller wait.
    """

    def __init__(self, url: str, setup: dict[str, Any], *, connect_timeout_seconds: float = 10.0) -> None:
        self._url = url
        self._setup = setup
        self._connect_timeout_seconds = connect_timeout_seconds
        self._sink: EventSink | None = None
        self._outbound: asyncio.Queue[Any] = asyncio.Queue()
        self._reader: asyncio.Task[None] | None = None
        self._writer: asyncio.Task[None] | None = None
        self._closing = False

    def bind(self, sink: EventSink) -> None:
        self._sink = sink

    async def connect(self) -> None:
        """Open the socket, send the setup message and wait for ``setupComplete``."""
        sink = self._sink
        if sink is None:
            raise TransportError("transport is not bound to a session")
        try:
            ws = await connect(self._url, open_timeout=self._connect_timeout_seconds)
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise TransportError(f"live connect failed: {exc!s}") from exc

        try:
            await ws.send(json.dumps(self._setup))
            raw = await asyncio.wait_for(ws.recv(), timeout=self._connect_timeout_seconds)
            response = json.loads(raw)
        except (OSError, TimeoutError, WebSocketException, ValueError) as exc:
            await ws.close()
            raise TransportError(f"live setup failed: {exc!s}") from exc

        if not isinstance(response, Mapping) or not is_setup_complete(response):
            await ws.close()
            raise TransportError(f"unexpected setup response: {json.dumps(response)[:200]}")
        logger.info("transport.connected setup_complete=true")
        self._reader = asyncio.create_task(self._read(ws, sink))
        self._writer = asyncio.create_task(self._write(ws, sink))

    def send_text(self, content: str) -> None:
        self._enqueue(encode_client_content(content))

    def send_binary(self, data: bytes, mime_type: str) -> None:
        self._enqueue(encode_realtime_input(data, mime_type))

    def send_tool_results(self, results: Sequence[ToolResult]) -> None:
        self._enqueue(encode_tool_response(results))

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        if self._reader is not None:
            self._reader.cancel()
        self._outbound.put_nowait(_CLOSE)

    async def wait_closed(self) -> None:
        if self._writer is not None:
            await self._writer

    def _enqueue(self, message: dict[str, Any]) -> None:
        if self._closing:
            raise TransportError("transport is closed")
        if self._writer is None:
            raise TransportError("transport is not connected")
        self._outbound.put_nowait(message)

    async def _read(self, ws: ClientConnection, sink: EventSink) -> None:
        try:
            async for raw in ws:
                for event in decode_server_message(json.loads(raw)):
                    sink.on_event(event)
        except ConnectionClosed as exc:
            sink.on_error(TransportError(f"connection lost: {exc!s}"))
            return
        except (ProtocolViolationError, ValueError) as exc:
            logger.opt(exception=True).warning("transport.read.invalid")
            sink.on_error(TransportError(f"invalid server message: {exc!s}"))
            return
        except Exception as exc:
            logger.opt(exception=True).error("transport.read.error")
            sink.on_error(TransportError(f"reader failed: {exc!s}"))
            return
        sink.on_closed(ws.close_reason or "connection closed")

    async def _write(self, ws: ClientConnection, sink: EventSink) -> None:
        while True:
            message = await self._outbound.get()
            if message is _CLOSE:
                break
            try:
                await ws.send(json.dumps(message))
            except ConnectionClosed as exc:
                if not self._closing:
                    sink.on_error(TransportError(f"send failed: {exc!s}"))
                break
        await ws.close()
