"""Tool dispatch registry."""

from __future__ import annotations

import inspect
import json
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from turnstream.errors import HandlerFaultError, UnknownToolError
from turnstream.types import ToolCall, ToolResult

ToolHandler = Callable[..., Any]

UNKNOWN_FUNCTION_RESULT = "Unknown function"


def _preview(value: Any, width: int = 30) -> str:
    """Render one call argument for the log line, truncated to ``width``."""
    try:
        rendered = json.dumps(value, ensure_ascii=False)
    except TypeError:
        rendered = repr(value)
    if len(rendered) <= width:
        return rendered
    return rendered[: width - 3] + "..."


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata and runtime handle."""

    name: str
    handler: ToolHandler
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)
    context: bool = False

    def declaration(self) -> dict[str, Any]:
        """Render the function declaration announced to the peer."""
        declaration: dict[str, Any] = {"name": self.name}
        if self.description:
            declaration["description"] = self.description
        if self.parameters:
            declaration["parameters"] = self.parameters
        return declaration


class ToolRegistry:
    """Maps tool names to synchronous handlers and converts calls into results.

    Handlers receive the call arguments as keyword arguments. Handlers
    registered with ``context=True`` also receive the registry's context
    object (the application state they mutate) as ``context=``.
    """

    def __init__(self, context: Any = None) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self.context = context

    def register(
        self,
        name: str,
        handler: ToolHandler | None = None,
        *,
        description: str = "",
        parameters: Mapping[str, Any] | None = None,
        context: bool = False,
    ) -> Any:
        """Install a handler, or return a decorator when no handler is given.

        Registering an existing name replaces the previous entry.
        """

        def _register(func: ToolHandler) -> ToolHandler:
            if name in self._tools:
                logger.info("tool.register.replace name={}", name)
            self._tools[name] = ToolDescriptor(
                name=name,
                handler=func,
                description=description,
                parameters=dict(parameters or {}),
                context=context,
            )
            return func

        if handler is None:
            return _register
        _register(handler)
        return self._tools[name]

    def has(self, name: str) -> bool:
        return name in self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def descriptors(self) -> list[ToolDescriptor]:
        return sorted(self._tools.values(), key=lambda item: item.name)

    def function_declarations(self) -> list[dict[str, Any]]:
        return [descriptor.declaration() for descriptor in self.descriptors()]

    def dispatch(self, call: ToolCall) -> ToolResult:
        """Run one call. Unknown tools and handler faults become result payloads."""
        try:
            output = self._invoke(call)
        except UnknownToolError as exc:
            logger.warning("tool.call.unknown name={} id={}", call.name, call.id)
            return ToolResult(
                id=call.id,
                name=call.name,
                payload={"result": UNKNOWN_FUNCTION_RESULT, "error": "unknown_tool", "message": str(exc)},
            )
        except HandlerFaultError as exc:
            return ToolResult(
                id=call.id,
                name=call.name,
                payload={"result": "error", "error": "handler_fault", "message": str(exc.cause)},
            )
        return ToolResult(id=call.id, name=call.name, payload=_as_payload(output))

    def _invoke(self, call: ToolCall) -> Any:
        descriptor = self.get(call.name)
        if descriptor is None:
            raise UnknownToolError(call.name)

        kwargs = dict(call.arguments)
        self._log_tool_call(call, kwargs)
        start = time.monotonic()
        try:
            if descriptor.context:
                output = descriptor.handler(context=self.context, **kwargs)
            else:
                output = descriptor.handler(**kwargs)
            if inspect.isawaitable(output):
                close = getattr(output, "close", None)
                if callable(close):
                    close()
                raise TypeError("handler returned an awaitable, tool handlers must be synchronous")
            return output
        except Exception as exc:
            logger.exception("tool.call.error name={} id={}", call.name, call.id)
            raise HandlerFaultError(call.name, exc) from exc
        finally:
            duration = time.monotonic() - start
            logger.info("tool.call.end name={} duration={:.3f}ms", call.name, duration * 1000)

    def _log_tool_call(self, call: ToolCall, kwargs: dict[str, Any]) -> None:
        args = " ".join(f"{key}={_preview(value)}" for key, value in kwargs.items())
        logger.info("tool.call.start name={} id={} args=[{}]", call.name, call.id, args)


def _as_payload(output: Any) -> dict[str, Any]:
    if isinstance(output, Mapping):
        return dict(output)
    if output is None:
        return {"result": "ok"}
    return {"result": output}
