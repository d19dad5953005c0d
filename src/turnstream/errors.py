"""Application-level exception types for turnstream."""

from __future__ import annotations


class TurnstreamError(Exception):
    """Base exception for turnstream."""


class ConfigurationError(TurnstreamError):
    """Raised when settings or command-line options are invalid."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class TransportError(TurnstreamError):
    """Connection-level fault reported by a transport."""


class SessionClosedError(TurnstreamError):
    """Raised when sending on a session that has been closed."""


class ProtocolViolationError(TurnstreamError):
    """Raised when the peer or the caller breaks the tool-call protocol."""


class PendingToolCallsError(ProtocolViolationError):
    """Raised when a user turn is sent while tool calls are unresolved."""

    def __init__(self, call_ids: list[str]) -> None:
        super().__init__(f"Unresolved tool calls: {', '.join(call_ids)}")
        self.call_ids = call_ids


class DispatchError(TurnstreamError):
    """Base exception for faults absorbed at the dispatch boundary."""


class UnknownToolError(DispatchError):
    """No handler is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown function: {name}")
        self.name = name


class HandlerFaultError(DispatchError):
    """A registered handler raised while servicing a tool call."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"{name} failed: {cause!s}")
        self.name = name
        self.cause = cause
