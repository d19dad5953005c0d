"""turnstream - turn-based coordination over bidirectional streaming sessions."""

from .aggregator import TurnAggregator
from .errors import (
    HandlerFaultError,
    PendingToolCallsError,
    ProtocolViolationError,
    SessionClosedError,
    TransportError,
    TurnstreamError,
    UnknownToolError,
)
from .queue import InboundEventQueue
from .session import ExchangeResult, LiveSession, SessionState
from .tools import ToolRegistry
from .transport import EventSink, Transport
from .types import (
    Closed,
    Event,
    MediaFragment,
    Modality,
    TextFragment,
    ToolCall,
    ToolCallRequest,
    ToolResult,
    TransportFailure,
    Turn,
    TurnComplete,
    TurnEnd,
)

__version__ = "0.1.0"

__all__ = [
    "Closed",
    "Event",
    "EventSink",
    "ExchangeResult",
    "HandlerFaultError",
    "InboundEventQueue",
    "LiveSession",
    "MediaFragment",
    "Modality",
    "PendingToolCallsError",
    "ProtocolViolationError",
    "SessionClosedError",
    "SessionState",
    "TextFragment",
    "ToolCall",
    "ToolCallRequest",
    "ToolRegistry",
    "ToolResult",
    "Transport",
    "TransportError",
    "TransportFailure",
    "Turn",
    "TurnAggregator",
    "TurnComplete",
    "TurnEnd",
    "TurnstreamError",
    "UnknownToolError",
]
