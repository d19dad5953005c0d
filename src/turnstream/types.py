"""Session event, tool call and turn models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ToolCall:
    """One function invocation requested by the remote peer."""

    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", _freeze(self.arguments))


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call, echoed back to the peer under the call id."""

    id: str
    name: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", _freeze(self.payload))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "response": dict(self.payload)}


@dataclass(frozen=True)
class TextFragment:
    text: str


@dataclass(frozen=True)
class MediaFragment:
    mime_type: str
    data: bytes


@dataclass(frozen=True)
class ToolCallRequest:
    calls: tuple[ToolCall, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "calls", tuple(self.calls))


@dataclass(frozen=True)
class TurnComplete:
    pass


@dataclass(frozen=True)
class TransportFailure:
    """Synthetic terminal event for a transport fault."""

    cause: BaseException | str

    @property
    def message(self) -> str:
        return str(self.cause)


@dataclass(frozen=True)
class Closed:
    """Synthetic terminal event for a closed transport."""

    reason: str = ""


Event = TextFragment | MediaFragment | ToolCallRequest | TurnComplete | TransportFailure | Closed


def event_kind(event: Event) -> str:
    return type(event).__name__


class Modality(StrEnum):
    TEXT = "text"
    MEDIA = "media"


ALL_MODALITIES: frozenset[Modality] = frozenset(Modality)


class TurnEnd(StrEnum):
    """Why a turn was sealed."""

    COMPLETE = "complete"
    TOOL_CALLS = "tool_calls"
    ERROR = "error"
    CLOSED = "closed"


@dataclass(frozen=True)
class Turn:
    """A sealed, ordered aggregation of events for one drain step."""

    events: tuple[Event, ...]
    end: TurnEnd
    modalities: frozenset[Modality] = ALL_MODALITIES

    @property
    def text(self) -> str:
        if Modality.TEXT not in self.modalities:
            return ""
        return "".join(event.text for event in self.events if isinstance(event, TextFragment))

    @property
    def media(self) -> tuple[MediaFragment, ...]:
        if Modality.MEDIA not in self.modalities:
            return ()
        return tuple(event for event in self.events if isinstance(event, MediaFragment))

    @property
    def tool_calls(self) -> tuple[ToolCall, ...]:
        calls: list[ToolCall] = []
        for event in self.events:
            if isinstance(event, ToolCallRequest):
                calls.extend(event.calls)
        return tuple(calls)

    @property
    def error(self) -> str | None:
        for event in self.events:
            if isinstance(event, TransportFailure):
                return event.message
        return None

    @property
    def is_empty(self) -> bool:
        return not self.events

    @property
    def is_terminal(self) -> bool:
        """True when the session cannot produce further turns."""
        return self.end in (TurnEnd.ERROR, TurnEnd.CLOSED)

    def media_bytes(self, mime_prefix: str = "") -> bytes:
        return b"".join(fragment.data for fragment in self.media if fragment.mime_type.startswith(mime_prefix))
