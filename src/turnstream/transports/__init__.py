"""Transport implementations."""

from .memory import MemoryTransport, Outbound, echo_responder, scripted

__all__ = ["MemoryTransport", "Outbound", "echo_responder", "scripted"]
