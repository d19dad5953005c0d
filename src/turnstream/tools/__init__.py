"""Tool dispatch for turnstream sessions."""

from .registry import UNKNOWN_FUNCTION_RESULT, ToolDescriptor, ToolHandler, ToolRegistry

__all__ = [
    "UNKNOWN_FUNCTION_RESULT",
    "ToolDescriptor",
    "ToolHandler",
    "ToolRegistry",
]
