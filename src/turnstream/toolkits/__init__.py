"""Example tool registrants."""

from __future__ import annotations

from collections.abc import Callable

from turnstream.tools import ToolRegistry

from .canvas import SYSTEM_INSTRUCTION as CANVAS_INSTRUCTION
from .canvas import BusinessModelCanvas, build_canvas_registry
from .lights import LightingState, build_lighting_registry

TOOLKITS: dict[str, Callable[[], ToolRegistry]] = {
    "canvas": build_canvas_registry,
    "lights": build_lighting_registry,
    "none": ToolRegistry,
}

TOOLKIT_INSTRUCTIONS: dict[str, str] = {
    "canvas": CANVAS_INSTRUCTION,
}


def build_toolkit(name: str) -> ToolRegistry:
    return TOOLKITS[name]()


__all__ = [
    "TOOLKITS",
    "TOOLKIT_INSTRUCTIONS",
    "BusinessModelCanvas",
    "LightingState",
    "build_canvas_registry",
    "build_lighting_registry",
    "build_toolkit",
]
