"""Lighting toggle toolkit."""

from __future__ import annotations

from dataclasses import dataclass

from turnstream.tools import ToolRegistry


@dataclass
class LightingState:
    on: bool = False


def turn_on_the_lights(*, context: LightingState) -> dict[str, str]:
    context.on = True
    return {"result": "ok"}


def turn_off_the_lights(*, context: LightingState) -> dict[str, str]:
    context.on = False
    return {"result": "ok"}


def register_lighting_tools(registry: ToolRegistry) -> None:
    registry.register("turn_on_the_lights", turn_on_the_lights, context=True)
    registry.register("turn_off_the_lights", turn_off_the_lights, context=True)


def build_lighting_registry(state: LightingState | None = None) -> ToolRegistry:
    registry = ToolRegistry(context=state if state is not None else LightingState())
    register_lighting_tools(registry)
    return registry
