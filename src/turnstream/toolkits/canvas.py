"""Business Model Canvas toolkit.

Each handler adds one entry to a canvas section and reports whether the entry
was new. Duplicates leave the canvas unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from turnstream.tools import ToolRegistry

SECTION_TITLES: dict[str, str] = {
    "key_partners": "Key Partners",
    "key_activities": "Key Activities",
    "key_resources": "Key Resources",
    "value_propositions": "Value Propositions",
    "customer_relationships": "Customer Relationships",
    "channels": "Channels",
    "customer_segments": "Customer Segments",
    "cost_structure": "Cost Structure",
    "revenue_streams": "Revenue Streams",
}

# tool name -> (section, argument name, entry label)
CANVAS_TOOLS: dict[str, tuple[str, str, str]] = {
    "add_customer_segment": ("customer_segments", "segment", "customer segment"),
    "add_value_proposition": ("value_propositions", "proposition", "value proposition"),
    "add_key_partner": ("key_partners", "partner", "key partner"),
    "add_key_activity": ("key_activities", "activity", "key activity"),
}

SHOWN_SECTIONS = ("customer_segments", "value_propositions", "key_partners", "key_activities")

SYSTEM_INSTRUCTION = """You are helping fill out a Business Model Canvas through natural conversation.
When users mention:
- Customers/target market -> immediately call add_customer_segment
- Value/benefits/solutions -> immediately call add_value_proposition
- Partners/integrations -> immediately call add_key_partner
- Core activities/tasks -> immediately call add_key_activity

Be conversational and extract information naturally from what they say."""


@dataclass
class BusinessModelCanvas:
    sections: dict[str, list[str]] = field(default_factory=lambda: {name: [] for name in SECTION_TITLES})

    def add(self, section: str, item: str) -> bool:
        entries = self.sections[section]
        if item in entries:
            return False
        entries.append(item)
        return True

    def render(self, sections: tuple[str, ...] = SHOWN_SECTIONS) -> str:
        lines = ["=== BUSINESS MODEL CANVAS ===", ""]
        for section in sections:
            lines.append(f"{SECTION_TITLES[section]}: {', '.join(self.sections[section]) or '(empty)'}")
        return "\n".join(lines)


def _make_handler(section: str, argument: str) -> Callable[..., dict[str, str]]:
    title = SECTION_TITLES[section]

    def _handler(*, context: BusinessModelCanvas, **kwargs: str) -> dict[str, str]:
        if set(kwargs) != {argument}:
            raise TypeError(f"expected exactly one argument '{argument}', got {sorted(kwargs)}")
        value = kwargs[argument]
        if context.add(section, value):
            return {"result": f'Added "{value}" to {title}'}
        return {"result": f'"{value}" already in {title}'}

    return _handler


def register_canvas_tools(registry: ToolRegistry) -> None:
    """Register the canvas handlers. The registry context must be a canvas."""
    for name, (section, argument, label) in CANVAS_TOOLS.items():
        registry.register(
            name,
            _make_handler(section, argument),
            description=f"Add a {label} to the business model canvas",
            parameters={
                "type": "object",
                "properties": {argument: {"type": "string", "description": f"The {label} to add"}},
                "required": [argument],
            },
            context=True,
        )


def build_canvas_registry(canvas: BusinessModelCanvas | None = None) -> ToolRegistry:
    registry = ToolRegistry(context=canvas if canvas is not None else BusinessModelCanvas())
    register_canvas_tools(registry)
    return registry
