from turnstream.toolkits import LightingState, build_lighting_registry, build_toolkit
from turnstream.toolkits.canvas import BusinessModelCanvas, build_canvas_registry
from turnstream.types import ToolCall


def test_canvas_handlers_dedupe_per_section() -> None:
    canvas = BusinessModelCanvas()
    registry = build_canvas_registry(canvas)

    added = registry.dispatch(ToolCall(id="1", name="add_customer_segment", arguments={"segment": "Students"}))
    again = registry.dispatch(ToolCall(id="2", name="add_customer_segment", arguments={"segment": "Students"}))
    other = registry.dispatch(ToolCall(id="3", name="add_value_proposition", arguments={"proposition": "Students"}))

    assert added.payload == {"result": 'Added "Students" to Customer Segments'}
    assert again.payload == {"result": '"Students" already in Customer Segments'}
    assert other.payload == {"result": 'Added "Students" to Value Propositions'}
    assert canvas.sections["customer_segments"] == ["Students"]


def test_canvas_handler_rejects_wrong_arguments() -> None:
    canvas = BusinessModelCanvas()
    registry = build_canvas_registry(canvas)

    result = registry.dispatch(ToolCall(id="1", name="add_key_activity", arguments={"task": "Roasting"}))

    assert result.payload["error"] == "handler_fault"
    assert canvas.sections["key_activities"] == []


def test_canvas_render_marks_empty_sections() -> None:
    canvas = BusinessModelCanvas()
    canvas.add("key_partners", "Acme")
    canvas.add("key_partners", "Globex")

    rendered = canvas.render()

    assert "Key Partners: Acme, Globex" in rendered
    assert "Customer Segments: (empty)" in rendered


def test_canvas_declarations_describe_required_argument() -> None:
    declarations = {item["name"]: item for item in build_canvas_registry().function_declarations()}

    assert set(declarations) == {"add_customer_segment", "add_value_proposition", "add_key_partner", "add_key_activity"}
    assert declarations["add_key_activity"]["description"] == "Add a key activity to the business model canvas"
    assert declarations["add_key_partner"]["parameters"]["required"] == ["partner"]


def test_lighting_tools_toggle_state() -> None:
    state = LightingState()
    registry = build_lighting_registry(state)

    on = registry.dispatch(ToolCall(id="1", name="turn_on_the_lights"))
    assert on.payload == {"result": "ok"}
    assert state.on is True

    registry.dispatch(ToolCall(id="2", name="turn_off_the_lights"))
    assert state.on is False


def test_build_toolkit_none_is_empty() -> None:
    assert len(build_toolkit("none")) == 0
    assert len(build_toolkit("lights")) == 2
