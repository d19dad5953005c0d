from dataclasses import dataclass, field

from turnstream.tools import UNKNOWN_FUNCTION_RESULT, ToolRegistry
from turnstream.types import ToolCall


def test_registry_logs_once_for_dispatch(monkeypatch) -> None:
    logs: list[str] = []

    def _capture(message: str, *args: object) -> None:
        logs.append(message)

    monkeypatch.setattr("turnstream.tools.registry.logger.info", _capture)
    monkeypatch.setattr("turnstream.tools.registry.logger.exception", _capture)

    registry = ToolRegistry()

    @registry.register("math_add", description="add")
    def add(*, a: int, b: int) -> int:
        return a + b

    result = registry.dispatch(ToolCall(id="c1", name="math_add", arguments={"a": 1, "b": 2}))
    assert result.id == "c1"
    assert result.name == "math_add"
    assert result.payload == {"result": 3}
    assert logs.count("tool.call.start name={} id={} args=[{}]") == 1
    assert logs.count("tool.call.end name={} duration={:.3f}ms") == 1


def test_unknown_tool_is_reported_not_raised() -> None:
    registry = ToolRegistry()

    result = registry.dispatch(ToolCall(id="9", name="fly", arguments={}))

    assert result.id == "9"
    assert result.payload["result"] == UNKNOWN_FUNCTION_RESULT
    assert result.payload["error"] == "unknown_tool"
    assert "fly" in result.payload["message"]


def test_handler_fault_becomes_failure_payload() -> None:
    registry = ToolRegistry()

    @registry.register("explode")
    def explode() -> None:
        raise RuntimeError("boom")

    result = registry.dispatch(ToolCall(id="e1", name="explode"))

    assert result.payload == {"result": "error", "error": "handler_fault", "message": "boom"}


def test_malformed_arguments_become_failure_payload() -> None:
    registry = ToolRegistry()
    registry.register("greet", lambda *, name: f"hi {name}")

    result = registry.dispatch(ToolCall(id="g1", name="greet", arguments={"nickname": "x"}))

    assert result.payload["error"] == "handler_fault"


def test_async_handler_is_rejected_as_fault() -> None:
    registry = ToolRegistry()

    async def _later() -> str:
        return "never"

    registry.register("later", _later)

    result = registry.dispatch(ToolCall(id="l1", name="later"))

    assert result.payload["error"] == "handler_fault"
    assert "synchronous" in result.payload["message"]


def test_context_handler_receives_registry_context() -> None:
    @dataclass
    class Counter:
        seen: list[str] = field(default_factory=list)

    counter = Counter()
    registry = ToolRegistry(context=counter)

    @registry.register("track", context=True)
    def track(*, context: Counter, value: str) -> dict[str, int]:
        context.seen.append(value)
        return {"count": len(context.seen)}

    first = registry.dispatch(ToolCall(id="1", name="track", arguments={"value": "a"}))
    second = registry.dispatch(ToolCall(id="2", name="track", arguments={"value": "b"}))

    assert counter.seen == ["a", "b"]
    assert first.payload == {"count": 1}
    assert second.payload == {"count": 2}


def test_handler_results_are_normalized_to_payloads() -> None:
    registry = ToolRegistry()
    registry.register("nothing", lambda: None)
    registry.register("scalar", lambda: "done")

    assert registry.dispatch(ToolCall(id="1", name="nothing")).payload == {"result": "ok"}
    assert registry.dispatch(ToolCall(id="2", name="scalar")).payload == {"result": "done"}


def test_reregistration_replaces_previous_handler() -> None:
    registry = ToolRegistry()
    registry.register("version", lambda: "v1")
    registry.register("version", lambda: "v2")

    assert len(registry) == 1
    assert registry.dispatch(ToolCall(id="1", name="version")).payload == {"result": "v2"}


def test_handler_is_invoked_exactly_once_per_dispatch() -> None:
    calls: list[int] = []
    registry = ToolRegistry()

    @registry.register("flaky")
    def flaky() -> None:
        calls.append(1)
        raise ValueError("nope")

    registry.dispatch(ToolCall(id="f1", name="flaky"))

    assert calls == [1]


def test_function_declarations_are_sorted_and_omit_empty_fields() -> None:
    registry = ToolRegistry()
    registry.register("turn_on_the_lights", lambda: None)
    registry.register(
        "add_key_partner",
        lambda *, partner: partner,
        description="Add a key partner",
        parameters={"type": "object", "properties": {"partner": {"type": "string"}}, "required": ["partner"]},
    )

    assert registry.function_declarations() == [
        {
            "name": "add_key_partner",
            "description": "Add a key partner",
            "parameters": {"type": "object", "properties": {"partner": {"type": "string"}}, "required": ["partner"]},
        },
        {"name": "turn_on_the_lights"},
    ]


def test_start_log_truncates_long_arguments(log_messages: list[str]) -> None:
    registry = ToolRegistry()
    registry.register("add_value_proposition", lambda *, proposition: proposition)

    registry.dispatch(ToolCall(id="v1", name="add_value_proposition", arguments={"proposition": "x" * 100}))

    started = [message for message in log_messages if message.startswith("tool.call.start")]
    assert started == ['tool.call.start name=add_value_proposition id=v1 args=[proposition="' + "x" * 26 + "...]"]
