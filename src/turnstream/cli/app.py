"""Typer application for turnstream."""

from __future__ import annotations

import asyncio
from typing import Any, NoReturn

import typer
from loguru import logger

from turnstream.cli.render import Renderer
from turnstream.config import Settings, load_settings
from turnstream.errors import ConfigurationError, TransportError
from turnstream.logging_utils import configure_logging
from turnstream.session import ExchangeResult, LiveSession
from turnstream.toolkits import TOOLKIT_INSTRUCTIONS, TOOLKITS, BusinessModelCanvas, build_toolkit
from turnstream.tools import ToolRegistry
from turnstream.transports import MemoryTransport, echo_responder
from turnstream.transports.websocket import WebSocketTransport, build_live_url
from turnstream.types import Modality, TurnEnd
from turnstream.wire import encode_setup

app = typer.Typer(
    name="turnstream",
    help="Turn-based client for bidirectional streaming sessions.",
    add_completion=False,
)

EXIT_COMMANDS = {"quit", "exit"}


def _resolve_toolkit(name: str) -> ToolRegistry:
    if name not in TOOLKITS:
        raise typer.BadParameter(f"unknown toolkit '{name}', choose from: {', '.join(sorted(TOOLKITS))}")
    return build_toolkit(name)


def _modalities(settings: Settings) -> set[Modality]:
    if settings.response_modality == "AUDIO":
        return {Modality.MEDIA, Modality.TEXT}
    return {Modality.TEXT}


async def open_session(settings: Settings, registry: ToolRegistry, *, toolkit: str, offline: bool) -> LiveSession:
    """Create a session over the Live API, or over an echoing in-memory peer when offline."""
    if offline:
        return LiveSession(MemoryTransport(echo_responder), registry)

    setup = encode_setup(
        settings.model,
        response_modality=settings.response_modality,
        system_instruction=settings.system_instruction or TOOLKIT_INSTRUCTIONS.get(toolkit),
        function_declarations=registry.function_declarations(),
    )
    transport = WebSocketTransport(
        build_live_url(settings.require_api_key(), settings.host),
        setup,
        connect_timeout_seconds=settings.connect_timeout_seconds,
    )
    session = LiveSession(transport, registry, modalities=_modalities(settings))
    await transport.connect()
    return session


def _render_exchange(renderer: Renderer, result: ExchangeResult) -> None:
    for tool_result in result.tool_results:
        renderer.tool_result(tool_result.name, str(tool_result.payload.get("result", "")))
    if result.text:
        renderer.assistant_message(result.text)
    if result.error:
        renderer.error(result.error)


def _show_state(renderer: Renderer, registry: ToolRegistry) -> None:
    context: Any = registry.context
    if isinstance(context, BusinessModelCanvas):
        renderer.info(context.render())
    elif context is not None:
        renderer.info(repr(context))
    else:
        renderer.info("(no state)")


async def run_chat(session: LiveSession, renderer: Renderer) -> None:
    """Interactive loop: one exchange per line until quit or disconnect."""
    async with session:
        while True:
            try:
                raw = (await renderer.prompt("> ")).strip()
            except (EOFError, KeyboardInterrupt):
                raw = "quit"
            if not raw:
                continue

            command = raw.lower()
            if command in EXIT_COMMANDS:
                _show_state(renderer, session.registry)
                renderer.info("Goodbye!")
                return
            if command == "show":
                _show_state(renderer, session.registry)
                continue

            result = await session.run_exchange(raw)
            _render_exchange(renderer, result)
            if result.end in (TurnEnd.ERROR, TurnEnd.CLOSED):
                renderer.info("Disconnected.")
                return


def _exit_with_error(message: str) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(1)


@app.command()
def chat(
    toolkit: str = typer.Option("canvas", "--toolkit", "-t", help="Tool set to register"),
    model: str | None = typer.Option(None, "--model", "-m", help="Live model name"),
    offline: bool = typer.Option(False, "--offline", help="Use an in-memory echo peer"),
) -> None:
    """Chat with the model, servicing tool calls locally."""
    settings = load_settings(model=model)
    configure_logging(profile="chat", level=settings.log_level)
    registry = _resolve_toolkit(toolkit)
    renderer = Renderer()

    async def _main() -> None:
        session = await open_session(settings, registry, toolkit=toolkit, offline=offline)
        renderer.welcome(settings.model, toolkit)
        await run_chat(session, renderer)

    try:
        asyncio.run(_main())
    except (ConfigurationError, TransportError) as exc:
        _exit_with_error(str(exc))


@app.command()
def send(
    message: str = typer.Argument(..., help="User turn to send"),
    toolkit: str = typer.Option("none", "--toolkit", "-t", help="Tool set to register"),
    model: str | None = typer.Option(None, "--model", "-m", help="Live model name"),
    offline: bool = typer.Option(False, "--offline", help="Use an in-memory echo peer"),
) -> None:
    """Run one exchange and print the reply."""
    settings = load_settings(model=model)
    configure_logging(profile="default", level=settings.log_level)
    registry = _resolve_toolkit(toolkit)

    async def _main() -> ExchangeResult:
        async with await open_session(settings, registry, toolkit=toolkit, offline=offline) as session:
            return await session.run_exchange(message)

    try:
        result = asyncio.run(_main())
    except (ConfigurationError, TransportError) as exc:
        _exit_with_error(str(exc))

    for tool_result in result.tool_results:
        typer.echo(f"[{tool_result.name}] {tool_result.payload.get('result', '')}")
    if result.text:
        typer.echo(result.text)
    if result.error:
        logger.error("exchange.error error={}", result.error)
        _exit_with_error(result.error)


@app.command()
def tools(
    toolkit: str = typer.Option("canvas", "--toolkit", "-t", help="Tool set to list"),
) -> None:
    """Show the function declarations of a toolkit."""
    registry = _resolve_toolkit(toolkit)
    descriptors = registry.descriptors()
    if not descriptors:
        typer.echo("(no tools)")
        return
    for descriptor in descriptors:
        typer.echo(f"{descriptor.name}: {descriptor.description or '-'}")
