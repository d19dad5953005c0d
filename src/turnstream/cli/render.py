"""CLI renderer for turnstream."""

from __future__ import annotations

import threading

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self) -> None:
        self.console: Console = Console()
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()

    def info(self, message: str) -> None:
        self._print(escape(message))

    def error(self, message: str) -> None:
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, model: str, toolkit: str) -> None:
        self._print(f"[bold blue]turnstream[/bold blue] connected to [magenta]{escape(model)}[/magenta]")
        self._print(f"[dim]toolkit: {escape(toolkit)}. Type 'show' to see state, 'quit' to exit.[/dim]")

    def assistant_message(self, message: str) -> None:
        self._print(f"[bold yellow]Assistant:[/bold yellow] {escape(message)}")

    def tool_result(self, name: str, result: str) -> None:
        self._print(f"[dim]{escape(f'[{name}]')} {escape(result)}[/dim]")

    async def prompt(self, message: str = "> ") -> str:
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout():
            return await self._prompt_session.prompt_async(message)

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)
