"""Runtime logging helpers.

Records emitted by a ``LiveSession`` carry its id in ``extra["session"]``;
everything else is tagged ``-``.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Literal

from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {extra[session]} | {name}:{line} | {message}"
_configured: LogProfile | None = None


def _sink_for(profile: LogProfile) -> dict[str, Any]:
    if profile == "chat":
        # Inbound traffic and tool calls print above the prompt, so keep it terse.
        handler = RichHandler(console=get_console(), show_time=False, show_path=False, markup=False)
        return {"sink": handler, "format": "[{extra[session]}] {message}"}
    return {"sink": sys.stderr, "format": DEFAULT_FORMAT}


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Install the single process-wide sink for ``profile``; repeated calls are no-ops."""
    global _configured
    if profile == _configured:
        return

    logger.remove()
    logger.configure(extra={"session": "-"})
    logger.add(
        level=(level or os.getenv("TURNSTREAM_LOG_LEVEL", "INFO")).upper(),
        backtrace=False,
        diagnose=False,
        **_sink_for(profile),
    )
    _configured = profile
