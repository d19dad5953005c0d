import sys

import pytest
from loguru import logger

from turnstream import logging_utils
from turnstream.logging_utils import configure_logging
from turnstream.session import LiveSession
from turnstream.transports import MemoryTransport


@pytest.fixture
def restore_logger(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(logging_utils, "_configured", None)
    yield
    logger.remove()
    logger.configure(extra={})
    logger.add(sys.stderr)


@pytest.mark.usefixtures("restore_logger")
def test_default_profile_tags_records_with_session(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(profile="default", level="debug")

    session = LiveSession(MemoryTransport())
    session.close()
    logger.info("outside.session")

    lines = capsys.readouterr().err.splitlines()
    assert any(f"| {session.session_id} |" in line and "session.state" in line for line in lines)
    assert any("| - |" in line and line.endswith("outside.session") for line in lines)


@pytest.mark.usefixtures("restore_logger")
def test_configure_logging_is_idempotent_per_profile() -> None:
    seen: list[str] = []

    configure_logging(profile="default")
    logger.add(lambda message: seen.append(message.record["message"]), level="INFO")
    configure_logging(profile="default")
    logger.info("kept")
    configure_logging(profile="chat")
    logger.info("dropped")

    assert seen == ["kept"]
