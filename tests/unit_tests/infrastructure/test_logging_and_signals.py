"""Unit tests for console logging and signal cancellation."""

from __future__ import annotations

import io
import logging
import os
import signal

import pytest

from profile8_fixer.errors import RunCancelledError
from profile8_fixer.infrastructure.logging import (
    ColorFormatter,
    color_enabled,
    configure_logging,
)
from profile8_fixer.infrastructure.signals import cancel_on_signals


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.mark.parametrize(
    ("mode", "stream", "no_color", "expected"),
    [
        ("always", io.StringIO(), True, True),
        ("never", _Tty(), False, False),
        ("auto", _Tty(), False, True),
        ("auto", _Tty(), True, False),
        ("auto", io.StringIO(), False, False),
    ],
)
def test_color_enabled(mode: str, stream: io.StringIO, no_color: bool, expected: bool) -> None:
    """Honor explicit modes, terminals and NO_COLOR."""
    assert color_enabled(mode, stream, no_color) is expected


def _record(level: int, message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("profile8_fixer", level, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_plain_formatter_prefixes() -> None:
    """Tag records by level and success status without ANSI codes."""
    formatter = ColorFormatter(use_color=False)
    assert formatter.format(_record(logging.INFO, "Converting")) == ">> Converting"
    assert formatter.format(_record(logging.INFO, "done", status="ok")) == "OK done"
    assert formatter.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert formatter.format(_record(logging.ERROR, "bad")) == "ERROR bad"


def test_color_formatter_emits_ansi() -> None:
    """Wrap the tag in ANSI color codes."""
    formatted = ColorFormatter(use_color=True).format(_record(logging.WARNING, "careful"))
    assert "\x1b[" in formatted
    assert formatted.endswith(" careful")


def test_configure_logging_levels() -> None:
    """Switch between INFO and DEBUG and install exactly one handler."""
    stream = io.StringIO()
    logger = configure_logging(verbose=False, color="never", stream=stream)
    logger.debug("hidden")
    logger.info("shown")
    configure_logging(verbose=True, color="never", stream=stream)
    logger.debug("now visible")

    assert len(logger.handlers) == 1
    output = stream.getvalue()
    assert "hidden" not in output
    assert ">> shown" in output
    assert ".. now visible" in output


@pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="needs SIGTERM")
def test_signal_becomes_cancellation() -> None:
    """Raise RunCancelledError for SIGTERM inside the block and restore handlers."""
    before = signal.getsignal(signal.SIGTERM)
    with pytest.raises(RunCancelledError, match="SIGTERM") as excinfo:
        with cancel_on_signals():
            os.kill(os.getpid(), signal.SIGTERM)
    assert excinfo.value.exit_code == 130
    assert signal.getsignal(signal.SIGTERM) == before


def test_disabled_cancellation_leaves_handlers() -> None:
    """Keep existing handlers when cancellation is disabled."""
    before = signal.getsignal(signal.SIGINT)
    with cancel_on_signals(enabled=False):
        assert signal.getsignal(signal.SIGINT) == before
