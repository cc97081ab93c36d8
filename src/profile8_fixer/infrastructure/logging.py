"""Console logging setup for the CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import typer

from profile8_fixer.types import ColorMode

PACKAGE_LOGGER = "profile8_fixer"

_PREFIXES = {
    logging.DEBUG: ("..", "bright_black"),
    logging.INFO: (">>", "blue"),
    logging.WARNING: ("WARN", "yellow"),
    logging.ERROR: ("ERROR", "red"),
    logging.CRITICAL: ("ERROR", "red"),
}
_OK = ("OK", "green")


def color_enabled(mode: ColorMode, stream: TextIO, no_color: bool = False) -> bool:
    """Decide whether ANSI colors should be emitted on ``stream``."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and not no_color


class ColorFormatter(logging.Formatter):
    """Prefix records with a short status tag, optionally colored.

    Records logged with ``extra={"status": "ok"}`` are tagged ``OK``.
    """

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if getattr(record, "status", None) == "ok":
            tag, color = _OK
        else:
            tag, color = _PREFIXES.get(record.levelno, _PREFIXES[logging.INFO])
        if not self.use_color:
            return f"{tag} {message}"
        if record.levelno == logging.DEBUG:
            return typer.style(f"{tag} {message}", dim=True)
        return f"{typer.style(tag, fg=color)} {message}"


def configure_logging(
    verbose: bool = False,
    color: ColorMode = "auto",
    *,
    no_color: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install a single console handler on the package logger.

    Parameters
    ----------
    verbose : bool, default=False
        Log at DEBUG, including converter output.
    color : {"auto", "always", "never"}, default="auto"
        Color mode; ``auto`` colors only terminals without ``NO_COLOR``.
    no_color : bool, default=False
        ``NO_COLOR`` environment flag.
    stream : TextIO | None, default=None
        Output stream, ``sys.stderr`` when omitted.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    target = stream or sys.stderr
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(target)
    handler.setFormatter(ColorFormatter(color_enabled(color, target, no_color)))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
