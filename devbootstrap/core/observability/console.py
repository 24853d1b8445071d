"""
Console reporter — severity-tagged user-facing output.

Every message the user needs to see is printed with an ``[INFO]``,
``[WARN]`` or ``[ERROR]`` prefix (green / yellow / red). Errors go to
stderr. Each line is mirrored to the ``devbootstrap.console`` transcript
logger so a ``DEVBOOT_LOG_FILE`` holds the full run, including the
``[INFO]`` lines ``--quiet`` keeps off the terminal.
"""

from __future__ import annotations

import logging

import click

from devbootstrap.core.observability.logging_config import TRANSCRIPT_LOGGER

transcript = logging.getLogger(TRANSCRIPT_LOGGER)

_TAGS: dict[str, tuple[str, str]] = {
    "info": ("[INFO]", "green"),
    "warn": ("[WARN]", "yellow"),
    "error": ("[ERROR]", "red"),
}


class Console:
    """Prints tagged status lines for the bootstrap run.

    With ``quiet`` only warnings and errors reach the terminal.
    """

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def info(self, message: str) -> None:
        self._emit("info", message, show=not self.quiet)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def error(self, message: str) -> None:
        self._emit("error", message, err=True)

    def echo(self, message: str = "") -> None:
        """Untagged continuation line (guidance text, blank lines)."""
        transcript.info("%s", message)
        if not self.quiet:
            click.echo(message)

    def _emit(self, level: str, message: str, err: bool = False, show: bool = True) -> None:
        tag, color = _TAGS[level]
        transcript.info("%s %s", tag, message)
        if show:
            click.secho(tag, fg=color, nl=False, err=err)
            click.echo(f" {message}", err=err)
