"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug / --verbose  >  DEVBOOT_LOG_LEVEL env var  >  WARNING (default)

Two kinds of records flow through the root logger:

- diagnostics from the stage modules, shown on stderr at the chosen level;
- the user-facing transcript (``[INFO]`` / ``[WARN]`` / ``[ERROR]`` lines)
  mirrored by :mod:`devbootstrap.core.observability.console` on the
  ``devbootstrap.console`` logger. Those lines are already on the
  terminal, so the stderr handler drops them; the optional
  ``DEVBOOT_LOG_FILE`` always receives them, whatever its level, so the
  file holds a full record of the run.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

TRANSCRIPT_LOGGER = "devbootstrap.console"

LEVEL_ENV_VAR = "DEVBOOT_LOG_LEVEL"
FILE_ENV_VAR = "DEVBOOT_LOG_FILE"
FILE_LEVEL_ENV_VAR = "DEVBOOT_LOG_FILE_LEVEL"

_FMT_MINIMAL = "%(message)s"
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_TERMINAL = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# PyYAML logs at DEBUG while the config file is parsed
_NOISY_LOGGERS = ("yaml",)


def resolve_level(verbose: bool, debug: bool, env: Mapping[str, str] | None = None) -> str:
    """Pick the terminal log level from the CLI flags and environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    env = os.environ if env is None else env
    return env.get(LEVEL_ENV_VAR) or "WARNING"


def _is_diagnostic(record: logging.LogRecord) -> bool:
    return record.name != TRANSCRIPT_LOGGER


class _FileFilter(logging.Filter):
    """Pass the whole transcript, and diagnostics at or above ``level``."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == TRANSCRIPT_LOGGER or record.levelno >= self.level


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Terminal log level name (DEBUG, INFO, WARNING, ...).
        log_file: Optional path to a run log. Always receives the
            transcript, plus diagnostics at ``log_file_level``.
        log_file_level: Diagnostic level for the log file.
            Defaults to ``level``.
        quiet_third_party: Keep PyYAML at WARNING unless at DEBUG.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_TERMINAL
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_TERMINAL
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    terminal = logging.StreamHandler(sys.stderr)
    terminal.setLevel(numeric_level)
    terminal.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    terminal.addFilter(_is_diagnostic)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(terminal)

    effective_level = numeric_level
    transcript = logging.getLogger(TRANSCRIPT_LOGGER)
    transcript.setLevel(logging.NOTSET)

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(min(file_level, logging.INFO))
        fh.addFilter(_FileFilter(file_level))
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

        # Transcript lines are INFO; let them through even when the root is quieter
        transcript.setLevel(logging.INFO)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def setup_logging_from_env(verbose: bool = False, debug: bool = False) -> None:
    """``setup_logging`` with the CLI flags and ``DEVBOOT_*`` variables."""
    setup_logging(
        level=resolve_level(verbose, debug),
        log_file=os.environ.get(FILE_ENV_VAR),
        log_file_level=os.environ.get(FILE_LEVEL_ENV_VAR),
        quiet_third_party=not debug,
    )


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
