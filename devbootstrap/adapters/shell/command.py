"""
Shell command adapter — the single place external commands run.

Every stage goes through :func:`run_command` for package-manager calls,
``git``, ``pipx``, ``ansible-galaxy`` and the delegated entry point, so
sudo prefixing, secret redaction and error capture live here.

Failures are never raised: the caller gets a result dict and branches
on ``result["ok"]``.

Security invariants:
- Strings passed in ``redact`` never appear in log lines or in the
  returned ``stdout`` / ``stderr`` / ``error`` / ``command`` fields.
- sudo is never fed a password; it prompts on the terminal itself.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 2000


def _mask(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def run_command(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    interactive: bool = False,
    timeout: int | None = None,
    env: Mapping[str, str] | None = None,
    cwd: str | os.PathLike[str] | None = None,
    redact: Iterable[str] = (),
) -> dict[str, Any]:
    """Run an external command and report the outcome.

    Args:
        cmd: Argument list; never passed through a shell.
        needs_sudo: Prefix with ``sudo`` unless already root.
        interactive: Inherit the terminal (stdin/stdout/stderr) instead of
            capturing output. Used for apt, sudo prompts and the playbook.
        timeout: Seconds before giving up (None = wait forever).
        env: Full environment for the child. Defaults to ``os.environ``.
        cwd: Working directory for the child.
        redact: Secret strings to mask in logs and returned text.

    Returns:
        ``{"ok": True, "returncode": 0, "stdout": "...", "stderr": "...",
        "elapsed_ms": N, "command": "..."}`` on success, or the same keys
        with ``ok=False`` and an ``error`` message on failure.
    """
    secrets = [s for s in redact if s]

    if needs_sudo and os.geteuid() != 0:
        cmd = ["sudo", *cmd]

    display = _mask(shlex.join(cmd), secrets)
    logger.debug("Executing: %s (cwd=%s)", display, cwd or ".")

    start = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            capture_output=not interactive,
            text=True,
            timeout=timeout,
            env=dict(env) if env is not None else None,
            cwd=cwd,
        )
    except FileNotFoundError:
        return {
            "ok": False,
            "returncode": 127,
            "command": display,
            "error": f"Command not found: {cmd[0]}",
        }
    except subprocess.TimeoutExpired:
        return {
            "ok": False,
            "returncode": None,
            "command": display,
            "error": f"Command timed out ({timeout}s): {display}",
        }
    except OSError as e:
        logger.exception("Subprocess error: %s", display)
        return {
            "ok": False,
            "returncode": None,
            "command": display,
            "error": _mask(str(e), secrets),
        }

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = _mask((proc.stdout or "")[-_OUTPUT_TAIL:], secrets)
    stderr = _mask((proc.stderr or "")[-_OUTPUT_TAIL:], secrets)

    result: dict[str, Any] = {
        "ok": proc.returncode == 0,
        "returncode": proc.returncode,
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
        "command": display,
    }
    if proc.returncode != 0:
        result["error"] = f"Command failed (exit {proc.returncode}): {display}"
        logger.debug("%s — stderr: %s", result["error"], stderr.strip())
    return result
