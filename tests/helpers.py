"""
Test doubles shared across the suite.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any


def make_executable(path: Path, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(0o755)
    return path


class FakeRunner:
    """Stand-in for ``run_command`` that records calls.

    ``fail(pattern, rc)`` makes any command whose joined argv contains
    ``pattern`` fail; ``on(pattern, callback)`` runs ``callback(cmd)``
    after a matching command succeeds. ``git clone`` creates the target
    directory and ``pipx install`` creates the user-local binaries, like
    the real tools.
    """

    def __init__(self, home: Path) -> None:
        self.home = home
        self.calls: list[tuple[list[str], dict[str, Any]]] = []
        self.failures: list[tuple[str, int]] = []
        self.hooks: list[tuple[str, Callable[[list[str]], None]]] = []

    def fail(self, pattern: str, rc: int = 1) -> None:
        self.failures.append((pattern, rc))

    def on(self, pattern: str, callback: Callable[[list[str]], None]) -> None:
        self.hooks.append((pattern, callback))

    def commands(self) -> list[str]:
        return [" ".join(cmd) for cmd, _ in self.calls]

    def __call__(self, cmd: list[str], **kwargs: Any) -> dict[str, Any]:
        cmd = list(cmd)
        self.calls.append((cmd, kwargs))
        joined = " ".join(cmd)

        for pattern, rc in self.failures:
            if pattern in joined:
                return {
                    "ok": False,
                    "returncode": rc,
                    "stdout": "",
                    "stderr": "fatal: simulated failure",
                    "command": joined,
                    "error": f"Command failed (exit {rc}): {joined}",
                }

        if cmd[:2] == ["git", "clone"]:
            (Path(cmd[3]) / ".git").mkdir(parents=True)
        elif cmd[0].endswith("pipx") and "install" in cmd:
            bin_dir = self.home / ".local" / "bin"
            make_executable(bin_dir / "ansible")
            make_executable(bin_dir / "ansible-galaxy")

        for pattern, callback in self.hooks:
            if pattern in joined:
                callback(cmd)

        return {
            "ok": True,
            "returncode": 0,
            "stdout": "",
            "stderr": "",
            "elapsed_ms": 1,
            "command": joined,
        }
