"""
Shared test fixtures and configuration.

No test touches the real package manager, git, sudo or ansible: every
stage's ``run_command`` and ``shutil.which`` are patched, and HOME points
into ``tmp_path``.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console

from tests.helpers import FakeRunner

_RUN_COMMAND_TARGETS = (
    "devbootstrap.core.services.preflight.run_command",
    "devbootstrap.core.services.provisioning.run_command",
    "devbootstrap.core.services.delegate.run_command",
    "devbootstrap.adapters.vcs.git.run_command",
)


@pytest.fixture(autouse=True)
def _non_root(monkeypatch):
    """Tests run as a regular user even inside root containers."""
    monkeypatch.setattr(os, "geteuid", lambda: 1000)


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Point HOME at a fresh temporary directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("DEVBOOT_CONFIG", raising=False)
    return home_dir


@pytest.fixture
def settings(home: Path) -> BootstrapSettings:
    return BootstrapSettings()


@pytest.fixture
def console() -> Console:
    return Console()


@pytest.fixture
def which_map() -> dict[str, str]:
    """Binaries ``shutil.which`` resolves; tests add or remove entries."""
    return {
        "apt": "/usr/bin/apt",
        "sudo": "/usr/bin/sudo",
        "pipx": "/usr/bin/pipx",
    }


@pytest.fixture
def fake_runner(home: Path, which_map: dict[str, str]):
    """Patch every stage's ``run_command`` and ``shutil.which``."""
    runner = FakeRunner(home)
    patchers = [patch(target, side_effect=runner) for target in _RUN_COMMAND_TARGETS]
    patchers.append(patch("shutil.which", side_effect=lambda name, *a, **kw: which_map.get(name)))
    for p in patchers:
        p.start()
    yield runner
    for p in reversed(patchers):
        p.stop()
