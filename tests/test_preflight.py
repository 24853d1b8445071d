"""
Tests for preflight checks — package manager, root, sudo probe.
"""

from __future__ import annotations

import os

from devbootstrap.core.services.preflight import check_preflight


class TestPreflight:
    def test_all_good(self, settings, console, fake_runner, capsys):
        result = check_preflight(settings, console)
        assert result.ok
        assert result.metadata["passwordless_sudo"] is True
        assert "sudo -n true" in fake_runner.commands()
        assert "may be prompted" not in capsys.readouterr().out

    def test_missing_package_manager(self, settings, console, fake_runner, which_map):
        del which_map["apt"]
        result = check_preflight(settings, console)
        assert result.failed
        assert "requires apt package manager" in result.message
        assert fake_runner.calls == []

    def test_root_refused(self, settings, console, fake_runner, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 0)
        result = check_preflight(settings, console)
        assert result.failed
        assert "not as root" in result.message

    def test_sudo_needs_password_is_only_a_notice(self, settings, console, fake_runner, capsys):
        fake_runner.fail("sudo -n true")
        result = check_preflight(settings, console)
        assert result.ok
        assert result.metadata["passwordless_sudo"] is False
        out = capsys.readouterr().out
        assert "[INFO]" in out
        assert "may be prompted for your password" in out

    def test_sudo_missing(self, settings, console, fake_runner, which_map):
        del which_map["sudo"]
        result = check_preflight(settings, console)
        assert result.ok
        assert result.metadata["passwordless_sudo"] is False
        assert fake_runner.calls == []
