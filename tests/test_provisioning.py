"""
Tests for toolchain provisioning — detection, install paths, extensions.

Every test mocks run_command and shutil.which; no real apt/pipx/ansible.
"""

from __future__ import annotations

from pathlib import Path

from devbootstrap.core.models.mutation import PathPrepend, ProfileLine
from devbootstrap.core.services.provisioning import (
    detect_tool,
    install_extensions,
    provision_toolchain,
)

from tests.helpers import make_executable


def _env() -> dict[str, str]:
    return {"PATH": "/usr/local/bin:/usr/bin:/bin"}


class TestDetectTool:
    def test_absent(self, settings, fake_runner):
        assert detect_tool(settings, _env()).state == "absent"

    def test_user_local(self, settings, home: Path, fake_runner):
        binary = make_executable(home / ".local" / "bin" / "ansible")
        found = detect_tool(settings, _env())
        assert found.state == "user_local"
        assert found.path == binary

    def test_user_local_not_executable_is_ignored(self, settings, home: Path, fake_runner):
        path = home / ".local" / "bin" / "ansible"
        path.parent.mkdir(parents=True)
        path.write_text("")
        assert detect_tool(settings, _env()).state == "absent"

    def test_system(self, settings, fake_runner, which_map):
        which_map["ansible"] = "/usr/bin/ansible"
        found = detect_tool(settings, _env())
        assert found.state == "system"
        assert found.path == Path("/usr/bin/ansible")


class TestProvisionToolchain:
    def test_skip_when_user_local(self, settings, console, home: Path, fake_runner):
        make_executable(home / ".local" / "bin" / "ansible")
        result = provision_toolchain(settings, _env(), console)
        assert result.ok
        assert result.metadata["action"] == "skipped"
        assert fake_runner.calls == []

    def test_install_when_absent(self, settings, console, home: Path, fake_runner):
        result = provision_toolchain(settings, _env(), console)
        assert result.ok
        assert result.metadata["action"] == "installed"
        assert fake_runner.commands() == [
            "/usr/bin/pipx install --force --include-deps ansible",
        ]

    def test_replace_system_install(self, settings, console, fake_runner, which_map):
        which_map["ansible"] = "/usr/bin/ansible"
        result = provision_toolchain(settings, _env(), console)
        assert result.ok
        assert result.metadata["action"] == "replaced"
        assert result.metadata["previous"] == "/usr/bin/ansible"
        cmds = fake_runner.commands()
        assert cmds[0] == "apt remove -y ansible ansible-core"
        assert fake_runner.calls[0][1]["needs_sudo"] is True
        assert cmds[1].endswith("pipx install --force --include-deps ansible")

    def test_system_removal_failure_only_warns(self, settings, console, fake_runner,
                                               which_map, capsys):
        which_map["ansible"] = "/usr/bin/ansible"
        fake_runner.fail("apt remove")
        result = provision_toolchain(settings, _env(), console)
        assert result.ok
        assert "[WARN]" in capsys.readouterr().out

    def test_installs_pipx_first(self, settings, console, fake_runner, which_map):
        del which_map["pipx"]
        # pipx appears on PATH once apt installed it
        fake_runner.on("apt install -y pipx", lambda cmd: which_map.update(pipx="/usr/bin/pipx"))

        result = provision_toolchain(settings, _env(), console)
        assert result.ok
        assert fake_runner.commands()[:2] == ["apt update", "apt install -y pipx"]

    def test_pipx_install_failure_is_fatal(self, settings, console, fake_runner, which_map):
        del which_map["pipx"]
        fake_runner.fail("apt install")
        result = provision_toolchain(settings, _env(), console)
        assert result.failed
        assert "pipx" in result.message

    def test_apt_update_failure_is_fatal(self, settings, console, fake_runner, which_map):
        del which_map["pipx"]
        fake_runner.fail("apt update")
        result = provision_toolchain(settings, _env(), console)
        assert result.failed
        assert "update" in result.message

    def test_tool_install_failure_is_fatal(self, settings, console, fake_runner):
        fake_runner.fail("pipx install")
        result = provision_toolchain(settings, _env(), console)
        assert result.failed
        assert "Failed to install ansible" in result.message

    def test_mutations_returned_not_applied(self, settings, console, home: Path, fake_runner):
        env = _env()
        result = provision_toolchain(settings, env, console)
        assert env == _env()
        assert not (home / ".bashrc").exists()
        assert result.mutations == [
            PathPrepend(directory=str(home / ".local" / "bin")),
            ProfileLine(
                profile=str(home / ".bashrc"),
                line='export PATH="$HOME/.local/bin:$PATH"',
            ),
        ]


class TestInstallExtensions:
    def test_all_installed(self, settings, console, home: Path, fake_runner):
        make_executable(home / ".local" / "bin" / "ansible-galaxy")
        result = install_extensions(settings, _env(), console)
        assert result.ok
        assert result.metadata["installed"] == ["community.general"]
        assert fake_runner.commands() == [
            f"{home}/.local/bin/ansible-galaxy collection install --upgrade community.general",
        ]

    def test_failure_is_warning(self, home: Path, console, fake_runner, capsys):
        from devbootstrap.core.models.settings import BootstrapSettings

        settings = BootstrapSettings(extensions=["community.general", "ansible.posix"])
        fake_runner.fail("ansible.posix")
        result = install_extensions(settings, _env(), console)
        assert result.warned
        assert result.metadata == {"installed": ["community.general"], "failed": ["ansible.posix"]}
        assert "ansible.posix" in result.hints[0]
        assert "Failed to install collection ansible.posix" in capsys.readouterr().out

    def test_none_configured(self, home: Path, console, fake_runner):
        from devbootstrap.core.models.settings import BootstrapSettings

        result = install_extensions(BootstrapSettings(extensions=[]), _env(), console)
        assert result.ok
        assert fake_runner.calls == []
