"""
Bootstrap settings — every fixed name and path the run touches.

Defaults reproduce the canonical setup (``~/repo/joel-snips`` cloned
from GitHub, ``~/.vault_pass``, ansible via pipx in ``~/.local/bin``).
A ``bootstrap.yml`` can override any of them; see
:mod:`devbootstrap.core.config.loader`.

Paths are kept as strings with ``~`` so they resolve against the HOME of
the process that runs the bootstrap, not the one that built the model.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class BootstrapSettings(BaseModel):
    """Resolved configuration for one bootstrap run."""

    package_manager: str = "apt"

    # ── Source repository ───────────────────────────────────────
    repo_host: str = "github.com"
    repo_owner: str = "joelagnel"
    repo_name: str = "joel-snips"
    parent_dir: str = "~/repo"
    clone_timeout: int = 600

    # ── Secrets ─────────────────────────────────────────────────
    vault_pass_file: str = "~/.vault_pass"

    # ── Toolchain ───────────────────────────────────────────────
    tool_package: str = "ansible"
    tool_binary: str = "ansible"
    system_packages: list[str] = Field(default_factory=lambda: ["ansible", "ansible-core"])
    user_bin_dir: str = "~/.local/bin"
    profile_file: str = "~/.bashrc"
    extensions: list[str] = Field(default_factory=lambda: ["community.general"])

    # ── Delegated execution ─────────────────────────────────────
    entry_point: str = "ansible/bootstrap.sh"
    legacy_entry_point: str = "rcfiles/setuprc"

    @field_validator("repo_host", "repo_owner", "repo_name")
    @classmethod
    def _no_slashes(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value or "@" in value:
            raise ValueError(f"invalid repository component: {value!r}")
        return value

    @field_validator("entry_point", "legacy_entry_point")
    @classmethod
    def _relative(cls, value: str) -> str:
        if Path(value).is_absolute() or ".." in Path(value).parts:
            raise ValueError(f"entry point must be relative to the clone: {value!r}")
        return value

    # ── Resolved paths ──────────────────────────────────────────

    @property
    def parent_path(self) -> Path:
        return Path(self.parent_dir).expanduser()

    @property
    def clone_path(self) -> Path:
        return self.parent_path / self.repo_name

    @property
    def vault_pass_path(self) -> Path:
        return Path(self.vault_pass_file).expanduser()

    @property
    def user_bin_path(self) -> Path:
        return Path(self.user_bin_dir).expanduser()

    @property
    def profile_path(self) -> Path:
        return Path(self.profile_file).expanduser()

    @property
    def entry_point_path(self) -> Path:
        return self.clone_path / self.entry_point

    @property
    def legacy_entry_point_path(self) -> Path:
        return self.clone_path / self.legacy_entry_point

    # ── URLs ────────────────────────────────────────────────────

    @property
    def repo_slug(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def public_url(self) -> str:
        """Clone URL without credentials; what ``origin`` ends up as."""
        return f"https://{self.repo_host}/{self.repo_slug}.git"

    def authenticated_url(self, token: str) -> str:
        """Clone URL with the access token embedded. Never log this."""
        return f"https://{token}@{self.repo_host}/{self.repo_slug}.git"
