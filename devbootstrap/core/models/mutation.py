"""
Configuration mutations — PATH and shell-profile changes as values.

Provisioning describes the environment changes it needs instead of
writing them itself; ``shell_profile.apply_mutations`` applies them.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class PathPrepend(BaseModel):
    """Put ``directory`` at the front of PATH for child processes."""

    kind: Literal["path_prepend"] = "path_prepend"
    directory: str

    def describe(self) -> str:
        return f"PATH += {self.directory} (front)"


class ProfileLine(BaseModel):
    """Ensure ``line`` is present in the shell profile at ``profile``."""

    kind: Literal["profile_line"] = "profile_line"
    profile: str
    line: str

    def describe(self) -> str:
        return f"{self.profile}: + {self.line}"


ConfigMutation = Annotated[PathPrepend | ProfileLine, Field(discriminator="kind")]
