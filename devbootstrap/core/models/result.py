"""
Stage results — the contract between stages and the driver.

Each bootstrap stage returns a StageResult instead of raising. The
driver reads the status tag to decide whether the run continues:
``ok`` and ``warning`` continue, ``failed`` stops the run with exit 1.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from devbootstrap.core.models.mutation import ConfigMutation


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


StageName = Literal["preflight", "credentials", "provisioning", "materialization", "delegation"]


class StageResult(BaseModel):
    """Outcome of one bootstrap stage.

    ``hints`` are remediation lines printed under the message
    (e.g. which token permission is missing, how to re-run a playbook).
    ``mutations`` are configuration changes the stage wants applied;
    only provisioning produces them.
    """

    stage: StageName
    status: Literal["ok", "warning", "failed"] = "ok"
    message: str = ""
    hints: list[str] = Field(default_factory=list)

    finished_at: str = Field(default_factory=_now_iso)
    metadata: dict[str, Any] = Field(default_factory=dict)
    mutations: list[ConfigMutation] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def warned(self) -> bool:
        return self.status == "warning"

    @classmethod
    def success(cls, stage: StageName, message: str = "", **kwargs: Any) -> StageResult:
        """Create a success result."""
        return cls(stage=stage, status="ok", message=message, **kwargs)

    @classmethod
    def warning(cls, stage: StageName, message: str, **kwargs: Any) -> StageResult:
        """Create a recoverable-warning result."""
        return cls(stage=stage, status="warning", message=message, **kwargs)

    @classmethod
    def failure(cls, stage: StageName, message: str, **kwargs: Any) -> StageResult:
        """Create a fatal result."""
        return cls(stage=stage, status="failed", message=message, **kwargs)
