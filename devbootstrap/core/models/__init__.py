"""
Domain models — Pydantic types for the bootstrap run.

    from devbootstrap.core.models import BootstrapSettings, StageResult
"""

from devbootstrap.core.models.mutation import ConfigMutation, PathPrepend, ProfileLine
from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings

__all__ = [
    "BootstrapSettings",
    "ConfigMutation",
    "PathPrepend",
    "ProfileLine",
    "StageResult",
]
