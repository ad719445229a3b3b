"""Data models for rbhooks."""

from .check_result import CheckResult, Finding
from .hook_config import HookConfig, HookSettings
from .project import ProjectDescriptor, StagedFile

__all__ = [
    "CheckResult",
    "Finding",
    "HookConfig",
    "HookSettings",
    "ProjectDescriptor",
    "StagedFile",
]
