"""Type definitions for rbhooks."""

from .enums import (
    PIPELINE_ORDER,
    CheckStatus,
    FileStatus,
    HookName,
    HookType,
    InstallTarget,
    OutputFormat,
    PackageManager,
    PipelineState,
)

__all__ = [
    "PIPELINE_ORDER",
    "CheckStatus",
    "FileStatus",
    "HookName",
    "HookType",
    "InstallTarget",
    "OutputFormat",
    "PackageManager",
    "PipelineState",
]
