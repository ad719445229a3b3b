"""Enumerations shared across rbhooks.

All enums inherit from str and Enum so their values serialize directly into
JSON reports and compare equal to the raw strings found in config files.
"""

from enum import Enum
from typing import List, Optional


class HookName(str, Enum):
    """Names of the configurable checks, as spelled in hooks-config files."""
    GITIGNORE = "gitignore"
    LOWERCASE = "lowercase"
    BUILD = "build"
    GIT_REMINDER = "gitReminder"

    @classmethod
    def from_string(cls, value: str) -> "HookName":
        """Parse a hook name.

        Raises:
            ValueError: If value is not a known hook name
        """
        try:
            return cls(value)
        except ValueError:
            valid_values = [name.value for name in cls]
            raise ValueError(f"Invalid hook name '{value}'. Valid values: {valid_values}")

    @classmethod
    def get_all_names(cls) -> List[str]:
        return [name.value for name in cls]

    def default_enforce(self) -> bool:
        """Build and gitignore block by default; the others only advise."""
        return self in (HookName.BUILD, HookName.GITIGNORE)


class PipelineState(str, Enum):
    """States of the pre-commit pipeline.

    The pipeline walks GITIGNORE → LOWERCASE → BUILD → GIT_REMINDER → DONE and
    jumps to FAILED as soon as an enforcing check reports a violation.
    """
    GITIGNORE = "GITIGNORE"
    LOWERCASE = "LOWERCASE"
    BUILD = "BUILD"
    GIT_REMINDER = "GIT_REMINDER"
    DONE = "DONE"
    FAILED = "FAILED"

    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)

    def hook_name(self) -> Optional[HookName]:
        """The check executed in this state, or None for terminal states."""
        return _STATE_TO_HOOK.get(self)

    def next_state(self) -> "PipelineState":
        """State reached when the current check lets the pipeline continue."""
        if self.is_terminal():
            return self
        return PIPELINE_ORDER[PIPELINE_ORDER.index(self) + 1]


PIPELINE_ORDER = [
    PipelineState.GITIGNORE,
    PipelineState.LOWERCASE,
    PipelineState.BUILD,
    PipelineState.GIT_REMINDER,
    PipelineState.DONE,
]

_STATE_TO_HOOK = {
    PipelineState.GITIGNORE: HookName.GITIGNORE,
    PipelineState.LOWERCASE: HookName.LOWERCASE,
    PipelineState.BUILD: HookName.BUILD,
    PipelineState.GIT_REMINDER: HookName.GIT_REMINDER,
}


class CheckStatus(str, Enum):
    """Outcome of a single check run."""
    PASSED = "passed"      # nothing found
    WARNED = "warned"      # findings reported as advisory
    FAILED = "failed"      # enforcing check found a violation
    SKIPPED = "skipped"    # disabled or nothing to do
    ERROR = "error"        # unexpected error, downgraded to a printed error

    def blocks_pipeline(self) -> bool:
        return self is CheckStatus.FAILED


class FileStatus(str, Enum):
    """Diff status of a staged file (git diff --name-status letters)."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"

    @classmethod
    def from_letter(cls, letter: str) -> "FileStatus":
        """Map a status token such as ``R100`` to its enum member."""
        if not letter:
            return cls.UNKNOWN
        try:
            return cls(letter[0].upper())
        except ValueError:
            return cls.UNKNOWN


class HookType(str, Enum):
    """Git hooks rbhooks can be installed as."""
    PRE_COMMIT = "pre-commit"
    PRE_PUSH = "pre-push"

    @classmethod
    def from_string(cls, value: str) -> "HookType":
        try:
            return cls(value)
        except ValueError:
            valid_values = [hook.value for hook in cls]
            raise ValueError(f"Invalid hook type '{value}'. Valid values: {valid_values}")


class InstallTarget(str, Enum):
    """Where hook scripts are written."""
    AUTO = "auto"
    HUSKY = "husky"
    GIT = "git"


class PackageManager(str, Enum):
    """Supported JavaScript package managers and their lock files."""
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"

    @property
    def lock_file(self) -> str:
        return {
            PackageManager.NPM: "package-lock.json",
            PackageManager.YARN: "yarn.lock",
            PackageManager.PNPM: "pnpm-lock.yaml",
        }[self]

    def run_command(self, script: str) -> List[str]:
        """Argument vector that runs a manifest script."""
        return [self.value, "run", script]


class OutputFormat(str, Enum):
    """Report formats for command output."""
    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_string(cls, value: str) -> "OutputFormat":
        try:
            return cls(value.lower())
        except ValueError:
            valid_values = [fmt.value for fmt in cls]
            raise ValueError(f"Invalid output format '{value}'. Valid values: {valid_values}")
