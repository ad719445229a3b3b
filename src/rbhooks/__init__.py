"""React build hooks.

Git hooks for JavaScript/React repositories, run through a small pipeline:

    GITIGNORE -> LOWERCASE -> BUILD -> GIT_REMINDER -> DONE

- gitignore: appends missing sensitive-path patterns to .gitignore and stages it
- lowercase: flags staged files and relative imports with uppercase letters
- build: builds the project, or the workspace packages touched by the commit
- gitReminder: warns about uncommitted work, stale commits and unpulled changes

Each check is enabled and enforcing (blocking) or advisory according to an
optional hooks-config.json / hooks-config.yaml next to package.json.

Basic Usage:
    from rbhooks import run_pipeline

    result = run_pipeline()
    raise SystemExit(result.exit_code)
"""

__version__ = "1.0.0"

from .exceptions import (
    CheckViolation,
    ConfigError,
    HookEnvironmentError,
    RBHooksError,
    ToolNotFoundError,
)
from .models import CheckResult, HookConfig, HookSettings, ProjectDescriptor, StagedFile
from .pipeline import HookPipeline, PipelineResult, build_context, run_pipeline, run_single_check, transition
from .settings import load_config
from .types import CheckStatus, HookName, PipelineState

__all__ = [
    "__version__",
    # Pipeline
    "HookPipeline",
    "PipelineResult",
    "build_context",
    "run_pipeline",
    "run_single_check",
    "transition",
    # Models
    "CheckResult",
    "HookConfig",
    "HookSettings",
    "ProjectDescriptor",
    "StagedFile",
    "load_config",
    # Enums
    "CheckStatus",
    "HookName",
    "PipelineState",
    # Exceptions
    "CheckViolation",
    "ConfigError",
    "HookEnvironmentError",
    "RBHooksError",
    "ToolNotFoundError",
]
