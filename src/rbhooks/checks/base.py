"""Base class, shared context and registry for the pipeline checks.

Each check is an isolated unit: ``run()`` never lets an exception other than
HookEnvironmentError escape. Anything unexpected is logged and turned into a
CheckResult with status ERROR so the rest of the pipeline still runs.

Subclasses implement ``audit()`` (find problems, maybe fix the ignore-file)
and ``report()`` (print the findings as warnings or as a blocking error).
"""

import abc
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type

from .. import output_utils
from ..exceptions import HookEnvironmentError, create_error_from_exception
from ..models.check_result import CheckResult
from ..models.hook_config import HookConfig, HookSettings
from ..models.project import StagedFile
from ..services.git_client import GitClient
from ..types.enums import CheckStatus, HookName

logger = logging.getLogger(__name__)


@dataclass
class CheckContext:
    """Everything a check needs about the current invocation.

    Attributes:
        repo_root: Top-level directory of the git work tree
        project_dir: Directory holding the project's package.json
        config: Immutable configuration for this run
        git: Git client bound to repo_root
        clock: Returns the current Unix time; replaced in tests
    """
    repo_root: Path
    project_dir: Path
    config: HookConfig
    git: GitClient
    clock: Callable[[], float] = time.time
    _staged: Optional[List[StagedFile]] = field(default=None, repr=False)

    @property
    def staged_files(self) -> List[StagedFile]:
        """Staged files, read from the index once per invocation."""
        if self._staged is None:
            self._staged = self.git.staged_files()
        return self._staged

    def settings_for(self, name: HookName) -> HookSettings:
        return self.config[name]


class BaseCheck(abc.ABC):
    """Common behavior for the four pipeline checks.

    Args:
        quiet: Suppress all terminal output (used for JSON reports)
    """

    hook_name: HookName
    title: str = ""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    # ----- output helpers -----

    def _progress(self, message: str) -> None:
        if not self.quiet:
            output_utils.progress(message)

    def _info(self, message: str) -> None:
        if not self.quiet:
            output_utils.info(message)

    def _success(self, message: str) -> None:
        if not self.quiet:
            output_utils.success(message)

    def _warn(self, message: str) -> None:
        if not self.quiet:
            output_utils.warn(message)

    def _error(self, message: str) -> None:
        if not self.quiet:
            output_utils.error(message)

    def _print(self, line: str = "", stderr: bool = False) -> None:
        if not self.quiet:
            print(line, file=sys.stderr if stderr else sys.stdout)

    # ----- lifecycle -----

    @abc.abstractmethod
    def audit(self, context: CheckContext, settings: HookSettings) -> CheckResult:
        """Inspect the repository and return findings."""

    @abc.abstractmethod
    def report(self, result: CheckResult) -> None:
        """Print the findings of ``result``."""

    def run(self, context: CheckContext) -> CheckResult:
        """Run the check if enabled, report it, and contain unexpected errors.

        Raises:
            HookEnvironmentError: Missing prerequisites are always fatal
        """
        settings = context.settings_for(self.hook_name)
        if not settings.enabled:
            logger.debug("%s check disabled", self.hook_name.value)
            return CheckResult.skipped(self.hook_name, f"{self.hook_name.value} check disabled",
                                       enforce=settings.enforce)

        try:
            result = self.audit(context, settings)
        except HookEnvironmentError:
            raise
        except Exception as e:
            logger.exception("%s check failed unexpectedly", self.hook_name.value)
            wrapped = create_error_from_exception(e)
            self._error(f"Error during {self.hook_name.value} check: {wrapped.message}")
            return CheckResult.errored(self.hook_name, wrapped.message, enforce=settings.enforce)

        if result.status is not CheckStatus.ERROR:
            try:
                self.report(result)
            except Exception:
                logger.exception("Could not report %s results", self.hook_name.value)
        return result


_REGISTERED_CHECKS: Dict[HookName, Type[BaseCheck]] = {}


def check(name: HookName, title: Optional[str] = None):
    """Class decorator registering a check under its hook name.

    Example:
        @check(HookName.GITIGNORE, title="Gitignore audit")
        class GitignoreAuditor(BaseCheck):
            ...
    """
    def decorator(cls: Type[BaseCheck]) -> Type[BaseCheck]:
        if not issubclass(cls, BaseCheck):
            raise TypeError(f"Check class {cls.__name__} must inherit from BaseCheck")
        cls.hook_name = name
        if title:
            cls.title = title
        _REGISTERED_CHECKS[name] = cls
        return cls
    return decorator


def get_check_class(name: HookName) -> Type[BaseCheck]:
    """Registered check class for ``name``.

    Raises:
        KeyError: If no check is registered under that name
    """
    return _REGISTERED_CHECKS[HookName(name)]


def get_registered_checks() -> Dict[HookName, Type[BaseCheck]]:
    return dict(_REGISTERED_CHECKS)
