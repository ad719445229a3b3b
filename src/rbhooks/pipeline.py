"""The pre-commit hook pipeline.

A small state machine that runs the four checks in a fixed order:

    GITIGNORE -> LOWERCASE -> BUILD -> GIT_REMINDER -> DONE

A check that is disabled, advisory, or clean moves the pipeline to the next
state. An enforcing check with findings moves it to FAILED and nothing after
it runs. A missing prerequisite (HookEnvironmentError) also ends in FAILED,
with exit code 2 instead of 1.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .checks import get_check_class
from .checks.base import CheckContext
from .exceptions import HookEnvironmentError, ManifestNotFoundError, NotARepositoryError
from .models.check_result import CheckResult
from .services.git_client import GitClient
from .settings import load_config
from .types.enums import HookName, PipelineState
from .utils.file_operations import find_upwards
from .utils.manifest import MANIFEST_NAME

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VIOLATION = 1
EXIT_ENVIRONMENT = 2


def transition(state: PipelineState, result: CheckResult) -> PipelineState:
    """Next state after the check of ``state`` produced ``result``."""
    if state.is_terminal():
        return state
    if result.blocks:
        return PipelineState.FAILED
    return state.next_state()


@dataclass
class PipelineResult:
    """Final state of a pipeline (or single-check) run."""
    state: PipelineState
    results: List[CheckResult] = field(default_factory=list)
    environment_error: Optional[HookEnvironmentError] = None

    @property
    def success(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def exit_code(self) -> int:
        if self.environment_error is not None:
            return EXIT_ENVIRONMENT
        return EXIT_OK if self.success else EXIT_VIOLATION

    @property
    def failed_check(self) -> Optional[HookName]:
        for result in self.results:
            if result.blocks:
                return result.check
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "state": self.state.value,
            "exitCode": self.exit_code,
            "results": [result.to_dict() for result in self.results],
        }
        if self.environment_error is not None:
            data["error"] = self.environment_error.to_dict()
        return data


def build_context(cwd: Optional[Union[str, Path]] = None,
                  clock: Callable[[], float] = time.time,
                  require_repository: bool = True) -> CheckContext:
    """Run the environment checks and assemble the CheckContext.

    The project directory is the closest directory holding a package.json,
    searching from ``cwd`` up to the repository root. Configuration is read
    from that directory.

    Args:
        cwd: Directory the hook was started in
        clock: Time source handed to the checks
        require_repository: When False, a directory outside any git work tree
            is accepted and the repository-dependent checks skip themselves

    Raises:
        ToolNotFoundError: git is not installed
        NotARepositoryError: ``cwd`` is outside a work tree (``require_repository``)
        ManifestNotFoundError: no package.json between ``cwd`` and the repository root
    """
    cwd = Path(cwd or os.getcwd()).resolve()
    git = GitClient(cwd)
    git.ensure_available()

    if git.is_inside_work_tree():
        repo_root = git.repo_root()
    elif require_repository:
        raise NotARepositoryError(cwd)
    else:
        repo_root = cwd

    manifest = find_upwards(cwd, MANIFEST_NAME, stop_at=repo_root)
    if manifest is None:
        if require_repository:
            raise ManifestNotFoundError(cwd)
        project_dir = cwd
    else:
        project_dir = manifest.parent

    config = load_config(project_dir)
    logger.debug("repo_root=%s project_dir=%s config=%s", repo_root, project_dir,
                 config.source or "defaults")
    return CheckContext(
        repo_root=repo_root,
        project_dir=project_dir,
        config=config,
        git=GitClient(repo_root),
        clock=clock,
    )


class HookPipeline:
    """Runs the checks in pipeline order.

    Args:
        quiet: Suppress check output (JSON reports)
        check_options: Extra constructor arguments per check,
            e.g. ``{HookName.BUILD: {"only_affected": False}}``
    """

    def __init__(self, quiet: bool = False,
                 check_options: Optional[Dict[HookName, Dict[str, Any]]] = None):
        self.quiet = quiet
        self.check_options = check_options or {}

    def run_check(self, name: HookName, context: CheckContext) -> CheckResult:
        check_class = get_check_class(name)
        instance = check_class(quiet=self.quiet, **self.check_options.get(name, {}))
        return instance.run(context)

    def run(self, context: CheckContext, start: PipelineState = PipelineState.GITIGNORE) -> PipelineResult:
        state = start
        results: List[CheckResult] = []
        while not state.is_terminal():
            name = state.hook_name()
            logger.debug("Pipeline state %s", state.value)
            try:
                result = self.run_check(name, context)
            except HookEnvironmentError as e:
                logger.debug("Environment error in %s: %s", name.value, e.message)
                return PipelineResult(PipelineState.FAILED, results, environment_error=e)
            results.append(result)
            state = transition(state, result)
            logger.debug("%s -> %s (%s)", name.value, state.value, result.status.value)
        return PipelineResult(state, results)

    def run_single(self, name: HookName, context: CheckContext) -> PipelineResult:
        """Run one check in isolation; DONE unless it blocks."""
        try:
            result = self.run_check(name, context)
        except HookEnvironmentError as e:
            return PipelineResult(PipelineState.FAILED, [], environment_error=e)
        state = PipelineState.FAILED if result.blocks else PipelineState.DONE
        return PipelineResult(state, [result])


def run_pipeline(cwd: Optional[Union[str, Path]] = None, quiet: bool = False,
                 check_options: Optional[Dict[HookName, Dict[str, Any]]] = None) -> PipelineResult:
    """Preflight, then the full pipeline. Environment errors end in FAILED (exit 2)."""
    try:
        context = build_context(cwd)
    except HookEnvironmentError as e:
        return PipelineResult(PipelineState.FAILED, environment_error=e)
    return HookPipeline(quiet, check_options).run(context)


def run_single_check(name: HookName, cwd: Optional[Union[str, Path]] = None, quiet: bool = False,
                     **check_kwargs) -> PipelineResult:
    """Preflight, then one check.

    The git reminder is also wired to ``pre<script>`` manifest hooks, so it
    tolerates running outside a repository and reports itself skipped.
    """
    name = HookName(name)
    try:
        context = build_context(cwd, require_repository=name is not HookName.GIT_REMINDER)
    except HookEnvironmentError as e:
        return PipelineResult(PipelineState.FAILED, environment_error=e)
    options = {name: check_kwargs} if check_kwargs else None
    return HookPipeline(quiet, options).run_single(name, context)
