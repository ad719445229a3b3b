"""Build runner.

Builds the project before a commit so broken code never lands. Two layouts
are supported:

* Single project: the manifest next to the hook has a build script, or UI
  projects with build scripts are found further down the tree.
* Workspace: the root manifest declares ``workspaces``, or a
  ``pnpm-workspace.yaml`` / ``lerna.json`` marker exists. Only members with a
  build script that are touched by the staged files are built. Touching a
  shared path (``shared``/``common`` by default) marks every member.

Builds run one after another in discovery order. A build script that calls
back into rbhooks is refused instead of run.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml

from .. import output_utils
from ..exceptions import ParseError
from ..models.check_result import CheckResult
from ..models.hook_config import HookSettings
from ..models.project import ProjectDescriptor, StagedFile
from ..services.package_manager import PackageManagerRunner, detect_package_manager
from ..services.recursion_guard import script_invokes_pipeline
from ..types.enums import HookName, PackageManager
from ..utils.file_operations import FileOperationError, read_json_file, read_text_file
from ..utils.manifest import MANIFEST_NAME
from ..utils.values import safe_get_bool, safe_get_number, safe_get_str_list
from ..utils.walker import walk_dirs_containing
from .base import BaseCheck, CheckContext, check

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT = "build"
DEFAULT_FRAMEWORKS = ("react",)
DEFAULT_SHARED_PATHS = ("shared", "common")
DISCOVERY_EXCLUDES = frozenset({"node_modules", ".git", ".husky", ".next", "build", "dist", "coverage"})

PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"
LERNA_FILE = "lerna.json"
LERNA_DEFAULT_PACKAGES = ["packages/*"]

BUCKET_FAILED = "failed"


def load_project(directory: Path, repo_root: Path) -> Optional[ProjectDescriptor]:
    """ProjectDescriptor for ``directory``, or None when its manifest is missing or broken."""
    manifest_path = directory / MANIFEST_NAME
    try:
        manifest = read_json_file(manifest_path)
    except (FileOperationError, ParseError) as e:
        logger.debug("Skipping %s: %s", manifest_path, e.message)
        return None

    try:
        relative = directory.resolve().relative_to(repo_root.resolve()).as_posix()
    except ValueError:
        relative = directory.as_posix()
    scripts = manifest.get("scripts")
    name = manifest.get("name")
    return ProjectDescriptor(
        directory=directory,
        relative_dir=relative or ".",
        name=name if isinstance(name, str) and name else directory.name,
        scripts=dict(scripts) if isinstance(scripts, dict) else {},
        manifest=manifest,
    )


def workspace_patterns(root: Path, manifest: Dict[str, Any]) -> Optional[List[str]]:
    """Member glob patterns when ``root`` is a workspace, else None.

    Checked in order: the manifest's ``workspaces`` field (list, or object
    with ``packages``), ``pnpm-workspace.yaml`` and ``lerna.json``.
    """
    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if isinstance(workspaces, list):
        return [str(pattern) for pattern in workspaces if isinstance(pattern, str)]

    pnpm_file = root / PNPM_WORKSPACE_FILE
    if pnpm_file.is_file():
        try:
            data = yaml.safe_load(read_text_file(pnpm_file)) or {}
        except (yaml.YAMLError, FileOperationError) as e:
            logger.info("Ignoring unreadable %s: %s", pnpm_file, e)
            data = {}
        packages = data.get("packages") if isinstance(data, dict) else None
        return [str(p) for p in packages if isinstance(p, str)] if isinstance(packages, list) else []

    lerna_file = root / LERNA_FILE
    if lerna_file.is_file():
        try:
            data = read_json_file(lerna_file)
        except (FileOperationError, ParseError) as e:
            logger.info("Ignoring unreadable %s: %s", lerna_file, e.message)
            data = {}
        packages = data.get("packages")
        if isinstance(packages, list):
            return [str(p) for p in packages if isinstance(p, str)]
        return list(LERNA_DEFAULT_PACKAGES)

    return None


def expand_workspace_members(root: Path, patterns: Sequence[str], repo_root: Path) -> List[ProjectDescriptor]:
    """Directories matched by the member globs that hold a manifest.

    Patterns starting with ``!`` exclude matches. Results are sorted by path
    and never include anything inside ``node_modules``.
    """
    included: Dict[Path, None] = {}
    excluded = set()
    for pattern in patterns:
        negate = pattern.startswith("!")
        pattern = pattern[1:] if negate else pattern
        pattern = pattern.strip().rstrip("/")
        if pattern.startswith("./"):
            pattern = pattern[2:]
        if not pattern:
            continue
        for match in root.glob(pattern):
            if not match.is_dir() or "node_modules" in match.relative_to(root).parts:
                continue
            if not (match / MANIFEST_NAME).is_file():
                continue
            if negate:
                excluded.add(match)
            else:
                included[match] = None

    members = []
    for directory in sorted(included, key=lambda path: path.as_posix()):
        if directory in excluded or directory == root:
            continue
        project = load_project(directory, repo_root)
        if project is not None:
            members.append(project)
    return members


def discover_projects(root: Path, repo_root: Path, frameworks: Iterable[str],
                      script: str = DEFAULT_SCRIPT) -> List[ProjectDescriptor]:
    """UI projects below ``root`` with a build script, in walk order."""
    frameworks = list(frameworks)
    projects = []
    for directory in walk_dirs_containing(root, MANIFEST_NAME, DISCOVERY_EXCLUDES):
        project = load_project(directory, repo_root)
        if project is None or not project.has_script(script):
            continue
        if frameworks and not project.uses_any(frameworks):
            continue
        projects.append(project)
    return projects


def touches_shared_path(staged: StagedFile, shared_paths: Iterable[str]) -> bool:
    """A bare name matches any directory segment; a path with ``/`` matches by prefix."""
    directories = staged.parts[:-1]
    for shared in shared_paths:
        shared = shared.strip().strip("/")
        if not shared:
            continue
        if "/" in shared:
            if staged.is_under(shared):
                return True
        elif shared in directories:
            return True
    return False


def affected_projects(projects: Sequence[ProjectDescriptor], staged: Sequence[StagedFile],
                      shared_paths: Iterable[str]) -> List[ProjectDescriptor]:
    """Projects containing a staged path; all of them when a shared path is touched."""
    shared_paths = list(shared_paths)
    paths = []
    for staged_file in staged:
        paths.append(staged_file)
        if staged_file.old_path:
            paths.append(StagedFile(path=staged_file.old_path, status=staged_file.status))

    if any(touches_shared_path(staged_file, shared_paths) for staged_file in paths):
        return list(projects)
    return [project for project in projects
            if any(staged_file.is_under(project.relative_dir) for staged_file in paths)]


@check(HookName.BUILD, title="Build runner")
class BuildRunner(BaseCheck):
    """Runs the build script of the affected projects.

    Args:
        quiet: Suppress terminal output
        only_affected: Override the ``onlyAffected`` setting (``--all`` passes False)
    """

    def __init__(self, quiet: bool = False, only_affected: Optional[bool] = None):
        super().__init__(quiet)
        self.only_affected = only_affected

    def audit(self, context: CheckContext, settings: HookSettings) -> CheckResult:
        result = CheckResult(check=self.hook_name, enforce=settings.enforce)
        options = dict(settings.settings)
        script = options.get("script") if isinstance(options.get("script"), str) else DEFAULT_SCRIPT
        timeout = safe_get_number(options, "timeout")

        projects = self.select_projects(context, options, script)
        if not projects:
            self._info("No projects need building.")
            return result.conclude("No projects need building.")

        runner = PackageManagerRunner(self._package_manager(context, options), quiet=self.quiet)
        runner.ensure_available()
        names = ", ".join(project.display_name for project in projects)
        self._print(f"{output_utils.GLYPH_FOLDER} {len(projects)} project(s) to build: {names}")

        built = 0
        for project in projects:
            command = project.scripts.get(script, "")
            if script_invokes_pipeline(command):
                note = (f"Skipping {project.display_name}: its '{script}' script calls the commit hook "
                        f"again ({command})")
                logger.debug(note)
                self._warn(note)
                result.notes.append(note)
                continue

            self._print(f"\n{output_utils.GLYPH_PACKAGE} Building {project.display_name}...")
            outcome = runner.run_script(project.directory, script, timeout=timeout)
            if outcome.success:
                built += 1
                self._success(f"{project.display_name} built successfully")
                continue

            reason = "timed out" if outcome.timed_out else f"exited with code {outcome.returncode}"
            result.add_finding(BUCKET_FAILED, f"Build failed for {project.display_name} ({reason})",
                               path=project.relative_dir, detail=project.display_name)
            if settings.enforce:
                break

        if result.findings:
            return result.conclude(f"Build failed for {result.findings[0].detail}")
        return result.conclude(f"Built {built} project(s) successfully")

    def select_projects(self, context: CheckContext, options: Dict[str, Any],
                        script: str) -> List[ProjectDescriptor]:
        """Projects this run should build, in build order."""
        root = context.project_dir
        root_project = load_project(root, context.repo_root)
        manifest = root_project.manifest if root_project else {}

        patterns = workspace_patterns(root, manifest)
        if patterns is None:
            if root_project is not None and root_project.has_script(script):
                return [root_project]
            frameworks = safe_get_str_list(options, "frameworks", list(DEFAULT_FRAMEWORKS))
            return discover_projects(root, context.repo_root, frameworks, script)

        members = [member for member in expand_workspace_members(root, patterns, context.repo_root)
                   if member.has_script(script)]
        logger.debug("Workspace members with '%s': %s", script, [m.display_name for m in members])

        only_affected = self.only_affected
        if only_affected is None:
            only_affected = safe_get_bool(options, "onlyAffected", True)
        if not only_affected:
            return members
        shared_paths = safe_get_str_list(options, "sharedPaths", list(DEFAULT_SHARED_PATHS))
        return affected_projects(members, context.staged_files, shared_paths)

    @staticmethod
    def _package_manager(context: CheckContext, options: Dict[str, Any]) -> PackageManager:
        configured = options.get("packageManager")
        if isinstance(configured, str):
            try:
                return PackageManager(configured.lower())
            except ValueError:
                logger.info("Unknown packageManager '%s', detecting from lock files", configured)
        return detect_package_manager(context.project_dir, stop_at=context.repo_root)

    def report(self, result: CheckResult) -> None:
        failures = result.bucket(BUCKET_FAILED)
        if not failures:
            if result.notes and not result.message.startswith("No projects"):
                self._warn(f"{len(result.notes)} project(s) were not built")
            elif not result.message.startswith("No projects"):
                self._success(result.message)
            return

        if result.blocks:
            failed = failures[0]
            self._error(failed.message)
            if not self.quiet:
                output_utils.print_blocking(
                    f"Commit blocked: the build of {failed.detail} failed.",
                    "Fix the build errors above, then commit again.",
                )
            return

        for failure in failures:
            self._warn(failure.message)
        self._warn("Build failures are not blocking this commit (build.enforce is false).")
