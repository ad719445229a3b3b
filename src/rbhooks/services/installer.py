"""Installing the hooks into a JavaScript project.

The installer wires a project up in two places:

- package.json: ``check-gitignore``, ``check-lowercase`` and ``git-reminder``
  scripts pointing at the rbhooks console scripts, ``prepare: husky`` for
  husky projects, and optionally ``pre<cmd>`` reminders for the usual
  dev/build/test/start/lint scripts.
- a hook script (``pre-commit`` or ``pre-push``) in ``.husky/`` or in the git
  hooks directory that calls ``rb_precommit``.

Hook scripts written by rbhooks carry a marker line. Uninstall and fix only
touch files carrying that marker (or the legacy commands of the old node
installer); anything else is treated as a custom hook and left alone.

A ``build:dev`` script that calls back into the build runner is removed on
install: run from the hook, it re-triggered the hook in an endless loop.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import ManifestNotFoundError, NotARepositoryError
from ..models.hook_config import HookConfig
from ..settings import load_config
from ..types.enums import HookType, InstallTarget, PackageManager
from ..utils.file_operations import (
    create_backup,
    make_executable,
    read_text_file,
    safe_delete_file,
    write_text_file,
)
from ..utils.logging import audit
from ..utils.manifest import MANIFEST_NAME, ManifestHandler
from .git_client import GitClient
from .package_manager import detect_package_manager
from .recursion_guard import SCRIPT_INVOCATION_PATTERN

logger = logging.getLogger(__name__)

HOOK_MARKER = "# Installed by rbhooks (react-build-hooks)"
HOOK_COMMAND = "rb_precommit"

MANAGED_SCRIPTS = {
    "check-gitignore": "rb_checkgitignore",
    "check-lowercase": "rb_checklowercase",
    "git-reminder": "rb_gitreminder",
}
PREPARE_SCRIPT = "prepare"
HUSKY_PREPARE = "husky"
LEGACY_BUILD_SCRIPTS = ("build:dev",)
REMINDER_PRESCRIPT_TARGETS = ("dev", "build", "test", "start", "lint")
REMINDER_PRESCRIPT_PATTERN = re.compile(r"\brun\s+git-reminder\b")

HUSKY_DIR = ".husky"
DEPRECATED_HUSKY_LINES = (
    "#!/usr/bin/env sh",
    '. "$(dirname -- "$0")/_/husky.sh"',
    '. "$(dirname "$0")/_/husky.sh"',
)
LEGACY_HOOK_COMMANDS = ("npm run check-gitignore", "npm run build:dev")


def render_hook_script(relative_project_dir: str = ".") -> str:
    """Content of the hook script.

    Git runs hooks from the repository root, so a project living in a
    subdirectory needs a ``cd`` first.
    """
    lines = ["#!/bin/sh", HOOK_MARKER, ""]
    if relative_project_dir not in ("", "."):
        lines.append(f'cd "{relative_project_dir}" || exit 2')
    lines.append(HOOK_COMMAND)
    return "\n".join(lines) + "\n"


def is_rbhooks_hook(content: str) -> bool:
    """Hook written by rbhooks or by the old node installer."""
    if HOOK_MARKER in content:
        return True
    return any(command in content for command in LEGACY_HOOK_COMMANDS)


def needs_fix(content: str) -> bool:
    """Deprecated husky bootstrap lines or the legacy ``npm run build:dev`` call."""
    if HOOK_MARKER in content and HOOK_COMMAND in content:
        return False
    if any(line in content for line in DEPRECATED_HUSKY_LINES):
        return True
    return "npm run build:dev" in content


@dataclass
class InstallReport:
    """What ``install`` changed."""
    hook_type: HookType
    target: InstallTarget
    hook_path: Optional[Path] = None
    hook_backup: Optional[Path] = None
    scripts_added: List[str] = field(default_factory=list)
    scripts_removed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hook_type": self.hook_type.value,
            "target": self.target.value,
            "hook_path": str(self.hook_path) if self.hook_path else None,
            "hook_backup": str(self.hook_backup) if self.hook_backup else None,
            "scripts_added": list(self.scripts_added),
            "scripts_removed": list(self.scripts_removed),
        }


@dataclass
class UninstallReport:
    removed_hooks: List[Path] = field(default_factory=list)
    skipped_hooks: List[Path] = field(default_factory=list)
    scripts_removed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removed_hooks": [str(path) for path in self.removed_hooks],
            "skipped_hooks": [str(path) for path in self.skipped_hooks],
            "scripts_removed": list(self.scripts_removed),
        }


@dataclass
class FixReport:
    fixed_hooks: List[Path] = field(default_factory=list)
    compatible_hooks: List[Path] = field(default_factory=list)
    scripts_added: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixed_hooks": [str(path) for path in self.fixed_hooks],
            "compatible_hooks": [str(path) for path in self.compatible_hooks],
            "scripts_added": list(self.scripts_added),
        }


class HookInstaller:
    """Install, uninstall and repair rbhooks in one project.

    Args:
        project_dir: Directory holding the project's package.json
        git: Git client (defaults to one bound to project_dir)
    """

    def __init__(self, project_dir: Union[str, Path], git: Optional[GitClient] = None):
        self.project_dir = Path(project_dir).resolve()
        self.git = git or GitClient(self.project_dir)
        self.manifest = ManifestHandler(self.project_dir / MANIFEST_NAME)

    # ----- environment -----

    def check_environment(self) -> Path:
        """Return the repository root after checking git and package.json.

        Raises:
            ToolNotFoundError: git is not installed
            NotARepositoryError: project_dir is not inside a work tree
            ManifestNotFoundError: project_dir has no package.json
        """
        self.git.ensure_available()
        if not self.git.is_inside_work_tree():
            raise NotARepositoryError(self.project_dir)
        if not self.manifest.exists():
            raise ManifestNotFoundError(self.project_dir)
        return self.git.repo_root().resolve()

    def resolve_target(self, target: InstallTarget) -> InstallTarget:
        """``auto`` picks husky when ``.husky/`` exists or husky is a dependency."""
        if target is not InstallTarget.AUTO:
            return target
        if (self.project_dir / HUSKY_DIR).is_dir() or self.manifest.has_dependency("husky"):
            return InstallTarget.HUSKY
        return InstallTarget.GIT

    def hook_directory(self, target: InstallTarget) -> Path:
        if target is InstallTarget.HUSKY:
            return self.project_dir / HUSKY_DIR
        return self.git.git_path("hooks")

    def _candidate_hook_paths(self) -> List[Path]:
        directories = [self.project_dir / HUSKY_DIR]
        try:
            directories.append(self.git.git_path("hooks"))
        except NotARepositoryError:
            logger.debug("No git hooks directory for %s", self.project_dir)
        paths: Dict[Path, None] = {}
        for directory in directories:
            for hook in HookType:
                paths[directory / hook.value] = None
        return list(paths)

    # ----- operations -----

    def install(self, hook_type: HookType = HookType.PRE_COMMIT,
                target: InstallTarget = InstallTarget.AUTO,
                reminder_prescripts: bool = False) -> InstallReport:
        """Add the manifest scripts and write the hook script."""
        repo_root = self.check_environment()
        self.manifest.load()
        target = self.resolve_target(target)
        report = InstallReport(hook_type=hook_type, target=target)

        for name, command in MANAGED_SCRIPTS.items():
            if self.manifest.set_script(name, command):
                report.scripts_added.append(name)
        if target is InstallTarget.HUSKY:
            if self.manifest.set_script(PREPARE_SCRIPT, HUSKY_PREPARE):
                report.scripts_added.append(PREPARE_SCRIPT)
            if not self.manifest.has_dependency("husky"):
                report.warnings.append("husky is not a dependency. Run: npm install husky --save-dev")

        removed = self.manifest.remove_scripts_matching(LEGACY_BUILD_SCRIPTS, SCRIPT_INVOCATION_PATTERN)
        report.scripts_removed.extend(removed)

        if reminder_prescripts:
            report.scripts_added.extend(self._add_reminder_prescripts(repo_root))

        self.manifest.save()

        relative = self.project_dir.relative_to(repo_root).as_posix()
        hook_path = self.hook_directory(target) / hook_type.value
        report.hook_backup = self._backup_custom_hook(hook_path)
        self._write_hook(hook_path, render_hook_script(relative))
        report.hook_path = hook_path
        return report

    def uninstall(self) -> UninstallReport:
        """Remove rbhooks hook files and the manifest scripts rbhooks added."""
        report = UninstallReport()
        for hook_path in self._candidate_hook_paths():
            if not hook_path.is_file():
                continue
            if is_rbhooks_hook(read_text_file(hook_path)):
                safe_delete_file(hook_path)
                audit("remove_hook_script", hook_path)
                report.removed_hooks.append(hook_path)
            else:
                report.skipped_hooks.append(hook_path)

        if self.manifest.exists():
            self.manifest.load()
            for name, command in MANAGED_SCRIPTS.items():
                if self.manifest.get_script(name) == command and self.manifest.remove_script(name):
                    report.scripts_removed.append(name)
            report.scripts_removed.extend(self.manifest.remove_scripts_matching(
                [f"pre{name}" for name in REMINDER_PRESCRIPT_TARGETS], REMINDER_PRESCRIPT_PATTERN))
            report.scripts_removed.extend(
                self.manifest.remove_scripts_matching(LEGACY_BUILD_SCRIPTS, SCRIPT_INVOCATION_PATTERN))
            self.manifest.save()
        return report

    def fix_hooks(self) -> FixReport:
        """Rewrite outdated hook scripts and restore missing manifest scripts."""
        repo_root = self.check_environment()
        report = FixReport()
        husky_dir = self.project_dir / HUSKY_DIR
        relative = self.project_dir.relative_to(repo_root).as_posix()
        for hook_path in self._candidate_hook_paths():
            if not hook_path.is_file():
                continue
            content = read_text_file(hook_path)
            # Outside .husky only hooks rbhooks wrote itself are rewritten.
            if hook_path.parent != husky_dir and not is_rbhooks_hook(content):
                continue
            if needs_fix(content):
                self._write_hook(hook_path, render_hook_script(relative))
                report.fixed_hooks.append(hook_path)
            else:
                report.compatible_hooks.append(hook_path)

        self.manifest.load()
        for name, command in MANAGED_SCRIPTS.items():
            if self.manifest.set_script(name, command):
                report.scripts_added.append(name)
        self.manifest.save()

        if not self.manifest.has_dependency("husky") and (self.project_dir / HUSKY_DIR).is_dir():
            report.warnings.append("husky is not a dependency. Run: npm install husky --save-dev")
        return report

    # ----- helpers -----

    def _add_reminder_prescripts(self, repo_root: Path) -> List[str]:
        manager: PackageManager = detect_package_manager(self.project_dir, stop_at=repo_root)
        added = []
        scripts = self.manifest.get_scripts()
        for name in REMINDER_PRESCRIPT_TARGETS:
            if name not in scripts:
                continue
            pre_name = f"pre{name}"
            if self.manifest.set_script(pre_name, " ".join(manager.run_command("git-reminder"))):
                added.append(pre_name)
        return added

    @staticmethod
    def _backup_custom_hook(hook_path: Path) -> Optional[Path]:
        if not hook_path.is_file():
            return None
        if is_rbhooks_hook(read_text_file(hook_path)):
            return None
        backup = create_backup(hook_path)
        logger.info("Backed up existing hook %s to %s", hook_path, backup)
        return backup

    @staticmethod
    def _write_hook(hook_path: Path, content: str) -> None:
        hook_path.parent.mkdir(parents=True, exist_ok=True)
        write_text_file(hook_path, content)
        make_executable(hook_path)
        audit("write_hook_script", hook_path)


def install(project_dir: Union[str, Path], hook_type: HookType = HookType.PRE_COMMIT,
            target: InstallTarget = InstallTarget.AUTO, reminder_prescripts: bool = False) -> InstallReport:
    return HookInstaller(project_dir).install(hook_type, target, reminder_prescripts)


def uninstall(project_dir: Union[str, Path]) -> UninstallReport:
    return HookInstaller(project_dir).uninstall()


def fix_hooks(project_dir: Union[str, Path]) -> FixReport:
    return HookInstaller(project_dir).fix_hooks()


def show_config(project_dir: Union[str, Path]) -> HookConfig:
    """Effective configuration for ``project_dir`` (defaults when no file exists)."""
    return load_config(project_dir)
