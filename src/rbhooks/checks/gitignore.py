"""Ignore-file audit.

Makes sure the repository's .gitignore lists the paths that must never be
committed (dependency folders, env files with secrets, build output, editor
and OS clutter). Missing patterns are appended under a single header comment
and the file is staged so the fix lands in the commit being made.

A pattern counts as present when the file contains it as an exact line, or
as the same line with a trailing slash (``node_modules/``).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .. import output_utils
from ..models.check_result import CheckResult
from ..models.hook_config import HookSettings
from ..types.enums import HookName
from ..utils.file_operations import FileOperationError, read_text_file, write_text_file
from ..utils.logging import audit
from ..utils.values import safe_get_bool, safe_get_str_list
from .base import BaseCheck, CheckContext, check

logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"
ADDED_HEADER = "# Added automatically"

DEFAULT_PATTERNS = (
    "node_modules",
    ".env",
    ".env.local",
    ".env.development.local",
    ".env.test.local",
    ".env.production.local",
    "npm-debug.log*",
    "yarn-debug.log*",
    "yarn-error.log*",
    "pnpm-debug.log*",
    ".DS_Store",
    "Thumbs.db",
    "build",
    "dist",
    "coverage",
    ".next",
    ".cache",
    ".eslintcache",
    ".npm",
    ".yarn-integrity",
    "*.pem",
    "*.key",
    "*.log",
    ".idea",
    ".vscode",
)

BUCKET_WRITE = "write"
BUCKET_STAGE = "stage"


def existing_lines(content: str) -> set:
    """Trimmed, non-empty lines of an ignore-file."""
    return {line.strip() for line in content.splitlines() if line.strip()}


def find_missing_patterns(content: str, patterns: Iterable[str]) -> List[str]:
    """Patterns not present as an exact line or as ``pattern/``, in input order."""
    lines = existing_lines(content)
    missing = []
    for pattern in patterns:
        if pattern in lines or f"{pattern}/" in lines or pattern in missing:
            continue
        missing.append(pattern)
    return missing


def detect_line_ending(content: str) -> str:
    """``\\r\\n`` when the file already uses it, else ``\\n``."""
    return "\r\n" if "\r\n" in content else "\n"


def append_patterns(content: str, missing: Sequence[str]) -> str:
    """Return ``content`` with ``missing`` appended under the header comment.

    New lines use the line ending already present in ``content``.
    """
    if not missing:
        return content
    eol = detect_line_ending(content)
    additions = ""
    if content and not content.endswith("\n"):
        additions += eol
    additions += ADDED_HEADER + eol
    additions += "".join(f"{pattern}{eol}" for pattern in missing)
    return content + additions


def effective_patterns(settings: HookSettings) -> List[str]:
    """Default patterns followed by any configured ``extraPatterns``."""
    patterns = list(DEFAULT_PATTERNS)
    for extra in safe_get_str_list(dict(settings.settings), "extraPatterns"):
        extra = extra.strip()
        if extra and extra not in patterns:
            patterns.append(extra)
    return patterns


@dataclass
class GitignoreUpdate:
    """What ``ensure_patterns`` did to the ignore-file."""
    path: Path
    created: bool = False
    added: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added)


def ensure_patterns(root_dir: Union[str, Path], patterns: Sequence[str] = DEFAULT_PATTERNS) -> GitignoreUpdate:
    """Append missing ``patterns`` to ``root_dir/.gitignore``.

    Running it again on the result changes nothing.

    Raises:
        FileOperationError: If the file cannot be read or written
    """
    path = Path(root_dir) / GITIGNORE_NAME
    exists = path.exists()
    content = read_text_file(path, newline="") if exists else ""
    missing = find_missing_patterns(content, patterns)
    update = GitignoreUpdate(path=path, created=not exists, added=missing)
    if missing:
        write_text_file(path, append_patterns(content, missing))
        audit("append_gitignore_patterns", path, patterns=",".join(missing))
    return update


@check(HookName.GITIGNORE, title="Gitignore audit")
class GitignoreAuditor(BaseCheck):
    """Adds missing sensitive-path patterns to .gitignore and stages the file."""

    def audit(self, context: CheckContext, settings: HookSettings) -> CheckResult:
        result = CheckResult(check=self.hook_name, enforce=settings.enforce)
        self._progress("Checking .gitignore file...")

        patterns = effective_patterns(settings)
        path = context.repo_root / GITIGNORE_NAME
        if not path.exists():
            self._warn("No .gitignore found. Creating a new one...")

        try:
            update = ensure_patterns(context.repo_root, patterns)
        except FileOperationError as e:
            logger.debug("Could not update %s", path, exc_info=True)
            result.add_finding(BUCKET_WRITE, f"Failed to update .gitignore: {e.message}", path=GITIGNORE_NAME)
            return result.conclude("Could not update .gitignore")

        if not update.changed:
            return result.conclude(".gitignore already contains all essential patterns.")

        result.notes.append(f"Added missing patterns to .gitignore: {', '.join(update.added)}")

        if safe_get_bool(dict(settings.settings), "stage", True):
            staged = context.git.add([GITIGNORE_NAME])
            if not staged.success:
                result.add_finding(BUCKET_STAGE, f"Failed to stage .gitignore: {staged.stderr or 'git add failed'}",
                                   path=GITIGNORE_NAME)
                return result.conclude("Updated .gitignore but could not stage it")

        return result.conclude(".gitignore updated successfully!")

    def report(self, result: CheckResult) -> None:
        for note in result.notes:
            self._warn(note)
        if not result.findings:
            self._success(result.message)
            return
        for finding in result.findings:
            if result.blocks:
                self._error(finding.message)
            else:
                self._warn(finding.message)
        if result.blocks and not self.quiet:
            output_utils.print_blocking(
                "Commit blocked: .gitignore could not be updated.",
                "Add the missing patterns to .gitignore by hand and stage it.",
            )
