"""Lowercase naming audit for staged files.

Mixed-case file names work on case-insensitive file systems (macOS, Windows)
and then break the build on Linux CI. This check flags staged files whose
base name contains uppercase letters, and relative import paths with
uppercase letters inside staged source files.

Import extraction is a line-oriented regular-expression scan. It does not
understand template-literal specifiers or imports split across lines.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List

from .. import output_utils
from ..models.check_result import CheckResult
from ..models.hook_config import HookSettings
from ..models.project import StagedFile
from ..types.enums import HookName
from ..utils.file_operations import FileOperationError, read_text_file
from ..utils.values import safe_get_str_list
from .base import BaseCheck, CheckContext, check

logger = logging.getLogger(__name__)

CODE_FILE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".vue", ".svelte", ".mjs", ".cjs", ".mts", ".cts")
DEFAULT_IGNORE_DIRS = ("node_modules", "build", "dist")

IMPORT_PATTERNS = (
    re.compile(r"import\s+.*\s+from\s+['\"](.+)['\"]"),
    re.compile(r"import\s*\(\s*['\"](.+)['\"]\s*\)"),
    re.compile(r"require\s*\(\s*['\"](.+)['\"]\s*\)"),
    re.compile(r"import\s+['\"](.+)['\"]"),
    re.compile(r"export\s+.*\s+from\s+['\"](.+)['\"]"),
    re.compile(r"dynamic\s*\(\s*['\"](.+)['\"]\s*\)"),
)

BUCKET_FILE_NAMES = "fileNames"
BUCKET_IMPORTS = "imports"


def has_uppercase(text: str) -> bool:
    return text != text.lower()


def should_skip(staged: StagedFile, ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS) -> bool:
    """Deleted files, dot-files and anything inside an ignored directory."""
    if staged.is_deleted:
        return True
    if staged.name.startswith("."):
        return True
    ignored = set(ignore_dirs)
    return any(part in ignored for part in staged.parts[:-1])


def extract_import_paths(content: str) -> List[str]:
    """Import targets found in ``content``, de-duplicated in first-seen order."""
    found: List[str] = []
    for line in content.splitlines():
        for pattern in IMPORT_PATTERNS:
            for match in pattern.finditer(line):
                target = match.group(1)
                if target not in found:
                    found.append(target)
    return found


def is_flagged_import(import_path: str) -> bool:
    """Relative import paths containing uppercase characters.

    Package names (``React``) and URLs are never flagged.
    """
    if import_path.startswith(("http://", "https://")):
        return False
    if not import_path.startswith("."):
        return False
    return has_uppercase(import_path)


@check(HookName.LOWERCASE, title="Lowercase naming audit")
class LowercaseAuditor(BaseCheck):
    """Flags uppercase file names and relative import paths among staged files."""

    def audit(self, context: CheckContext, settings: HookSettings) -> CheckResult:
        result = CheckResult(check=self.hook_name, enforce=settings.enforce)
        self._progress("Checking file names and imports for lowercase...")

        options = dict(settings.settings)
        extensions = tuple(ext.lower() for ext in
                           safe_get_str_list(options, "extensions", list(CODE_FILE_EXTENSIONS)))
        ignore_dirs = safe_get_str_list(options, "ignoreDirs", list(DEFAULT_IGNORE_DIRS))

        staged = context.staged_files
        if not staged:
            self._info("No staged files found.")
            return result.conclude("No staged files found.")

        for staged_file in staged:
            if should_skip(staged_file, ignore_dirs):
                continue
            if has_uppercase(staged_file.name):
                result.add_finding(BUCKET_FILE_NAMES, staged_file.path, path=staged_file.path)
            if staged_file.suffix in extensions:
                self._scan_imports(context.repo_root, staged_file, result)

        if result.findings:
            return result.conclude("Found files or imports with uppercase letters")
        return result.conclude("All file names and imports are lowercase!")

    def _scan_imports(self, repo_root: Path, staged_file: StagedFile, result: CheckResult) -> None:
        try:
            content = read_text_file(repo_root / staged_file.path)
        except FileOperationError as e:
            logger.debug("Cannot read %s: %s", staged_file.path, e.message)
            result.errors.append(f"Error checking imports in {staged_file.path}: {e.message}")
            return
        for import_path in extract_import_paths(content):
            if is_flagged_import(import_path):
                result.add_finding(BUCKET_IMPORTS, f"{staged_file.path}: {import_path}",
                                   path=staged_file.path, detail=import_path)

    def report(self, result: CheckResult) -> None:
        for error in result.errors:
            self._error(error)
        if not result.findings:
            if result.message != "No staged files found.":
                self._success(result.message)
            return

        emit = self._error if result.blocks else self._warn
        file_names = result.bucket(BUCKET_FILE_NAMES)
        imports = result.bucket(BUCKET_IMPORTS)
        if file_names:
            emit("Found files with uppercase letters:")
            for finding in file_names:
                self._print(f"   {finding.message}", stderr=True)
        if imports:
            emit("Found imports with uppercase letters:")
            for finding in imports:
                self._print(f"   {finding.message}", stderr=True)

        if result.blocks:
            if not self.quiet:
                output_utils.print_blocking(
                    "Commit blocked: file names and relative imports must be lowercase.",
                    "Rename the files (git mv Foo.js foo.js) and update the imports.",
                )
        else:
            self._warn("Consider renaming these files and imports to use lowercase (non-blocking).")

