"""Git command wrapper.

Every git invocation goes through ``GitClient.run`` which returns a GitResult
instead of raising on a non-zero exit code. Callers decide whether a failure
matters: a missing upstream is routine for the reminder check, while a failing
``git add`` after rewriting the ignore-file is an error.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..exceptions import ExternalToolError, NotARepositoryError, ToolNotFoundError
from ..models.project import StagedFile
from ..types.enums import FileStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass
class GitResult:
    """Outcome of one git command."""
    success: bool
    stdout: str
    stderr: str
    returncode: int

    @property
    def lines(self) -> List[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


class GitClient:
    """Runs git commands in a fixed working directory.

    Args:
        cwd: Directory to run git in (defaults to the process cwd)
        executable: git binary name or path
    """

    def __init__(self, cwd: Optional[Union[str, Path]] = None, executable: str = "git"):
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.executable = executable

    def ensure_available(self) -> None:
        """Raise ToolNotFoundError when git is not on PATH."""
        if shutil.which(self.executable) is None:
            raise ToolNotFoundError(self.executable)

    def run(self, args: Sequence[str], timeout: Optional[float] = DEFAULT_TIMEOUT,
            cwd: Optional[Union[str, Path]] = None) -> GitResult:
        """Run ``git <args>`` and capture its output.

        Raises:
            ToolNotFoundError: If the git executable is missing
            ExternalToolError: If it exists but cannot be started
        """
        command = [self.executable, *args]
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd or self.cwd),
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(self.executable, original_error=e)
        except OSError as e:
            raise ExternalToolError(f"Could not run git: {e}", command=command, original_error=e)
        except subprocess.TimeoutExpired:
            logger.debug("git %s timed out after %ss", " ".join(args), timeout)
            return GitResult(False, "", "Command timed out", 124)

        logger.debug("git %s -> %s", " ".join(args), completed.returncode)
        return GitResult(
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=(completed.stderr or "").strip(),
            returncode=completed.returncode,
        )

    # ----- repository -----

    def is_inside_work_tree(self) -> bool:
        result = self.run(["rev-parse", "--is-inside-work-tree"])
        return result.success and result.stdout.strip() == "true"

    def repo_root(self) -> Path:
        """Top-level directory of the work tree.

        Raises:
            NotARepositoryError: If cwd is not inside a git work tree
        """
        result = self.run(["rev-parse", "--show-toplevel"])
        if not result.success or not result.stdout.strip():
            raise NotARepositoryError(self.cwd)
        return Path(result.stdout.strip())

    def git_path(self, name: str) -> Path:
        """Resolve a path inside the git directory (e.g. "hooks"), honoring core.hooksPath."""
        if name == "hooks":
            configured = self.run(["config", "--get", "core.hooksPath"])
            if configured.success and configured.stdout.strip():
                path = Path(configured.stdout.strip())
                return path if path.is_absolute() else self.repo_root() / path
        result = self.run(["rev-parse", "--git-path", name])
        if not result.success:
            raise NotARepositoryError(self.cwd)
        path = Path(result.stdout.strip())
        return path if path.is_absolute() else self.cwd / path

    # ----- index -----

    def staged_files(self) -> List[StagedFile]:
        """Files in the index that differ from HEAD, including deletions."""
        result = self.run(["diff", "--cached", "--name-status", "-z"])
        if not result.success:
            logger.debug("Could not list staged files: %s", result.stderr)
            return []
        return parse_name_status_z(result.stdout)

    def add(self, paths: Sequence[Union[str, Path]]) -> GitResult:
        return self.run(["add", "--", *[str(path) for path in paths]])

    # ----- working tree / history -----

    def status_porcelain(self) -> List[str]:
        result = self.run(["status", "--porcelain"])
        return result.lines if result.success else []

    def status_short(self) -> List[str]:
        result = self.run(["status", "-s"])
        return [line.rstrip() for line in result.lines] if result.success else []

    def last_commit_timestamp(self) -> Optional[int]:
        """Unix timestamp of HEAD, or None when there are no commits yet."""
        result = self.run(["log", "-1", "--format=%ct"])
        if not result.success:
            return None
        try:
            return int(result.stdout.strip())
        except ValueError:
            return None

    def fetch(self, timeout: Optional[float] = None) -> GitResult:
        return self.run(["fetch", "--quiet"], timeout=timeout)

    def behind_count(self) -> Optional[int]:
        """Commits the current branch trails its upstream; None without an upstream."""
        result = self.run(["rev-list", "--count", "HEAD..@{u}"])
        if not result.success:
            return None
        try:
            return int(result.stdout.strip())
        except ValueError:
            return None


def parse_name_status_z(output: str) -> List[StagedFile]:
    """Parse ``git diff --name-status -z`` output.

    Records are NUL separated: ``STATUS\\0path\\0`` or, for renames and copies,
    ``R100\\0old\\0new\\0``.
    """
    tokens = output.split("\0")
    files: List[StagedFile] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if not token:
            index += 1
            continue
        status = FileStatus.from_letter(token)
        if status in (FileStatus.RENAMED, FileStatus.COPIED):
            old_path = tokens[index + 1] if index + 1 < len(tokens) else ""
            new_path = tokens[index + 2] if index + 2 < len(tokens) else ""
            if new_path:
                files.append(StagedFile(path=new_path, status=status, old_path=old_path or None))
            index += 3
        else:
            path = tokens[index + 1] if index + 1 < len(tokens) else ""
            if path:
                files.append(StagedFile(path=path, status=status))
            index += 2
    return files
