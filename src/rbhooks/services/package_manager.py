"""Running manifest scripts through npm, yarn or pnpm."""

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..exceptions import ExternalToolError, ToolNotFoundError
from ..types.enums import PackageManager
from .recursion_guard import child_environment

logger = logging.getLogger(__name__)

STDERR_FILENO = 2


@dataclass
class ScriptRunResult:
    """Outcome of ``<pm> run <script>``."""
    success: bool
    returncode: int
    command: List[str] = field(default_factory=list)
    duration: float = 0.0
    timed_out: bool = False


def detect_package_manager(directory: Union[str, Path],
                           stop_at: Optional[Union[str, Path]] = None) -> PackageManager:
    """Pick the package manager from the nearest lock file.

    Looks in ``directory`` and its parents up to ``stop_at``; pnpm wins over
    yarn, and npm is the fallback.
    """
    current = Path(directory).resolve()
    stop = Path(stop_at).resolve() if stop_at else None
    for candidate in [current] + list(current.parents):
        for manager in (PackageManager.PNPM, PackageManager.YARN, PackageManager.NPM):
            if (candidate / manager.lock_file).exists():
                return manager
        if stop is not None and candidate == stop:
            break
    return PackageManager.NPM


class PackageManagerRunner:
    """Runs manifest scripts with a specific package manager.

    Output of the child process is not captured: it streams straight to the
    terminal so build errors are visible in the commit output. With ``quiet``
    the child's stdout is sent to stderr, leaving stdout to the JSON report.
    """

    def __init__(self, manager: PackageManager = PackageManager.NPM, quiet: bool = False):
        self.manager = manager
        self.quiet = quiet

    def ensure_available(self) -> str:
        """Return the executable path or raise ToolNotFoundError."""
        executable = shutil.which(self.manager.value)
        if executable is None:
            raise ToolNotFoundError(self.manager.value)
        return executable

    def run_script(self, directory: Union[str, Path], script: str,
                   timeout: Optional[float] = None) -> ScriptRunResult:
        """Run ``script`` in ``directory`` and wait for it to finish."""
        executable = self.ensure_available()
        command = [executable, "run", script]
        display_command = self.manager.run_command(script)
        start = time.perf_counter()
        logger.debug("Running %s in %s", " ".join(display_command), directory)
        try:
            completed = subprocess.run(
                command,
                cwd=str(directory),
                env=child_environment(),
                stdout=STDERR_FILENO if self.quiet else None,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            duration = time.perf_counter() - start
            logger.warning("%s timed out after %.1fs", " ".join(display_command), duration)
            return ScriptRunResult(False, 124, display_command, duration, timed_out=True)
        except FileNotFoundError as e:
            raise ToolNotFoundError(self.manager.value, original_error=e)
        except OSError as e:
            raise ExternalToolError(f"Could not run {self.manager.value}: {e}", command=command,
                                    original_error=e)

        duration = time.perf_counter() - start
        logger.debug("%s exited with %s after %.1fs", " ".join(display_command),
                     completed.returncode, duration)
        return ScriptRunResult(
            success=completed.returncode == 0,
            returncode=completed.returncode,
            command=display_command,
            duration=duration,
        )
