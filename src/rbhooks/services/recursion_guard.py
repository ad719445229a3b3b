"""Protection against the hook pipeline re-entering itself.

A build script that calls back into the pipeline (for example a ``build:dev``
script wired to the build runner) makes every commit trigger a build that
triggers the hook again. Three layers stop that loop:

1. Child processes started by rbhooks carry ``RBHOOKS_ACTIVE=1``.
2. Build scripts whose command text calls an rbhooks entry point are refused.
3. The pipeline entry point scans its ancestor processes with psutil, which
   also catches loops where the environment variable was scrubbed.
"""

import logging
import os
import re
from pathlib import PurePath
from typing import Dict, List, Mapping, Optional, Sequence

import psutil

logger = logging.getLogger(__name__)

ACTIVE_ENV_VAR = "RBHOOKS_ACTIVE"

# Console scripts that run the pipeline or the build runner.
PIPELINE_ENTRY_POINTS = frozenset({"rb_precommit", "rb_buildapps"})
DISPATCHER_NAME = "rbhooks"
DISPATCHER_PIPELINE_COMMANDS = frozenset({"run", "build", "buildapps", "precommit"})

SCRIPT_INVOCATION_PATTERN = re.compile(
    r"(?<![\w-])(?:rb_precommit|rb_buildapps|rbhooks\s+(?:run|buildapps|build|precommit)"
    r"|python3?\s+-m\s+rbhooks\s+(?:run|buildapps|build|precommit)|build-react-apps(?:\.js)?)(?![\w-])"
)


def child_environment(base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for subprocesses started by the pipeline."""
    env = dict(os.environ if base is None else base)
    env[ACTIVE_ENV_VAR] = "1"
    return env


def is_marked_active(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get(ACTIVE_ENV_VAR, "") not in ("", "0")


def script_invokes_pipeline(command: str) -> bool:
    """True when a manifest script command calls back into rbhooks."""
    return bool(SCRIPT_INVOCATION_PATTERN.search(command or ""))


def cmdline_runs_pipeline(cmdline: Sequence[str]) -> bool:
    """True when a process command line is an rbhooks pipeline invocation."""
    names = [PurePath(arg).name for arg in cmdline]
    for index, name in enumerate(names):
        if name in PIPELINE_ENTRY_POINTS:
            return True
        if name == DISPATCHER_NAME and index + 1 < len(names):
            if names[index + 1] in DISPATCHER_PIPELINE_COMMANDS:
                return True
    return False


def find_pipeline_ancestor(process: Optional[psutil.Process] = None) -> Optional[int]:
    """PID of an ancestor process that is already running the pipeline."""
    try:
        process = process or psutil.Process()
        ancestors: List[psutil.Process] = process.parents()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
        logger.debug("Cannot inspect process ancestry: %s", e)
        return None

    for ancestor in ancestors:
        try:
            cmdline = ancestor.cmdline()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        if cmdline_runs_pipeline(cmdline):
            logger.debug("Found running pipeline in ancestor %s: %s", ancestor.pid, cmdline)
            return ancestor.pid
    return None


def is_nested_invocation(environ: Optional[Mapping[str, str]] = None,
                         process: Optional[psutil.Process] = None) -> bool:
    """Whether this process was started, directly or not, by a running pipeline."""
    if is_marked_active(environ):
        return True
    return find_pipeline_ancestor(process) is not None
