"""Git-status reminder.

Three independent findings:

* uncommitted changes in the working tree (listing capped at 10 entries)
* too much time since the last commit (``hoursThreshold``, default 4)
* the branch trails its upstream after a quiet fetch

A repository without commits skips the last two. A missing upstream or a
failing fetch is not reported at all.
"""

import logging
from typing import Optional

from .. import output_utils
from ..models.check_result import CheckResult
from ..models.hook_config import HookSettings
from ..types.enums import HookName
from ..utils.values import safe_get_bool, safe_get_number
from .base import BaseCheck, CheckContext, check

logger = logging.getLogger(__name__)

DEFAULT_HOURS_THRESHOLD = 4
DEFAULT_FETCH_TIMEOUT = 15

BUCKET_UNCOMMITTED = "uncommitted"
BUCKET_STALE = "stale"
BUCKET_BEHIND = "behind"


def hours_since(timestamp: float, now: float) -> float:
    return (now - timestamp) / 3600.0


def is_stale(hours: float, threshold: float = DEFAULT_HOURS_THRESHOLD) -> bool:
    return hours > threshold


@check(HookName.GIT_REMINDER, title="Git status reminder")
class GitStatusReminder(BaseCheck):
    """Reminds about uncommitted work, stale commits and upstream changes."""

    def audit(self, context: CheckContext, settings: HookSettings) -> CheckResult:
        result = CheckResult(check=self.hook_name, enforce=settings.enforce)
        options = dict(settings.settings)
        threshold = safe_get_number(options, "hoursThreshold", DEFAULT_HOURS_THRESHOLD, allow_zero=True)
        self._progress("Checking Git status...")

        git = context.git
        if not git.is_inside_work_tree():
            self._info("Not in a Git repository. Skipping Git checks.")
            return CheckResult.skipped(self.hook_name, "Not in a Git repository", enforce=settings.enforce)

        changes = git.status_porcelain()
        if changes:
            listing = output_utils.format_capped_list(git.status_short() or changes)
            result.add_finding(BUCKET_UNCOMMITTED, f"{len(changes)} file(s) modified",
                               detail="\n".join(listing))

        last_commit = git.last_commit_timestamp()
        if last_commit is None:
            result.notes.append("No commits found in this repository yet.")
            return result.conclude(self._summary(result))

        hours = hours_since(last_commit, context.clock())
        if is_stale(hours, threshold):
            result.add_finding(BUCKET_STALE, f"It's been {hours:.1f} hours since your last commit.",
                               detail=f"{hours:.1f}")
        else:
            result.notes.append(f"Last commit was {hours:.1f} hours ago.")

        behind = self._behind_count(context, options)
        if behind:
            result.add_finding(BUCKET_BEHIND, f"Your branch is behind by {behind} commit(s).",
                               detail=str(behind))

        return result.conclude(self._summary(result))

    @staticmethod
    def _behind_count(context: CheckContext, options) -> Optional[int]:
        if safe_get_bool(options, "fetch", True):
            timeout = safe_get_number(options, "fetchTimeout", DEFAULT_FETCH_TIMEOUT)
            fetched = context.git.fetch(timeout=timeout)
            if not fetched.success:
                logger.debug("git fetch failed, skipping divergence check: %s", fetched.stderr)
                return None
        return context.git.behind_count()

    @staticmethod
    def _summary(result: CheckResult) -> str:
        if not result.findings:
            return "Git check complete."
        return "; ".join(finding.message for finding in result.findings)

    def report(self, result: CheckResult) -> None:
        emit = self._error if result.blocks else self._warn
        uncommitted = result.bucket(BUCKET_UNCOMMITTED)
        if uncommitted:
            emit("You have uncommitted changes:")
            self._print(f"{output_utils.GLYPH_NOTE} {uncommitted[0].message}", stderr=True)
            self._print("\nChanged files:", stderr=True)
            for line in (uncommitted[0].detail or "").splitlines():
                self._print(line, stderr=True)
            self._print(f"\n{output_utils.GLYPH_HINT} Consider committing your changes before continuing.",
                        stderr=True)
        else:
            self._success("Working directory is clean. No uncommitted changes.")

        for note in result.notes:
            if note.startswith("No commits"):
                self._info(note)
            else:
                self._success(note)

        for finding in result.bucket(BUCKET_STALE):
            self._print(f"\n{output_utils.GLYPH_CLOCK} {finding.message}", stderr=True)
            self._print("Remember to commit often to avoid losing progress!", stderr=True)

        for finding in result.bucket(BUCKET_BEHIND):
            emit(finding.message)
            self._print(f"{output_utils.GLYPH_HINT} Consider running git pull to get the latest changes.",
                        stderr=True)

        if result.blocks and not self.quiet:
            output_utils.print_blocking(
                "Commit blocked by the git status reminder (gitReminder.enforce is true).",
                "Commit or stash pending work and pull upstream changes first.",
            )
        self._print(f"\n{output_utils.GLYPH_PROGRESS} Git check complete.")
