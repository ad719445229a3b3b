"""Result models produced by the checks.

A CheckResult collects what one check found. Findings are grouped into named
buckets (for example ``fileNames`` and ``imports`` for the lowercase check) so
that the report can print them under separate headings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..types.enums import CheckStatus, HookName


@dataclass
class Finding:
    """A single problem reported by a check.

    Attributes:
        bucket: Group the finding belongs to (e.g. "fileNames", "imports")
        message: Human-readable description
        path: Repository-relative path the finding is about, if any
        detail: Extra information such as the offending import path
    """
    bucket: str
    message: str
    path: Optional[str] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"bucket": self.bucket, "message": self.message}
        if self.path is not None:
            result["path"] = self.path
        if self.detail is not None:
            result["detail"] = self.detail
        return result


@dataclass
class CheckResult:
    """Outcome of running one check.

    Attributes:
        check: Which check produced this result
        status: CheckStatus of the run
        enforce: Whether the check ran in enforcing mode
        findings: Violations found (blocking when enforcing)
        notes: Informational lines that never block (e.g. "Last commit was 1.2 hours ago")
        errors: Unexpected errors caught at the check boundary
        message: One-line summary
    """
    check: HookName
    status: CheckStatus = CheckStatus.PASSED
    enforce: bool = False
    findings: List[Finding] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def blocks(self) -> bool:
        return self.status.blocks_pipeline()

    def add_finding(self, bucket: str, message: str, path: Optional[str] = None,
                    detail: Optional[str] = None) -> None:
        self.findings.append(Finding(bucket=bucket, message=message, path=path, detail=detail))

    def bucket(self, name: str) -> List[Finding]:
        """Findings of one bucket, in the order they were added."""
        return [finding for finding in self.findings if finding.bucket == name]

    def conclude(self, message: str = "") -> "CheckResult":
        """Derive the final status from findings and the enforce flag.

        Checks call this once at the end of their run. Results already marked
        SKIPPED or ERROR keep their status.
        """
        if message:
            self.message = message
        if self.status in (CheckStatus.SKIPPED, CheckStatus.ERROR):
            return self
        if self.findings:
            self.status = CheckStatus.FAILED if self.enforce else CheckStatus.WARNED
        else:
            self.status = CheckStatus.PASSED
        return self

    @classmethod
    def skipped(cls, check: HookName, message: str, enforce: bool = False) -> "CheckResult":
        return cls(check=check, status=CheckStatus.SKIPPED, enforce=enforce, message=message)

    @classmethod
    def errored(cls, check: HookName, error: str, enforce: bool = False) -> "CheckResult":
        return cls(check=check, status=CheckStatus.ERROR, enforce=enforce,
                   errors=[error], message=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.check.value,
            "status": self.status.value,
            "enforce": self.enforce,
            "message": self.message,
            "findings": [finding.to_dict() for finding in self.findings],
            "notes": list(self.notes),
            "errors": list(self.errors),
        }
