"""Exception hierarchy for rbhooks.

Every failure the tool can describe to a user is an ``RBHooksError``. The
subclasses follow the error taxonomy the hook pipeline acts on:

- ``UserError``: configuration and argument problems the user can fix.
- ``HookEnvironmentError``: missing prerequisites (git, package manager,
  manifest, repository). Always fatal, independent of any ``enforce`` flag.
- ``CheckViolation``: a check found a problem while enforcing.
- ``InternalError``: unexpected state inside rbhooks itself.
- ``ExternalToolError``: a subprocess failed in an unexpected way.
"""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

BYPASS_HINT = "You can bypass this check with git commit --no-verify, but this is not recommended."


class ErrorSeverity(Enum):
    """How loudly an error should be reported."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Where an error originates."""
    USER = "user"
    ENVIRONMENT = "environment"
    VIOLATION = "violation"
    INTERNAL = "internal"
    EXTERNAL = "external"


class RBHooksError(Exception):
    """Base class for all rbhooks errors.

    Attributes:
        message: Human-readable message
        error_code: Stable code for programmatic handling (CATEGORY_SPECIFIC)
        suggested_fix: Remediation text shown below the message
        context: Extra key/value details for logs and JSON output
        original_error: Wrapped exception, if any
        severity: ErrorSeverity
        category: ErrorCategory
        error_id: Short unique id, handy when matching output to log lines
        timestamp: When the error was created
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        suggested_fix: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        severity: Union[str, ErrorSeverity] = ErrorSeverity.MEDIUM,
        category: Union[str, ErrorCategory] = ErrorCategory.INTERNAL,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.suggested_fix = suggested_fix
        self.context = context or {}
        self.original_error = original_error
        self.severity = severity if isinstance(severity, ErrorSeverity) else ErrorSeverity(severity)
        self.category = category if isinstance(category, ErrorCategory) else ErrorCategory(category)
        self.error_id = str(uuid.uuid4())[:8]
        self.timestamp = datetime.now()

    def get_user_message(self) -> str:
        """Format the error for terminal output."""
        severity_icons = {
            ErrorSeverity.LOW: "💡",
            ErrorSeverity.MEDIUM: "⚠️",
            ErrorSeverity.HIGH: "❌",
            ErrorSeverity.CRITICAL: "🚨",
        }
        icon = severity_icons.get(self.severity, "❓")
        user_msg = f"{icon} {self.message}"
        if self.suggested_fix:
            user_msg += f"\n👉 {self.suggested_fix}"
        return user_msg

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation used by the JSON report."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "suggested_fix": self.suggested_fix,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None,
        }


# ===== User errors =====

class UserError(RBHooksError):
    """Problems the user can correct directly (config, arguments)."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.USER)
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        super().__init__(message, **kwargs)


class ConfigError(UserError):
    """A configuration file could not be used."""

    def __init__(self, message: str, config_path: Union[str, Path, None] = None, **kwargs):
        self.config_path = Path(config_path) if config_path else None
        kwargs.setdefault("error_code", "USER_CONFIG_INVALID")
        kwargs.setdefault("suggested_fix", "Check the hooks-config file; defaults are used until it parses")
        if self.config_path:
            kwargs.setdefault("context", {}).update({"config_path": str(self.config_path)})
        super().__init__(message, **kwargs)


class ConfigParseError(ConfigError):
    """A configuration file is not valid JSON/YAML or has the wrong shape."""

    def __init__(self, message: str, config_path: Union[str, Path, None] = None, **kwargs):
        kwargs.setdefault("error_code", "USER_CONFIG_PARSE")
        super().__init__(message, config_path, **kwargs)


class InvalidArgumentError(UserError):
    """A command line argument has an unusable value."""

    def __init__(self, message: str, argument_name: Optional[str] = None,
                 valid_values: Optional[List[str]] = None, **kwargs):
        self.argument_name = argument_name
        self.valid_values = valid_values or []
        kwargs.setdefault("error_code", "USER_INVALID_ARGUMENT")
        if self.valid_values:
            kwargs.setdefault("suggested_fix", f"Valid values: {', '.join(self.valid_values)}")
        context = kwargs.setdefault("context", {})
        if self.argument_name:
            context["argument_name"] = self.argument_name
        super().__init__(message, **kwargs)


# ===== Environment errors =====

class HookEnvironmentError(RBHooksError):
    """A prerequisite is missing. Fatal regardless of enforce settings."""

    def __init__(self, message: str, missing_dependency: Optional[str] = None, **kwargs):
        self.missing_dependency = missing_dependency
        kwargs.setdefault("error_code", "ENV_PREREQUISITE_MISSING")
        kwargs.setdefault("category", ErrorCategory.ENVIRONMENT)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        if self.missing_dependency:
            kwargs.setdefault("context", {})["missing_dependency"] = self.missing_dependency
        super().__init__(message, **kwargs)


class ToolNotFoundError(HookEnvironmentError):
    """An external executable (git, npm, yarn, pnpm) is not on PATH."""

    def __init__(self, tool: str, **kwargs):
        self.tool = tool
        kwargs.setdefault("error_code", "ENV_TOOL_NOT_FOUND")
        kwargs.setdefault("suggested_fix", f"Install {tool} and make sure it is on your PATH")
        super().__init__(f"Required tool '{tool}' was not found", missing_dependency=tool, **kwargs)


class NotARepositoryError(HookEnvironmentError):
    """The working directory is not inside a git work tree."""

    def __init__(self, path: Union[str, Path], **kwargs):
        self.path = Path(path)
        kwargs.setdefault("error_code", "ENV_NOT_A_REPOSITORY")
        kwargs.setdefault("suggested_fix", "Run this from inside a git repository (git init first)")
        kwargs.setdefault("context", {})["path"] = str(self.path)
        super().__init__(f"{self.path} is not a Git repository", **kwargs)


class ManifestNotFoundError(HookEnvironmentError):
    """No package.json could be found for the project."""

    def __init__(self, path: Union[str, Path], **kwargs):
        self.path = Path(path)
        kwargs.setdefault("error_code", "ENV_MANIFEST_NOT_FOUND")
        kwargs.setdefault("suggested_fix", "Initialize the project first with 'npm init'")
        kwargs.setdefault("context", {})["path"] = str(self.path)
        super().__init__(f"No package.json found in {self.path}", **kwargs)


# ===== Violations =====

class CheckViolation(RBHooksError):
    """An enforcing check found a problem that must block the commit."""

    def __init__(self, message: str, check_name: Optional[str] = None, **kwargs):
        self.check_name = check_name
        kwargs.setdefault("error_code", "VIOLATION")
        kwargs.setdefault("category", ErrorCategory.VIOLATION)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("suggested_fix", BYPASS_HINT)
        if check_name:
            kwargs.setdefault("context", {})["check"] = check_name
        super().__init__(message, **kwargs)


# ===== Internal / external errors =====

class InternalError(RBHooksError):
    """Unexpected state inside rbhooks."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "INTERNAL_ERROR")
        kwargs.setdefault("category", ErrorCategory.INTERNAL)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class ParseError(InternalError):
    """Structured data (manifest, git output) could not be parsed."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "INTERNAL_PARSE_ERROR")
        super().__init__(message, **kwargs)


class ExternalToolError(RBHooksError):
    """An external command failed in a way the caller did not expect."""

    def __init__(self, message: str, command: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: Optional[str] = None, **kwargs):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        kwargs.setdefault("error_code", "EXTERNAL_TOOL_FAILED")
        kwargs.setdefault("category", ErrorCategory.EXTERNAL)
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        context = kwargs.setdefault("context", {})
        if command:
            context["command"] = " ".join(command)
        if returncode is not None:
            context["returncode"] = returncode
        super().__init__(message, **kwargs)


def create_error_from_exception(exc: Exception, message: Optional[str] = None) -> RBHooksError:
    """Wrap an arbitrary exception in the rbhooks hierarchy."""
    if isinstance(exc, RBHooksError):
        return exc
    text = message or f"{type(exc).__name__}: {exc}"
    if isinstance(exc, FileNotFoundError):
        return InternalError(text, error_code="INTERNAL_FILE_NOT_FOUND", original_error=exc)
    if isinstance(exc, PermissionError):
        return InternalError(text, error_code="INTERNAL_PERMISSION_DENIED", original_error=exc)
    if isinstance(exc, OSError):
        return InternalError(text, error_code="INTERNAL_OS_ERROR", original_error=exc)
    return InternalError(text, original_error=exc)


__all__ = [
    "BYPASS_HINT",
    "ErrorSeverity",
    "ErrorCategory",
    "RBHooksError",
    "UserError",
    "ConfigError",
    "ConfigParseError",
    "InvalidArgumentError",
    "HookEnvironmentError",
    "ToolNotFoundError",
    "NotARepositoryError",
    "ManifestNotFoundError",
    "CheckViolation",
    "InternalError",
    "ParseError",
    "ExternalToolError",
    "create_error_from_exception",
]
