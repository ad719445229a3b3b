"""The four pipeline checks.

Importing this package registers every check with the ``@check`` registry.
"""

from .base import BaseCheck, CheckContext, check, get_check_class, get_registered_checks
from .build import BuildRunner
from .git_reminder import GitStatusReminder
from .gitignore import GitignoreAuditor
from .lowercase import LowercaseAuditor

__all__ = [
    "BaseCheck",
    "BuildRunner",
    "CheckContext",
    "GitStatusReminder",
    "GitignoreAuditor",
    "LowercaseAuditor",
    "check",
    "get_check_class",
    "get_registered_checks",
]
