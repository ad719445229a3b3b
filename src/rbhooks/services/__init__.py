"""Services: git, package managers, recursion guard and the installer."""

from .git_client import GitClient, GitResult, parse_name_status_z
from .installer import HookInstaller, fix_hooks, install, show_config, uninstall
from .package_manager import PackageManagerRunner, ScriptRunResult, detect_package_manager
from .recursion_guard import is_nested_invocation, script_invokes_pipeline

__all__ = [
    "GitClient",
    "GitResult",
    "HookInstaller",
    "PackageManagerRunner",
    "ScriptRunResult",
    "detect_package_manager",
    "fix_hooks",
    "install",
    "is_nested_invocation",
    "parse_name_status_z",
    "script_invokes_pipeline",
    "show_config",
    "uninstall",
]
