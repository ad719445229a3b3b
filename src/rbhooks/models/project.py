"""Models for staged files and buildable projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Tuple

from ..types.enums import FileStatus


@dataclass(frozen=True)
class StagedFile:
    """A path staged for the next commit.

    Attributes:
        path: Repository-relative POSIX path (the new path for renames)
        status: Diff status from the index
        old_path: Original path for renames/copies
    """
    path: str
    status: FileStatus = FileStatus.MODIFIED
    old_path: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return self.status is FileStatus.DELETED

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.path).suffix.lower()

    @property
    def parts(self) -> Tuple[str, ...]:
        return PurePosixPath(self.path).parts

    def is_under(self, prefix: str) -> bool:
        """True when the file lives inside the directory ``prefix`` (POSIX, relative)."""
        prefix = prefix.strip("/")
        if prefix in ("", "."):
            return True
        return self.path == prefix or self.path.startswith(prefix + "/")


@dataclass
class ProjectDescriptor:
    """A directory with a package.json that rbhooks may build.

    Attributes:
        directory: Absolute directory of the manifest
        relative_dir: POSIX path relative to the repository root ("." for the root)
        name: Package name from the manifest, or the directory name
        scripts: The manifest's scripts mapping
        manifest: The full parsed manifest
    """
    directory: Path
    relative_dir: str
    name: str
    scripts: Dict[str, str] = field(default_factory=dict)
    manifest: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.relative_dir if self.relative_dir != "." else self.name

    def has_script(self, script: str) -> bool:
        value = self.scripts.get(script)
        return isinstance(value, str) and bool(value.strip())

    def has_dependency(self, package: str) -> bool:
        for key in ("dependencies", "devDependencies", "peerDependencies"):
            deps = self.manifest.get(key)
            if isinstance(deps, dict) and package in deps:
                return True
        return False

    def uses_any(self, packages) -> bool:
        return any(self.has_dependency(package) for package in packages)
