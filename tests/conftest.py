"""pytest configuration and shared fixtures for rbhooks tests."""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import pytest

from rbhooks.checks.base import CheckContext
from rbhooks.models.hook_config import HookConfig
from rbhooks.models.project import StagedFile
from rbhooks.services.git_client import GitClient, GitResult

GIT_AVAILABLE = shutil.which("git") is not None

requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git is not installed")


def run_git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    return subprocess.run(["git", *args], cwd=str(repo), capture_output=True, text=True, check=True)


def write_manifest(directory: Path, data: Dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_rbhooks_env(monkeypatch):
    """Tests never inherit the recursion marker or debug settings of the caller."""
    for name in ("RBHOOKS_ACTIVE", "RBHOOKS_DEBUG", "RBHOOKS_LOG_LEVEL", "RBHOOKS_LOG_FILE",
                 "RBHOOKS_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def git_repo(tmp_path):
    """A fresh git repository with an identity configured."""
    if not GIT_AVAILABLE:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def manifest_factory() -> Callable[..., Path]:
    return write_manifest


@pytest.fixture
def fake_git():
    """GitClient mock with harmless defaults."""
    git = Mock(spec=GitClient)
    git.is_inside_work_tree.return_value = True
    git.staged_files.return_value = []
    git.add.return_value = GitResult(True, "", "", 0)
    git.status_porcelain.return_value = []
    git.status_short.return_value = []
    git.last_commit_timestamp.return_value = None
    git.fetch.return_value = GitResult(True, "", "", 0)
    git.behind_count.return_value = None
    return git


@pytest.fixture
def make_context(tmp_path, fake_git):
    """Build a CheckContext over tmp_path with a mocked git client."""

    def _make(config: Optional[Dict[str, Any]] = None,
              staged: Optional[List[StagedFile]] = None,
              now: float = 1_700_000_000.0,
              root: Optional[Path] = None) -> CheckContext:
        if staged is not None:
            fake_git.staged_files.return_value = list(staged)
        root = root or tmp_path
        return CheckContext(
            repo_root=root,
            project_dir=root,
            config=HookConfig.from_dict(config or {}),
            git=fake_git,
            clock=lambda: now,
        )

    return _make
