"""Installing, repairing and removing the hooks in real repositories."""

import json
import os
import shutil

import pytest

from rbhooks.services.installer import (
    HOOK_MARKER,
    HookInstaller,
    fix_hooks,
    install,
    render_hook_script,
    uninstall,
)
from rbhooks.types.enums import HookType, InstallTarget

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]

OLD_HUSKY_HOOK = '#!/usr/bin/env sh\n. "$(dirname -- "$0")/_/husky.sh"\n\nnpm run build:dev\n'


def _scripts(project):
    return json.loads((project / "package.json").read_text()).get("scripts", {})


class TestInstall:
    """rb_install."""

    def test_git_hooks_directory(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app", "scripts": {"build": "vite build"}})
        report = install(git_repo)
        hook = git_repo / ".git" / "hooks" / "pre-commit"
        assert report.target is InstallTarget.GIT
        assert hook.read_text() == render_hook_script(".")
        assert os.access(hook, os.X_OK)
        scripts = _scripts(git_repo)
        assert scripts["check-gitignore"] == "rb_checkgitignore"
        assert scripts["check-lowercase"] == "rb_checklowercase"
        assert scripts["git-reminder"] == "rb_gitreminder"
        assert scripts["build"] == "vite build"

    def test_husky_project(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        (git_repo / ".husky").mkdir()
        report = install(git_repo, hook_type=HookType.PRE_PUSH)
        assert report.target is InstallTarget.HUSKY
        assert HOOK_MARKER in (git_repo / ".husky" / "pre-push").read_text()
        assert _scripts(git_repo)["prepare"] == "husky"
        assert any("husky is not a dependency" in warning for warning in report.warnings)

    def test_nested_project_hook_changes_directory(self, git_repo, manifest_factory):
        project = git_repo / "apps" / "web"
        manifest_factory(project, {"name": "web"})
        install(project, target=InstallTarget.GIT)
        hook = (git_repo / ".git" / "hooks" / "pre-commit").read_text()
        assert 'cd "apps/web" || exit 2' in hook

    def test_custom_hook_is_backed_up(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        hook = git_repo / ".git" / "hooks" / "pre-commit"
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text("#!/bin/sh\nnpx lint-staged\n")
        report = install(git_repo)
        assert report.hook_backup is not None
        assert report.hook_backup.read_text() == "#!/bin/sh\nnpx lint-staged\n"
        assert HOOK_MARKER in hook.read_text()

    def test_recursive_build_dev_is_removed(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app", "scripts": {"build:dev": "rb_buildapps"}})
        report = install(git_repo)
        assert report.scripts_removed == ["build:dev"]
        assert "build:dev" not in _scripts(git_repo)

    def test_reminder_prescripts(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app", "scripts": {"dev": "vite", "build": "vite build"}})
        (git_repo / "yarn.lock").write_text("")
        install(git_repo, reminder_prescripts=True)
        scripts = _scripts(git_repo)
        assert scripts["predev"] == "yarn run git-reminder"
        assert scripts["prebuild"] == "yarn run git-reminder"
        assert "pretest" not in scripts

    def test_install_twice_keeps_one_hook(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        install(git_repo)
        second = install(git_repo)
        assert second.hook_backup is None
        assert second.scripts_added == []


class TestUninstall:

    def test_removes_only_rbhooks_artifacts(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app", "scripts": {"lint": "eslint ."}})
        install(git_repo, reminder_prescripts=True)
        custom = git_repo / ".git" / "hooks" / "pre-push"
        custom.write_text("#!/bin/sh\nnpm test\n")

        report = uninstall(git_repo)

        assert not (git_repo / ".git" / "hooks" / "pre-commit").exists()
        assert custom.exists()
        assert [path.name for path in report.skipped_hooks] == ["pre-push"]
        assert _scripts(git_repo) == {"lint": "eslint ."}

    def test_user_edited_script_is_kept(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        install(git_repo)
        data = json.loads((git_repo / "package.json").read_text())
        data["scripts"]["check-lowercase"] = "rb_checklowercase --format json"
        (git_repo / "package.json").write_text(json.dumps(data))
        uninstall(git_repo)
        assert _scripts(git_repo) == {"check-lowercase": "rb_checklowercase --format json"}


class TestFixHooks:

    def test_outdated_husky_hook_is_rewritten(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app", "devDependencies": {"husky": "^9"}})
        hook = git_repo / ".husky" / "pre-commit"
        hook.parent.mkdir()
        hook.write_text(OLD_HUSKY_HOOK)
        report = fix_hooks(git_repo)
        assert [path.name for path in report.fixed_hooks] == ["pre-commit"]
        assert hook.read_text() == render_hook_script(".")
        assert report.warnings == []
        assert "check-gitignore" in _scripts(git_repo)

    def test_custom_git_hook_is_left_alone(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        hook = git_repo / ".git" / "hooks" / "pre-commit"
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text('#!/usr/bin/env sh\nnpx lint-staged\n')
        report = HookInstaller(git_repo).fix_hooks()
        assert report.fixed_hooks == []
        assert hook.read_text() == '#!/usr/bin/env sh\nnpx lint-staged\n'

    def test_current_hook_is_compatible(self, git_repo, manifest_factory):
        manifest_factory(git_repo, {"name": "app"})
        install(git_repo)
        report = fix_hooks(git_repo)
        assert report.fixed_hooks == []
        assert len(report.compatible_hooks) == 1
