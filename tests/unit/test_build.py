"""Tests for project discovery and the build runner."""

from unittest.mock import patch

import pytest

from rbhooks.checks.build import (
    BuildRunner,
    affected_projects,
    discover_projects,
    expand_workspace_members,
    load_project,
    touches_shared_path,
    workspace_patterns,
)
from rbhooks.exceptions import ToolNotFoundError
from rbhooks.models.project import StagedFile
from rbhooks.services.package_manager import PackageManagerRunner, ScriptRunResult
from rbhooks.types.enums import CheckStatus, FileStatus

BUILD_SCRIPT = {"scripts": {"build": "react-scripts build"}}


@pytest.fixture
def workspace(tmp_path, manifest_factory):
    """Root manifest with two buildable members and one without a build script."""
    manifest_factory(tmp_path, {"name": "root", "private": True, "workspaces": ["packages/*"]})
    manifest_factory(tmp_path / "packages" / "a", {"name": "a", **BUILD_SCRIPT})
    manifest_factory(tmp_path / "packages" / "b", {"name": "b", **BUILD_SCRIPT})
    manifest_factory(tmp_path / "packages" / "docs", {"name": "docs", "scripts": {"start": "serve"}})
    return tmp_path


@pytest.fixture
def runner_calls():
    """Patch the package manager so builds succeed without running anything."""
    calls = []

    def fake_run(self, directory, script, timeout=None):
        calls.append(directory.name)
        return ScriptRunResult(True, 0, ["npm", "run", script])

    with patch.object(PackageManagerRunner, "ensure_available", return_value="/usr/bin/npm"), \
            patch.object(PackageManagerRunner, "run_script", fake_run):
        yield calls


class TestWorkspacePatterns:
    """Detection of workspace roots."""

    def test_workspaces_list(self, tmp_path):
        assert workspace_patterns(tmp_path, {"workspaces": ["apps/*"]}) == ["apps/*"]

    def test_workspaces_object(self, tmp_path):
        manifest = {"workspaces": {"packages": ["libs/*"], "nohoist": ["**/x"]}}
        assert workspace_patterns(tmp_path, manifest) == ["libs/*"]

    def test_pnpm_workspace_file(self, tmp_path):
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'apps/*'\n  - '!apps/legacy'\n")
        assert workspace_patterns(tmp_path, {}) == ["apps/*", "!apps/legacy"]

    def test_lerna_without_packages_uses_default(self, tmp_path):
        (tmp_path / "lerna.json").write_text("{\"version\": \"1.0.0\"}")
        assert workspace_patterns(tmp_path, {}) == ["packages/*"]

    def test_plain_project(self, tmp_path):
        assert workspace_patterns(tmp_path, {"name": "app"}) is None


class TestProjects:
    """Member expansion and discovery."""

    def test_expand_sorted_members(self, workspace):
        members = expand_workspace_members(workspace, ["packages/*"], workspace)
        assert [member.relative_dir for member in members] == ["packages/a", "packages/b", "packages/docs"]

    def test_negated_pattern_excludes(self, workspace):
        members = expand_workspace_members(workspace, ["packages/*", "!packages/b"], workspace)
        assert [member.name for member in members] == ["a", "docs"]

    def test_broken_manifest_is_skipped(self, tmp_path):
        (tmp_path / "package.json").write_text("{broken")
        assert load_project(tmp_path, tmp_path) is None

    def test_root_project_relative_dir(self, tmp_path, manifest_factory):
        manifest_factory(tmp_path, {"name": "app"})
        project = load_project(tmp_path, tmp_path)
        assert project.relative_dir == "."
        assert project.display_name == "app"

    def test_discover_react_projects(self, tmp_path, manifest_factory):
        manifest_factory(tmp_path / "web", {"dependencies": {"react": "^18"}, **BUILD_SCRIPT})
        manifest_factory(tmp_path / "api", {"dependencies": {"express": "^4"}, **BUILD_SCRIPT})
        manifest_factory(tmp_path / "web" / "node_modules" / "dep",
                         {"dependencies": {"react": "^18"}, **BUILD_SCRIPT})
        projects = discover_projects(tmp_path, tmp_path, ["react"])
        assert [project.relative_dir for project in projects] == ["web"]


class TestAffectedProjects:

    def test_shared_segment(self):
        assert touches_shared_path(StagedFile("packages/shared/util.js"), ["shared"])
        assert not touches_shared_path(StagedFile("packages/a/shared.js"), ["shared"])

    def test_shared_prefix(self):
        assert touches_shared_path(StagedFile("libs/ui/button.js"), ["libs/ui"])
        assert not touches_shared_path(StagedFile("libs/uikit/button.js"), ["libs/ui"])

    def test_rename_counts_old_path(self, workspace):
        members = expand_workspace_members(workspace, ["packages/*"], workspace)
        staged = [StagedFile("packages/b/x.js", FileStatus.RENAMED, old_path="packages/a/x.js")]
        assert [m.name for m in affected_projects(members, staged, [])] == ["a", "b"]


class TestBuildRunner:
    """The check as run by the pipeline."""

    def test_only_touched_member_is_built(self, workspace, make_context, runner_calls):
        staged = [StagedFile("packages/a/src/app.js", FileStatus.MODIFIED)]
        result = BuildRunner(quiet=True).run(make_context(staged=staged))
        assert result.status is CheckStatus.PASSED
        assert runner_calls == ["a"]

    def test_shared_change_builds_every_member(self, workspace, make_context, runner_calls):
        staged = [StagedFile("shared/theme.js", FileStatus.MODIFIED)]
        BuildRunner(quiet=True).run(make_context(staged=staged))
        assert runner_calls == ["a", "b"]

    def test_all_flag_ignores_staged_files(self, workspace, make_context, runner_calls):
        BuildRunner(quiet=True, only_affected=False).run(make_context(staged=[]))
        assert runner_calls == ["a", "b"]

    def test_untouched_workspace_builds_nothing(self, workspace, make_context, runner_calls):
        staged = [StagedFile("README.md", FileStatus.MODIFIED)]
        result = BuildRunner(quiet=True).run(make_context(staged=staged))
        assert result.status is CheckStatus.PASSED
        assert result.message == "No projects need building."
        assert runner_calls == []

    def test_single_project(self, tmp_path, manifest_factory, make_context, runner_calls):
        manifest_factory(tmp_path, {"name": "app", **BUILD_SCRIPT})
        BuildRunner(quiet=True).run(make_context())
        assert runner_calls == [tmp_path.name]

    @pytest.mark.parametrize("quiet", [True, False])
    def test_runner_follows_quiet_mode(self, tmp_path, manifest_factory, make_context, quiet):
        manifest_factory(tmp_path, {"name": "app", **BUILD_SCRIPT})
        seen = []

        def recording_run(self, directory, script, timeout=None):
            seen.append(self.quiet)
            return ScriptRunResult(True, 0, ["npm", "run", script])

        with patch.object(PackageManagerRunner, "ensure_available", return_value="npm"), \
                patch.object(PackageManagerRunner, "run_script", recording_run):
            BuildRunner(quiet=quiet).run(make_context())
        assert seen == [quiet]

    def test_recursive_script_is_refused(self, tmp_path, manifest_factory, make_context, runner_calls):
        manifest_factory(tmp_path, {"name": "app", "scripts": {"build": "rb_buildapps && vite build"}})
        result = BuildRunner(quiet=True).run(make_context())
        assert runner_calls == []
        assert result.status is CheckStatus.PASSED
        assert "calls the commit hook again" in result.notes[0]

    def test_enforcing_stops_at_first_failure(self, workspace, make_context):
        calls = []

        def failing_run(self, directory, script, timeout=None):
            calls.append(directory.name)
            return ScriptRunResult(False, 1, ["npm", "run", script])

        with patch.object(PackageManagerRunner, "ensure_available", return_value="npm"), \
                patch.object(PackageManagerRunner, "run_script", failing_run):
            result = BuildRunner(quiet=True, only_affected=False).run(make_context())
        assert calls == ["a"]
        assert result.status is CheckStatus.FAILED
        assert result.message == "Build failed for packages/a"

    def test_advisory_mode_builds_everything(self, workspace, make_context):
        calls = []

        def failing_run(self, directory, script, timeout=None):
            calls.append(directory.name)
            return ScriptRunResult(False, 2, ["npm", "run", script])

        context = make_context({"build": {"enforce": False}})
        with patch.object(PackageManagerRunner, "ensure_available", return_value="npm"), \
                patch.object(PackageManagerRunner, "run_script", failing_run):
            result = BuildRunner(quiet=True, only_affected=False).run(context)
        assert calls == ["a", "b"]
        assert result.status is CheckStatus.WARNED
        assert len(result.findings) == 2

    def test_missing_package_manager_is_fatal(self, tmp_path, manifest_factory, make_context):
        manifest_factory(tmp_path, {"name": "app", **BUILD_SCRIPT})
        with patch.object(PackageManagerRunner, "ensure_available", side_effect=ToolNotFoundError("npm")):
            with pytest.raises(ToolNotFoundError):
                BuildRunner(quiet=True).run(make_context())

    def test_configured_package_manager(self, tmp_path, manifest_factory, make_context):
        manifest_factory(tmp_path, {"name": "app", **BUILD_SCRIPT})
        context = make_context({"build": {"settings": {"packageManager": "pnpm", "script": "build"}}})
        managers = []

        def fake_run(self, directory, script, timeout=None):
            managers.append(self.manager.value)
            return ScriptRunResult(True, 0)

        with patch.object(PackageManagerRunner, "ensure_available", return_value="pnpm"), \
                patch.object(PackageManagerRunner, "run_script", fake_run):
            BuildRunner(quiet=True).run(context)
        assert managers == ["pnpm"]
