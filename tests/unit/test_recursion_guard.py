"""Tests for the recursion guard."""

from unittest.mock import Mock

import psutil
import pytest

from rbhooks.services.recursion_guard import (
    ACTIVE_ENV_VAR,
    child_environment,
    cmdline_runs_pipeline,
    find_pipeline_ancestor,
    is_marked_active,
    is_nested_invocation,
    script_invokes_pipeline,
)


class TestScriptInvokesPipeline:
    """Detection of build scripts that call back into the hook."""

    @pytest.mark.parametrize("command", [
        "rb_buildapps",
        "rb_precommit && echo done",
        "rbhooks build",
        "rbhooks run",
        "python -m rbhooks buildapps",
        "node scripts/build-react-apps.js",
    ])
    def test_recursive_commands(self, command):
        assert script_invokes_pipeline(command) is True

    @pytest.mark.parametrize("command", [
        "react-scripts build",
        "vite build && rb_checklowercase",
        "rbhooks show-config",
        "my_rb_buildapps_wrapper",
        "",
    ])
    def test_safe_commands(self, command):
        assert script_invokes_pipeline(command) is False


class TestCmdline:

    def test_entry_point(self):
        assert cmdline_runs_pipeline(["/usr/bin/python3", "/venv/bin/rb_precommit"])

    def test_dispatcher_subcommand(self):
        assert cmdline_runs_pipeline(["/venv/bin/rbhooks", "build", "--all"])
        assert not cmdline_runs_pipeline(["/venv/bin/rbhooks", "install"])

    def test_unrelated_process(self):
        assert not cmdline_runs_pipeline(["git", "commit", "-m", "wip"])
        assert not cmdline_runs_pipeline([])


class TestEnvironmentMarker:

    def test_child_environment_sets_marker(self):
        env = child_environment({"PATH": "/bin"})
        assert env == {"PATH": "/bin", ACTIVE_ENV_VAR: "1"}

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("0", False), ("", False)])
    def test_is_marked_active(self, value, expected):
        assert is_marked_active({ACTIVE_ENV_VAR: value}) is expected

    def test_marker_alone_means_nested(self):
        process = Mock()
        assert is_nested_invocation({ACTIVE_ENV_VAR: "1"}, process) is True
        process.parents.assert_not_called()


class TestAncestorScan:
    """psutil-based detection of a running pipeline."""

    def _process(self, cmdline, pid=100):
        process = Mock(spec=psutil.Process)
        process.pid = pid
        process.cmdline.return_value = cmdline
        return process

    def test_finds_pipeline_ancestor(self):
        current = Mock(spec=psutil.Process)
        current.parents.return_value = [
            self._process(["npm", "run", "build"], pid=200),
            self._process(["/venv/bin/rb_precommit"], pid=300),
        ]
        assert find_pipeline_ancestor(current) == 300
        assert is_nested_invocation({}, current) is True

    def test_no_pipeline_ancestor(self):
        current = Mock(spec=psutil.Process)
        current.parents.return_value = [self._process(["bash"]), self._process(["sshd"])]
        assert find_pipeline_ancestor(current) is None
        assert is_nested_invocation({}, current) is False

    def test_inaccessible_ancestors_are_skipped(self):
        hidden = Mock(spec=psutil.Process)
        hidden.pid = 1
        hidden.cmdline.side_effect = psutil.AccessDenied(1)
        current = Mock(spec=psutil.Process)
        current.parents.return_value = [hidden]
        assert find_pipeline_ancestor(current) is None

    def test_vanished_process(self):
        current = Mock(spec=psutil.Process)
        current.parents.side_effect = psutil.NoSuchProcess(42)
        assert find_pipeline_ancestor(current) is None
