"""Tests for the git-status reminder."""

from rbhooks.checks.git_reminder import GitStatusReminder, hours_since, is_stale
from rbhooks.services.git_client import GitResult
from rbhooks.types.enums import CheckStatus

NOW = 1_700_000_000.0
HOUR = 3600


def test_hours_since():
    assert hours_since(NOW - 2 * HOUR, NOW) == 2.0


def test_threshold_is_exclusive():
    assert is_stale(4.01, 4) is True
    assert is_stale(4.0, 4) is False


class TestGitStatusReminder:
    """The check as run by the pipeline."""

    def test_stale_commit_warns(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - 5 * HOUR)
        result = GitStatusReminder(quiet=True).run(make_context(now=NOW))
        assert result.status is CheckStatus.WARNED
        assert result.bucket("stale")[0].message == "It's been 5.0 hours since your last commit."

    def test_recent_commit_is_a_note(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - 3 * HOUR)
        result = GitStatusReminder(quiet=True).run(make_context(now=NOW))
        assert result.status is CheckStatus.PASSED
        assert result.notes == ["Last commit was 3.0 hours ago."]

    def test_custom_threshold(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - 3 * HOUR)
        context = make_context({"gitReminder": {"settings": {"hoursThreshold": 2}}}, now=NOW)
        result = GitStatusReminder(quiet=True).run(context)
        assert result.bucket("stale")

    def test_zero_threshold_always_reminds(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - HOUR // 2)
        context = make_context({"gitReminder": {"settings": {"hoursThreshold": 0}}}, now=NOW)
        result = GitStatusReminder(quiet=True).run(context)
        assert result.bucket("stale")[0].message == "It's been 0.5 hours since your last commit."

    def test_negative_threshold_uses_default(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - 3 * HOUR)
        context = make_context({"gitReminder": {"settings": {"hoursThreshold": -1}}}, now=NOW)
        result = GitStatusReminder(quiet=True).run(context)
        assert result.bucket("stale") == []

    def test_no_commits_skips_history_checks(self, make_context, fake_git):
        result = GitStatusReminder(quiet=True).run(make_context(now=NOW))
        assert result.status is CheckStatus.PASSED
        assert result.notes == ["No commits found in this repository yet."]
        fake_git.fetch.assert_not_called()

    def test_outside_repository_is_skipped(self, make_context, fake_git):
        fake_git.is_inside_work_tree.return_value = False
        result = GitStatusReminder(quiet=True).run(make_context())
        assert result.status is CheckStatus.SKIPPED

    def test_uncommitted_listing_is_capped(self, make_context, fake_git):
        lines = [f" M src/file{i}.js" for i in range(12)]
        fake_git.status_porcelain.return_value = lines
        fake_git.status_short.return_value = lines
        result = GitStatusReminder(quiet=True).run(make_context())
        finding = result.bucket("uncommitted")[0]
        assert finding.message == "12 file(s) modified"
        detail = finding.detail.splitlines()
        assert len(detail) == 11
        assert detail[-1].strip() == "... and 2 more files"

    def test_behind_upstream(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - HOUR)
        fake_git.behind_count.return_value = 3
        result = GitStatusReminder(quiet=True).run(make_context(now=NOW))
        assert result.bucket("behind")[0].message == "Your branch is behind by 3 commit(s)."
        fake_git.fetch.assert_called_once()

    def test_fetch_failure_is_silent(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - HOUR)
        fake_git.fetch.return_value = GitResult(False, "", "Could not resolve host", 128)
        fake_git.behind_count.return_value = 3
        result = GitStatusReminder(quiet=True).run(make_context(now=NOW))
        assert result.status is CheckStatus.PASSED
        assert result.errors == []
        fake_git.behind_count.assert_not_called()

    def test_fetch_can_be_disabled(self, make_context, fake_git):
        fake_git.last_commit_timestamp.return_value = int(NOW - HOUR)
        fake_git.behind_count.return_value = 1
        context = make_context({"gitReminder": {"settings": {"fetch": False}}}, now=NOW)
        result = GitStatusReminder(quiet=True).run(context)
        fake_git.fetch.assert_not_called()
        assert result.bucket("behind")

    def test_enforcing_reminder_blocks(self, make_context, fake_git, capsys):
        fake_git.status_porcelain.return_value = [" M a.js"]
        fake_git.status_short.return_value = [" M a.js"]
        context = make_context({"gitReminder": {"enforce": True}})
        result = GitStatusReminder().run(context)
        assert result.status is CheckStatus.FAILED
        captured = capsys.readouterr()
        assert "You have uncommitted changes:" in captured.err
        assert "Commit blocked" in captured.err
