"""Tests for the git situation provider."""

import subprocess
from unittest.mock import patch

import pytest

from constants import Constants
from repository.git import GitSituationProvider, run_git
from versioning.errors import RepositoryError

COMMIT = "0123456789abcdef0123456789abcdef01234567"


def fake_git(responses):
    """Build a command runner answering from {first two args: (returncode, stdout)}."""
    calls = []

    def run(args, cwd):
        calls.append(args)
        for prefix, answer in responses.items():
            if tuple(args[:len(prefix)]) == prefix:
                return answer
        raise AssertionError(f"git called in weird way: {args}")

    run.calls = calls
    return run


def responses(commit=(0, COMMIT + "\n"), branch=(0, "main\n"), tags=(0, ""), status=(0, "")):
    """Default answers for a clean checkout of main."""
    return {
        ("rev-parse", "--show-toplevel"): (0, "/repo\n"),
        ("rev-parse", "--verify"): commit,
        ("symbolic-ref",): branch,
        ("tag", "--points-at"): tags,
        ("status", "--porcelain"): status,
    }


class TestGitSituationProvider:
    """Situation snapshots from git output."""

    def test_branch_checkout(self):
        provider = GitSituationProvider("/repo", run_command=fake_git(responses()))
        situation = provider.situation()
        assert situation.head_commit == COMMIT
        assert situation.head_branch == "main"
        assert situation.head_tags == frozenset()
        assert situation.dirty is False

    def test_detached_head_with_tags(self):
        run = fake_git(responses(branch=(1, ""), tags=(0, "v1.0.0\nv1.0.1\n")))
        situation = GitSituationProvider("/repo", run_command=run).situation()
        assert situation.is_detached
        assert situation.head_tags == frozenset({"v1.0.0", "v1.0.1"})

    def test_dirty(self):
        run = fake_git(responses(status=(0, " M pom.xml\n")))
        assert GitSituationProvider("/repo", run_command=run).situation().dirty is True

    def test_empty_repository(self):
        run = fake_git(responses(commit=(1, "")))
        situation = GitSituationProvider("/repo", run_command=run).situation()
        assert situation.head_commit == Constants.NO_COMMIT
        assert situation.has_commit is False
        assert situation.head_branch is None
        assert situation.head_tags == frozenset()
        assert not any(args[0] == "tag" for args in run.calls)

    def test_not_a_repository(self):
        run = fake_git({("rev-parse", "--show-toplevel"): (128, "")})
        with pytest.raises(RepositoryError):
            GitSituationProvider("/tmp", run_command=run).situation()

    def test_work_tree_root(self):
        provider = GitSituationProvider("/repo/module", run_command=fake_git(responses()))
        assert provider.work_tree_root() == "/repo"


class TestRunGit:
    """Subprocess wrapper."""

    @patch("repository.git.subprocess.run")
    def test_returns_code_and_stdout(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["git"], 0, stdout="abc\n", stderr="")
        assert run_git(["rev-parse", "HEAD"], "/repo") == (0, "abc\n")
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "rev-parse", "HEAD"]
        assert kwargs["cwd"] == "/repo"

    @patch("repository.git.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_missing_git(self, _mock_run):
        with pytest.raises(RepositoryError):
            run_git(["status"], "/repo")

    @patch("repository.git.subprocess.run", side_effect=subprocess.TimeoutExpired(["git"], 10))
    def test_timeout(self, _mock_run):
        with pytest.raises(RepositoryError):
            run_git(["status"], "/repo")
