"""Tests for collecting branches from a repository."""

import logging
from pathlib import Path

import pytest
from git import Repo

from branchsweep.config import Settings
from branchsweep.git import GitError, GitRepo
from branchsweep.refs import parse_refs


def test_open_non_repository(tmp_path: Path) -> None:
    """Test that a directory outside git is rejected."""
    with pytest.raises(GitError):
        GitRepo(tmp_path)


def test_list_refs(test_env: tuple[Path, Path]) -> None:
    """Test that local and remote-tracking branches are listed with dates."""
    local_path, _ = test_env
    refs = parse_refs(GitRepo(local_path).list_refs())
    by_ref = {branch.ref: branch for branch in refs}

    assert set(by_ref) == {
        "refs/heads/main",
        "refs/heads/feature/merged",
        "refs/heads/feature/wip",
        "refs/heads/feature/local-only",
        "refs/remotes/origin/main",
        "refs/remotes/origin/feature/merged",
        "refs/remotes/origin/feature/wip",
        "refs/remotes/origin/feature/remote-only",
    }
    assert by_ref["refs/remotes/origin/feature/wip"].remote == "origin"
    assert by_ref["refs/heads/feature/local-only"].is_local
    assert all(branch.last_commit_date is not None for branch in refs)


def test_list_merged_refs(test_env: tuple[Path, Path]) -> None:
    """Test that merged refs include merged branches and exclude unmerged ones."""
    local_path, _ = test_env
    merged = GitRepo(local_path).list_merged_refs()
    assert "refs/heads/feature/merged" in merged
    assert "refs/remotes/origin/feature/merged" in merged
    assert "refs/heads/feature/wip" not in merged
    assert "refs/remotes/origin/feature/remote-only" not in merged


def test_current_ref(test_env: tuple[Path, Path], local_repo: Repo) -> None:
    """Test the checked-out branch and the detached HEAD case."""
    local_path, _ = test_env
    repo = GitRepo(local_path)
    assert repo.get_current_ref() == "refs/heads/main"

    local_repo.git.checkout("--detach")
    assert repo.get_current_ref() is None


def test_fetch_and_prune_removes_gone_branches(test_env: tuple[Path, Path]) -> None:
    """Test that fetching prunes branches deleted on the remote."""
    local_path, remote_path = test_env
    Repo(remote_path).git.branch("-D", "feature/remote-only")

    repo = GitRepo(local_path)
    repo.fetch_and_prune()

    refs = {branch.ref for branch in parse_refs(repo.list_refs())}
    assert "refs/remotes/origin/feature/remote-only" not in refs


def test_fetch_failure_does_not_stop_other_remotes(
    test_env: tuple[Path, Path], local_repo: Repo, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that a broken remote is reported and the others are still fetched."""
    local_path, remote_path = test_env
    local_repo.create_remote("aaa-broken", url=str(local_path.parent / "missing"))
    Repo(remote_path).git.branch("new-on-remote", "main")

    repo = GitRepo(local_path)
    with caplog.at_level(logging.WARNING, logger="branchsweep"):
        repo.fetch_and_prune()

    assert "Failed to fetch aaa-broken" in caplog.text
    refs = {branch.ref for branch in parse_refs(repo.list_refs())}
    assert "refs/remotes/origin/new-on-remote" in refs


def test_debug_echoes_commands(test_env: tuple[Path, Path], caplog: pytest.LogCaptureFixture) -> None:
    """Test that debug mode logs each command and the raw listing."""
    local_path, _ = test_env
    repo = GitRepo(local_path, Settings(debug=True))
    with caplog.at_level(logging.DEBUG, logger="branchsweep"):
        repo.list_refs()

    assert "+ git for-each-ref" in caplog.text
    assert "Raw ref listing" in caplog.text
