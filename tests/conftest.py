"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Branches created:
    - main: checked out, pushed
    - feature/merged: merged into main, pushed
    - feature/wip: unmerged, pushed
    - feature/local-only: unmerged, never pushed
    - feature/remote-only: pushed, then deleted locally

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author, committer=author)

    # Ensure we're on main branch
    if "main" not in local_repo.heads:
        local_repo.create_head("main")
    main_branch = local_repo.heads.main
    main_branch.checkout()
    if "master" in local_repo.heads:
        local_repo.delete_head("master", force=True)

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    def create_branch(name: str, push: bool = True, merge: bool = False) -> None:
        """Create a branch off main with one commit."""
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        test_file = local_path / f"{name.replace('/', '_')}.txt"
        test_file.write_text(f"{name} content")
        local_repo.index.add([test_file.name])
        local_repo.index.commit(f"Add {name}", author=author, committer=author)

        if push:
            origin.push(name)
        if merge:
            main_branch.checkout()
            local_repo.git.merge(name, "--no-ff")
            origin.push("main")

    create_branch("feature/merged", merge=True)
    create_branch("feature/wip")
    create_branch("feature/local-only", push=False)
    create_branch("feature/remote-only")
    main_branch.checkout()
    local_repo.delete_head("feature/remote-only", force=True)

    origin.fetch()

    yield local_path, remote_path


@pytest.fixture
def local_repo(test_env: tuple[Path, Path]) -> Repo:
    """GitPython handle on the local test repository."""
    local_path, _ = test_env
    return Repo(local_path)
