"""Git repository operations."""

import shlex
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from rich.console import Console
from rich.markup import escape

from branchsweep.config import Settings
from branchsweep.log import get_logger

logger = get_logger(__name__)
console = Console()

REF_FORMAT = "--format=%(refname)%00%(committerdate:iso)"
BRANCH_NAMESPACES = ("refs/heads", "refs/remotes")


class GitError(Exception):
    """Git operation error."""

    def __init__(self, message: str, command: Optional[Sequence[str]] = None, status: Optional[int] = None) -> None:
        """Initialize error.

        Args:
            message: Error message
            command: The git command that failed, if any
            status: Exit status of the failed command, if any
        """
        super().__init__(message)
        self.command = list(command) if command is not None else None
        self.status = status


def format_command(args: Sequence[str]) -> str:
    """Render a git command line for display."""
    return shlex.join(["git", *args])


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path, settings: Optional[Settings] = None) -> None:
        """Initialize repository."""
        self.settings = settings or Settings()
        try:
            self.repo: Repo = Repo(path)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    def run(self, *args: str) -> str:
        """Run a git command in the repository and return its output.

        Raises:
            GitError: If git exits with a nonzero status
        """
        if self.settings.debug:
            logger.debug("+ %s", format_command(args))
        try:
            return self.repo.git.execute(["git", *args])
        except GitCommandError as err:
            status = err.status if isinstance(err.status, int) else None
            stderr = (err.stderr or "").strip()
            message = f"Command `{format_command(args)}` failed with exit code {err.status}"
            if stderr:
                message = f"{message}: {stderr}"
            raise GitError(message, command=["git", *args], status=status) from err

    def run_destructive(self, *args: str) -> None:
        """Run a command that changes branches, or only show it in dry run mode."""
        if self.settings.dry_run:
            if self.settings.debug:
                logger.debug("+ %s", format_command(args))
            console.print(f"[dim]dry run:[/dim] {escape(format_command(args))}", markup=True, highlight=False)
            return
        self.run(*args)

    def remote_names(self) -> list[str]:
        """Names of the configured remotes."""
        return [remote.name for remote in self.repo.remotes]

    def fetch_and_prune(self) -> None:
        """Fetch every remote and prune its deleted branches.

        A remote that fails to fetch is reported and skipped.
        """
        for name in self.remote_names():
            logger.info("Fetching %s", name)
            try:
                self.run("fetch", "--prune", name)
            except GitError as err:
                logger.warning("Failed to fetch %s: %s", name, err)

    def list_refs(self) -> list[str]:
        """List local and remote-tracking branches as ``refname<NUL>committerdate`` lines."""
        output = self.run("for-each-ref", REF_FORMAT, *BRANCH_NAMESPACES)
        if self.settings.debug:
            logger.debug("Raw ref listing:\n%s", output.replace("\x00", " | "))
        return output.splitlines()

    def list_merged_refs(self, target: str = "HEAD") -> set[str]:
        """Ref paths of the branches whose tips are reachable from ``target``."""
        output = self.run("for-each-ref", "--format=%(refname)", f"--merged={target}", *BRANCH_NAMESPACES)
        return {line.strip() for line in output.splitlines() if line.strip()}

    def get_current_ref(self) -> Optional[str]:
        """Full ref path of the checked-out branch, or None on a detached HEAD."""
        try:
            return self.repo.active_branch.path
        except TypeError:
            # Detached HEAD, nothing to protect
            return None

    def delete_local_branches(self, names: Sequence[str]) -> None:
        """Delete local branches in a single command."""
        if names:
            self.run_destructive("branch", "-D", *names)

    def delete_remote_branches(self, remote: str, names: Sequence[str]) -> None:
        """Delete branches on ``remote`` in a single push."""
        if names:
            self.run_destructive("push", remote, "--delete", *names)
