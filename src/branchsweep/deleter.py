"""Planning and running branch deletions."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from rich.table import Table

from branchsweep.git import GitRepo
from branchsweep.log import get_logger
from branchsweep.refs import BranchRef

logger = get_logger(__name__)

YES = {"y", "yes"}
NO = {"n", "no"}


@dataclass
class DeletionPlan:
    """Branches to delete, split by where they live."""

    local: list[BranchRef] = field(default_factory=list)
    remote: dict[str, list[BranchRef]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.local) or any(self.remote.values())

    def __len__(self) -> int:
        return len(self.local) + sum(len(branches) for branches in self.remote.values())

    def branches(self) -> list[BranchRef]:
        """All planned branches, local first, then remote by remote name."""
        planned = list(self.local)
        for remote in sorted(self.remote):
            planned.extend(self.remote[remote])
        return planned


def plan_deletions(candidates: Iterable[BranchRef], preserved: set[str]) -> DeletionPlan:
    """Every candidate the user did not keep, grouped for batched deletion."""
    plan = DeletionPlan()
    for branch in sorted(candidates, key=lambda b: b.ref):
        if branch.ref in preserved:
            continue
        if branch.is_local:
            plan.local.append(branch)
        else:
            plan.remote.setdefault(branch.remote, []).append(branch)
    return plan


def create_plan_table(plan: DeletionPlan) -> Table:
    """Table listing every branch in the plan."""
    table = Table(
        title="Branches to Delete",
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Where", style="magenta", justify="center", no_wrap=True)
    table.add_column("Last Commit", style="yellow", no_wrap=True)
    for branch in plan.branches():
        last_commit = branch.last_commit_date.strftime("%Y-%m-%d") if branch.last_commit_date else ""
        table.add_row(branch.ref, branch.origin, last_commit)
    return table


def ask_yes_no(prompt: str, read: Callable[[str], str] = input) -> bool:
    """Ask until the answer is yes or no (any case). End of input counts as no."""
    while True:
        try:
            answer = read(f"{prompt} [y/n] ").strip().lower()
        except EOFError:
            # stdin closed, treat as a decline
            return False
        if answer in YES:
            return True
        if answer in NO:
            return False


def execute_plan(plan: DeletionPlan, repo: GitRepo) -> None:
    """Delete local branches in one batch, then each remote's branches in one push.

    Raises:
        GitError: On the first failing command; later batches are not run
    """
    if plan.local:
        logger.info("Deleting %d local branch(es)", len(plan.local))
        repo.delete_local_branches([branch.branch_name for branch in plan.local])
    for remote in sorted(plan.remote):
        branches = plan.remote[remote]
        if not branches:
            continue
        logger.info("Deleting %d branch(es) on %s", len(branches), remote)
        repo.delete_remote_branches(remote, [branch.branch_name for branch in branches])
