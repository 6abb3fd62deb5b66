"""Command line interface for branchsweep."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from branchsweep.config import Settings
from branchsweep.deleter import ask_yes_no, create_plan_table, execute_plan, plan_deletions
from branchsweep.editor import EditorError, UnknownBranchError, edit_and_get_preserved_set
from branchsweep.git import GitError, GitRepo
from branchsweep.listing import render_listing
from branchsweep.log import configure_logging
from branchsweep.refs import BranchRef, CandidateMode, parse_refs, select_candidates

app = typer.Typer(help="Interactive git branch cleanup tool")
console = Console()

PathOption = Annotated[Path, typer.Option(help="Path to git repository")]
FastOption = Annotated[bool, typer.Option("--fast", "-f", help="Skip fetching and pruning remotes")]
StaleOption = Annotated[bool, typer.Option("--stale", "-s", help="Group branches by age of their last commit")]
MergedOption = Annotated[
    bool, typer.Option("--merged", "-m", help="Only offer branches already merged into the current HEAD")
]


def get_repo(path: Path, settings: Settings) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path, settings)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def collect_candidates(repo: GitRepo, fast: bool, merged: bool) -> tuple[list[BranchRef], list[BranchRef]]:
    """Collect all branches and the deletion candidates among them."""
    if not fast:
        repo.fetch_and_prune()

    refs = parse_refs(repo.list_refs(), repo.remote_names())
    mode = CandidateMode.MERGED if merged else CandidateMode.ALL
    merged_refs = repo.list_merged_refs() if mode is CandidateMode.MERGED else set()
    current = repo.get_current_ref()
    candidates = select_candidates(refs, mode, merged=merged_refs, protected=[current] if current else [])
    return refs, candidates


@app.command(name="list")
def list_branches(
    path: PathOption = Path("."),
    fast: FastOption = False,
    stale: StaleOption = False,
    merged: MergedOption = False,
) -> None:
    """Print the branch listing that `clean` would open in the editor."""
    settings = Settings.from_env()
    configure_logging(settings.debug)
    repo = get_repo(path, settings)

    try:
        refs, candidates = collect_candidates(repo, fast, merged)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    document = render_listing(candidates, stale=stale, now=datetime.now(timezone.utc), known=refs)
    console.print(document, markup=False, highlight=False, soft_wrap=True, end="")


@app.command()
def clean(
    path: PathOption = Path("."),
    fast: FastOption = False,
    stale: StaleOption = False,
    merged: MergedOption = False,
) -> None:
    """Pick the branches to keep in your editor and delete the rest."""
    settings = Settings.from_env()
    configure_logging(settings.debug)
    repo = get_repo(path, settings)

    try:
        refs, candidates = collect_candidates(repo, fast, merged)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    document = render_listing(candidates, stale=stale, now=datetime.now(timezone.utc), known=refs)
    try:
        preserved = edit_and_get_preserved_set(document, candidates, settings.editor)
    except (EditorError, UnknownBranchError) as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        print("[yellow]No branches were deleted[/yellow]")
        raise typer.Exit(code=1) from err

    plan = plan_deletions(candidates, preserved)
    if not plan:
        console.print(
            Panel(
                "[yellow]Nothing to delete[/yellow]",
                style="yellow",
                padding=(0, 2),
                expand=False,
            )
        )
        raise typer.Exit(code=1)

    console.print()
    console.print(create_plan_table(plan))
    console.print()
    if not ask_yes_no(f"Delete {len(plan)} branch(es)?"):
        console.print("\n[yellow]Operation cancelled[/yellow]")
        return

    try:
        execute_plan(plan, repo)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    if settings.dry_run:
        console.print(f"\n[yellow]Dry run: {len(plan)} branch(es) would have been deleted[/yellow]")
    else:
        console.print(f"\n[green]Successfully deleted {len(plan)} branch(es)[/green]")


if __name__ == "__main__":
    app()
