"""Branch references and candidate selection."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from branchsweep.log import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = "\x00"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_LOCAL_REF = re.compile(r"^(?:refs/)?heads/(?P<name>.+)$")
_REMOTE_REF = re.compile(r"^(?:refs/)?remotes/(?P<remote>[^/]+)/(?P<name>.+)$")
_REMOTE_PREFIX = re.compile(r"^(?:refs/)?remotes/")


@dataclass(frozen=True)
class BranchRef:
    """A local branch or a remote-tracking branch."""

    ref: str
    branch_name: str
    remote: Optional[str] = None
    last_commit_date: Optional[datetime] = None

    @property
    def is_local(self) -> bool:
        """Whether this is a local branch rather than a remote-tracking one."""
        return self.remote is None

    @property
    def origin(self) -> str:
        """Name of the place the branch lives: ``local`` or the remote name."""
        return "local" if self.remote is None else self.remote


class CandidateMode(Enum):
    """Which branches are offered for deletion."""

    ALL = "all"
    MERGED = "merged"


def parse_commit_date(value: str) -> Optional[datetime]:
    """Parse git's ``iso`` date format, returning None when it does not parse."""
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError:
        return None


def split_remote_ref(refname: str, remotes: Iterable[str] = ()) -> Optional[tuple[str, str]]:
    """Split a remote-tracking ref into ``(remote, branch_name)``.

    Remote names may contain ``/``, so configured remotes are matched longest
    first. Without a matching remote the first path segment is the remote.
    """
    prefix = _REMOTE_PREFIX.match(refname)
    if not prefix:
        return None
    rest = refname[prefix.end() :]
    for remote in sorted(remotes, key=len, reverse=True):
        if rest.startswith(f"{remote}/") and len(rest) > len(remote) + 1:
            return remote, rest[len(remote) + 1 :]
    match = _REMOTE_REF.match(refname)
    if not match:
        return None
    return match.group("remote"), match.group("name")


def parse_ref_line(line: str, remotes: Iterable[str] = ()) -> Optional[BranchRef]:
    """Parse one ``refname<NUL>committerdate`` line.

    Args:
        line: A line of the ref listing
        remotes: Configured remote names, used to split remote-tracking refs

    Returns None for lines that are neither ``heads/<name>`` nor
    ``remotes/<remote>/<name>``.
    """
    refname, _, date_field = line.partition(FIELD_SEPARATOR)
    refname = refname.strip()

    last_commit_date = None
    if date_field.strip():
        last_commit_date = parse_commit_date(date_field)

    match = _LOCAL_REF.match(refname)
    if match:
        branch = BranchRef(ref=refname, branch_name=match.group("name"), last_commit_date=last_commit_date)
    else:
        remote_parts = split_remote_ref(refname, remotes)
        if remote_parts is None:
            return None
        remote, branch_name = remote_parts
        branch = BranchRef(
            ref=refname,
            branch_name=branch_name,
            remote=remote,
            last_commit_date=last_commit_date,
        )

    if date_field.strip() and last_commit_date is None:
        logger.warning("Could not parse commit date %r for %s", date_field.strip(), refname)
    return branch


def parse_refs(lines: Iterable[str], remotes: Iterable[str] = ()) -> list[BranchRef]:
    """Parse listing lines, skipping (and reporting) the ones that are not branches."""
    remotes = list(remotes)
    branches = []
    for line in lines:
        if not line.strip():
            continue
        branch = parse_ref_line(line, remotes)
        if branch is None:
            logger.warning("Skipping unrecognized ref: %r", line)
            continue
        branches.append(branch)
    return branches


def _is_symbolic_head(branch: BranchRef) -> bool:
    # refs/remotes/<remote>/HEAD points at another remote-tracking branch
    return not branch.is_local and branch.branch_name == "HEAD"


def _select_all(refs: Sequence[BranchRef], merged: frozenset[str]) -> list[BranchRef]:
    return list(refs)


def _select_merged(refs: Sequence[BranchRef], merged: frozenset[str]) -> list[BranchRef]:
    return [branch for branch in refs if branch.ref in merged]


_SELECTORS = {
    CandidateMode.ALL: _select_all,
    CandidateMode.MERGED: _select_merged,
}


def select_candidates(
    refs: Sequence[BranchRef],
    mode: CandidateMode = CandidateMode.ALL,
    merged: Iterable[str] = (),
    protected: Iterable[str] = (),
) -> list[BranchRef]:
    """Pick the branches that may be deleted.

    Args:
        refs: All collected branches
        mode: Selection strategy
        merged: Ref paths already merged, used by ``CandidateMode.MERGED``
        protected: Ref paths that are never candidates (e.g. the checked-out branch)
    """
    protected_refs = set(protected)
    selected = _SELECTORS[mode](refs, frozenset(merged))
    return [branch for branch in selected if branch.ref not in protected_refs and not _is_symbolic_head(branch)]
