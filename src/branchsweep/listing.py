"""Grouping branches and rendering the editable listing."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from branchsweep.refs import BranchRef

COMMENT = "#"
NO_REMOTE_MARKER = f"{COMMENT} no remote"

HEADER = [
    "Branches listed below will be KEPT.",
    "Delete the line of every branch you want to delete, then save and quit.",
    "Lines starting with '#' and text after ' #' are ignored.",
    "Leave the file as it is to keep everything.",
]

_TRAILING_COMMENT = re.compile(r"\s+#.*$")


class StaleBucket(Enum):
    """Age classes for branches, ordered from newest to oldest."""

    ACTIVE = ("Active", 0)
    OLDER_THAN_30_DAYS = ("Older than 30 days", 30)
    OLDER_THAN_90_DAYS = ("Older than 90 days", 90)
    OLDER_THAN_1_YEAR = ("Older than 1 year", 365)

    def __init__(self, title: str, min_days: int) -> None:
        self.title = title
        self.min_days = min_days

    @classmethod
    def for_date(cls, last_commit_date: Optional[datetime], now: datetime) -> "StaleBucket":
        """Pick the bucket for a commit date; undated branches count as oldest."""
        if last_commit_date is None:
            return cls.OLDER_THAN_1_YEAR
        age = now - last_commit_date
        bucket = cls.ACTIVE
        for candidate in cls:
            if age >= timedelta(days=candidate.min_days):
                bucket = candidate
        return bucket


@dataclass
class BranchGroup:
    """Node of the display tree: a heading with subgroups and/or branches."""

    name: Optional[str] = None
    groups: list["BranchGroup"] = field(default_factory=list)
    branches: list[BranchRef] = field(default_factory=list)


def _origin_key(origin: str) -> tuple[int, str]:
    # Local branches first, remotes alphabetically after
    return (0, "") if origin == "local" else (1, origin)


def _by_origin(refs: Iterable[BranchRef]) -> dict[str, list[BranchRef]]:
    origins: dict[str, list[BranchRef]] = {}
    for branch in refs:
        origins.setdefault(branch.origin, []).append(branch)
    return {origin: origins[origin] for origin in sorted(origins, key=_origin_key)}


def _sorted_branches(refs: Iterable[BranchRef]) -> list[BranchRef]:
    return sorted(refs, key=lambda branch: (branch.branch_name, branch.ref))


def group_by_origin(refs: Iterable[BranchRef]) -> list[BranchGroup]:
    """Group branches by where they live, sorted by name inside each group."""
    return [
        BranchGroup(name=origin, branches=_sorted_branches(branches)) for origin, branches in _by_origin(refs).items()
    ]


def group_by_staleness(refs: Iterable[BranchRef], now: datetime) -> list[BranchGroup]:
    """Group branches by origin, then by age bucket. Empty buckets are left out."""
    groups = []
    for origin, branches in _by_origin(refs).items():
        buckets: dict[StaleBucket, list[BranchRef]] = {}
        for branch in branches:
            buckets.setdefault(StaleBucket.for_date(branch.last_commit_date, now), []).append(branch)
        groups.append(
            BranchGroup(
                name=origin,
                groups=[
                    BranchGroup(name=bucket.title, branches=_sorted_branches(buckets[bucket]))
                    for bucket in StaleBucket
                    if bucket in buckets
                ],
            )
        )
    return groups


def _render_group(
    group: BranchGroup, depth: int, without_remote: set[str], lines: list[str]
) -> None:
    if group.name:
        lines.append("")
        lines.append(f"{COMMENT * (depth + 1)} {group.name}")
    for child in group.groups:
        _render_group(child, depth + 1, without_remote, lines)
    for branch in group.branches:
        if branch.ref in without_remote:
            lines.append(f"{branch.ref}  {NO_REMOTE_MARKER}")
        else:
            lines.append(branch.ref)


def local_without_remote(refs: Iterable[BranchRef], known: Iterable[BranchRef]) -> set[str]:
    """Ref paths of local branches with no remote-tracking branch of the same name."""
    remote_names = {branch.branch_name for branch in known if not branch.is_local}
    return {branch.ref for branch in refs if branch.is_local and branch.branch_name not in remote_names}


def render_listing(
    refs: Sequence[BranchRef],
    stale: bool = False,
    now: Optional[datetime] = None,
    known: Optional[Sequence[BranchRef]] = None,
) -> str:
    """Render branches as the text document the user edits.

    Args:
        refs: Branches to list
        stale: Group by age bucket inside each origin
        now: Reference time for age buckets, defaults to the current time
        known: Branches used to decide whether a local branch has a remote
            counterpart, defaults to ``refs``
    """
    if now is None:
        now = datetime.now(timezone.utc)
    groups = group_by_staleness(refs, now) if stale else group_by_origin(refs)
    without_remote = local_without_remote(refs, refs if known is None else known)

    lines = [f"{COMMENT} {text}" for text in HEADER]
    for group in groups:
        _render_group(group, 0, without_remote, lines)
    return "\n".join(lines) + "\n"


def parse_listing(text: str) -> list[str]:
    """Return the ref paths left in an edited listing, in file order."""
    paths = []
    for line in text.splitlines():
        line = _TRAILING_COMMENT.sub("", line).strip()
        if not line or line.startswith(COMMENT):
            continue
        paths.append(line)
    return paths
