"""Letting the user pick the branches to keep in their editor."""

import os
import shlex
import subprocess
import tempfile
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from branchsweep.listing import parse_listing
from branchsweep.log import get_logger
from branchsweep.refs import BranchRef

logger = get_logger(__name__)


class UnknownBranchError(ValueError):
    """The edited listing names branches that were never offered."""

    def __init__(self, lines: list[str]) -> None:
        """Initialize error.

        Args:
            lines: The offending lines, in file order
        """
        self.lines = lines
        listed = "\n".join(f"  {line}" for line in lines)
        super().__init__(f"Unrecognized branch(es) in the edited list:\n{listed}")


class EditorError(RuntimeError):
    """The editor command could not be started."""


@contextmanager
def listing_file(document: str) -> Iterator[Path]:
    """Write ``document`` to a new temporary file and remove it afterwards."""
    fd, name = tempfile.mkstemp(prefix=f"branchsweep-{uuid.uuid4().hex}-", suffix=".txt")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(document)
        yield path
    finally:
        path.unlink(missing_ok=True)


def launch_editor(path: Path, editor: str) -> None:
    """Open ``path`` in ``editor`` and wait for it to exit, whatever its status.

    Raises:
        EditorError: If the editor command cannot be parsed or started
    """
    try:
        command = [*shlex.split(editor), str(path)]
    except ValueError as err:
        raise EditorError(f"Could not parse editor command {editor!r}: {err}") from err
    if len(command) == 1:
        raise EditorError("No editor configured, set EDITOR")
    logger.debug("Opening editor: %s", shlex.join(command))
    try:
        result = subprocess.run(command, check=False)
    except OSError as err:
        raise EditorError(f"Could not run editor {editor!r}: {err}") from err
    if result.returncode != 0:
        logger.debug("Editor exited with status %d", result.returncode)


def preserved_refs(text: str, candidates: Iterable[BranchRef]) -> set[str]:
    """Ref paths the user kept in the edited listing.

    Raises:
        UnknownBranchError: If any remaining line is not one of the candidates
    """
    known = {branch.ref for branch in candidates}
    kept = parse_listing(text)
    unknown = [line for line in kept if line not in known]
    if unknown:
        raise UnknownBranchError(unknown)
    return set(kept)


def edit_and_get_preserved_set(document: str, candidates: Iterable[BranchRef], editor: str) -> set[str]:
    """Open the listing in the editor and return the ref paths left in it."""
    with listing_file(document) as path:
        launch_editor(path, editor)
        text = path.read_text(encoding="utf-8")
    return preserved_refs(text, candidates)
