"""Runtime settings read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

DEFAULT_EDITOR = "vi"

_FALSE_VALUES = {"", "0", "false", "no", "off"}


def env_flag(value: Optional[str]) -> bool:
    """Interpret an environment variable as a boolean switch."""
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True)
class Settings:
    """Settings shared by every stage of a cleanup run.

    Built once at startup and passed along explicitly.
    """

    debug: bool = False
    dry_run: bool = False
    editor: str = DEFAULT_EDITOR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``DEBUG``, ``DRY_RUN`` and ``EDITOR``.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``
        """
        if environ is None:
            environ = os.environ
        return cls(
            debug=env_flag(environ.get("DEBUG")),
            dry_run=env_flag(environ.get("DRY_RUN")),
            editor=environ.get("EDITOR", "").strip() or DEFAULT_EDITOR,
        )
