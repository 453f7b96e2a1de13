"""Run configuration.

The CLI builds a Config and passes it down, so nothing below it reads
options or the environment.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

DEFAULT_REMOTE = "origin"


class Mode(Enum):
    """What the user asked swagit to do."""

    CHECKOUT = "checkout"
    DELETE = "delete"
    SYNC = "sync"


@dataclass(frozen=True)
class Config:
    """Configuration for one swagit run."""

    path: Path = Path(".")
    mode: Mode = Mode.CHECKOUT
    remote: str = DEFAULT_REMOTE
    debug: bool = False

    @classmethod
    def from_options(
        cls,
        path: Path,
        delete: bool = False,
        sync: bool = False,
        remote: str = DEFAULT_REMOTE,
        debug: bool = False,
    ) -> "Config":
        """Build a config from command line flags. ``--delete`` wins over ``--sync``."""
        if delete:
            mode = Mode.DELETE
        elif sync:
            mode = Mode.SYNC
        else:
            mode = Mode.CHECKOUT
        return cls(path=path, mode=mode, remote=remote.strip() or DEFAULT_REMOTE, debug=debug)
