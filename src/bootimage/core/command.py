"""Parse result for the bootimage command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from bootimage.core.args import Args

Kind = Literal[
    "build",
    "run",
    "test",
    "build-help",
    "run-help",
    "test-help",
    "help",
    "version",
    "no-subcommand",
]

# Kinds that carry parsed Args
WITH_ARGS = frozenset({"build", "run", "test"})


@dataclass(frozen=True)
class Command:
    """Outcome of parsing the full argument vector.

    - build/run/test: args holds the parsed options
    - build-help/run-help/test-help: help scoped to a subcommand
    - help/version: top-level requests
    - no-subcommand: first token missing or not recognized
    """

    kind: Kind
    args: Args | None = None

    def __post_init__(self) -> None:
        if (self.args is not None) != (self.kind in WITH_ARGS):
            raise ValueError(f"{self.kind!r} command cannot carry args={self.args!r}")

    @property
    def subcommand(self) -> str | None:
        """build, run or test for commands that name one."""
        if self.kind == "no-subcommand":
            return None
        base = self.kind.removesuffix("-help")
        return base if base in WITH_ARGS else None

    def __repr__(self) -> str:
        if self.args is None:
            return f"Command({self.kind!r})"
        return f"Command({self.kind!r}, {self.args!r})"
