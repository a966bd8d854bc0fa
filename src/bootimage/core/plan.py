"""
Turn a parsed command into the cargo and runner invocations.

Nothing is executed here. The plan lists the argument vectors an executor
would run, with configured defaults applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bootimage.core.args import Args
from bootimage.core.command import WITH_ARGS, Command
from bootimage.core.config import Config

IMAGE_PLACEHOLDER = "{}"

# Characters that never need quoting
SAFE_CHARS = frozenset("-_./=@:,{}+")


@dataclass
class Plan:
    """Argument vectors for one bootimage invocation."""

    subcommand: str
    cargo: list[str]
    runner: list[str] | None = None
    image: Path | None = None  # None when the binary name is unknown

    def render(self) -> str:
        """Shell-quoted command lines, cargo first."""
        lines = [quote_join(self.cargo)]
        if self.runner is not None:
            lines.append(quote_join(self.runner))
        return "\n".join(lines)


def make_plan(command: Command, config: Config, cwd: Path | None = None) -> Plan:
    """Build the plan for a build, run or test command.

    Injects config.default_target into the command's Args when the user did
    not pass --target. Raises ValueError for commands without Args.
    """
    if command.kind not in WITH_ARGS:
        raise ValueError(f"cannot plan {command.kind!r} command")
    args = command.args

    if args.target is None and config.default_target is not None:
        args.set_target(config.default_target)

    if command.kind == "test":
        cargo = ["cargo", "test", "--no-run", *args.cargo_args]
    else:
        cargo = ["cargo", "build", *args.cargo_args]

    if command.kind == "build":
        return Plan("build", cargo)

    if command.kind == "test":
        # {} is filled per test binary by the executor
        runner = config.runner + (config.test_args or []) + args.run_args
        return Plan("test", cargo, runner)

    image = image_path(args, config, cwd)
    runner = config.runner
    if image is not None:
        runner = [word.replace(IMAGE_PLACEHOLDER, str(image)) for word in runner]
    runner += (config.run_args or []) + args.run_args
    return Plan("run", cargo, runner, image)


def image_path(args: Args, config: Config, cwd: Path | None = None) -> Path | None:
    """Where the disk image for the selected binary ends up.

    <target dir>/[<target>/]<debug|release>/bootimage-<bin>.bin
    """
    bin_name = args.bin_name or config.package_name
    if not bin_name:
        return None

    manifest = args.manifest_path or config.manifest_path
    root = manifest.parent if manifest is not None else (cwd or Path.cwd())
    out = root / "target"
    if args.target:
        # A target given as a JSON spec file is named after its stem
        out = out / (Path(args.target).stem if args.target.endswith(".json") else args.target)
    out = out / ("release" if args.release else "debug")
    return out / f"bootimage-{bin_name}.bin"


def quote_word(word: str) -> str:
    """Quote a word for display, using single quotes only when needed."""
    if not word:
        return "''"
    if all((c.isascii() and c.isalnum()) or c in SAFE_CHARS for c in word):
        return word
    return "'" + word.replace("'", "'\\''") + "'"


def quote_join(words: list[str]) -> str:
    return " ".join(quote_word(w) for w in words)
