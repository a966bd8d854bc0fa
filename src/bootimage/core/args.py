"""
Argument parsing for the bootimage front end.

Classifies the subcommand, pulls out the handful of options the wrapper acts
on, and forwards everything else to cargo. Tokens after the first `--` belong
to the runner and are never interpreted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from bootimage.core.command import Command

# Scanner states
SCANNING_OPTIONS = "scanning-options"
FORWARDING_RUN_ARGS = "forwarding-run-args"

# Options that take a value and may appear at most once: flag -> Args field
VALUE_OPTIONS = {
    "--bin": "bin_name",
    "--target": "target",
    "--manifest-path": "manifest_path",
}


class ArgsError(ValueError):
    """Base class for argument errors."""


class UsageError(ArgsError):
    """The user supplied an invalid argument vector."""


class DuplicateOption(UsageError):
    def __init__(self, option: str):
        super().__init__(f"multiple arguments of same type provided: {option}")
        self.option = option


class InvalidPath(UsageError):
    def __init__(self, path: str, reason: str | None = None):
        message = f"--manifest-path invalid: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.path = path


class IllegalCombination(UsageError):
    """An option was combined with a subcommand that does not accept it."""


class AlreadySet(ArgsError):
    """A mutator was called for a field that already holds a value."""

    def __init__(self, field_name: str):
        super().__init__(f"{field_name} is already set")
        self.field = field_name


@dataclass
class Args:
    """Options parsed for build, run and test."""

    cargo_args: list[str] = field(default_factory=list)
    """All arguments passed to cargo."""

    run_args: list[str] = field(default_factory=list)
    """All arguments passed to the runner."""

    manifest_path: Path | None = None  # also present in cargo_args
    bin_name: str | None = None  # also present in cargo_args
    target: str | None = None  # also present in cargo_args
    release: bool = False  # also present in cargo_args

    def set_target(self, target: str) -> None:
        """Set the target triple and forward it to cargo.

        Raises AlreadySet if a target was already given.
        """
        if self.target is not None:
            raise AlreadySet("target")
        self.target = target
        self.cargo_args.extend(["--target", target])

    def set_bin_name(self, bin_name: str) -> None:
        """Set the binary name and forward it to cargo.

        Raises AlreadySet if a binary name was already given.
        """
        if self.bin_name is not None:
            raise AlreadySet("bin_name")
        self.bin_name = bin_name
        self.cargo_args.extend(["--bin", bin_name])


def parse_args(argv: list[str], cwd: Path | None = None) -> Command:
    """Classify the argument vector (program name excluded).

    A relative --manifest-path is resolved against cwd (default: process cwd).
    """
    first = argv[0] if argv else None
    rest = argv[1:]

    if first == "build":
        return parse_build_args(rest, cwd)

    if first == "run":
        command = parse_build_args(rest, cwd)
        if command.kind == "build":
            return Command("run", command.args)
        if command.kind == "build-help":
            return Command("run-help")
        return command

    if first == "test":
        command = parse_build_args(rest, cwd)
        if command.kind == "build":
            if command.args.bin_name is not None:
                raise IllegalCombination(
                    "No `--bin` argument allowed for `bootimage test`"
                )
            return Command("test", command.args)
        if command.kind == "build-help":
            return Command("test-help")
        return command

    if first in ("--help", "-h"):
        return Command("help")
    if first == "--version":
        return Command("version")
    return Command("no-subcommand")


def parse_build_args(tokens: list[str], cwd: Path | None = None) -> Command:
    """Parse the arguments shared by build, run and test.

    Returns a build-help or version Command when requested before `--`,
    otherwise a build Command carrying the parsed Args.
    Raises DuplicateOption or InvalidPath on bad input.
    """
    slots: dict[str, object] = {}
    release = False
    cargo_args: list[str] = []
    run_args: list[str] = []
    state = SCANNING_OPTIONS

    i = 0
    while i < len(tokens):
        arg = tokens[i]
        i += 1

        if state == FORWARDING_RUN_ARGS:
            run_args.append(arg)
            continue

        if arg in ("--help", "-h"):
            return Command("build-help")
        if arg == "--version":
            return Command("version")

        if arg in VALUE_OPTIONS:
            value = tokens[i] if i < len(tokens) else None
            if value is not None:
                i += 1
            _set_once(slots, arg, _convert(arg, value, cwd))
            cargo_args.append(arg)
            if value is not None:
                cargo_args.append(value)
            continue

        flag, sep, value = arg.partition("=")
        if sep and flag in VALUE_OPTIONS:
            _set_once(slots, flag, _convert(flag, value, cwd))
            cargo_args.append(arg)
            continue

        if arg == "--release":
            release = True
            cargo_args.append(arg)
        elif arg == "--":
            state = FORWARDING_RUN_ARGS
        else:
            cargo_args.append(arg)

    return Command(
        "build",
        Args(
            cargo_args=cargo_args,
            run_args=run_args,
            manifest_path=slots.get("--manifest-path"),
            bin_name=slots.get("--bin"),
            target=slots.get("--target"),
            release=release,
        ),
    )


def _set_once(slots: dict[str, object], option: str, value: object) -> None:
    """Record an option value. A dangling option still counts as given."""
    if slots.get(option) is not None:
        raise DuplicateOption(option)
    slots[option] = value


def _convert(option: str, value: str | None, cwd: Path | None) -> object:
    if value is None or option != "--manifest-path":
        return value
    return canonicalize(value, cwd)


def canonicalize(path: str, cwd: Path | None = None) -> Path:
    """Resolve a path, relative to cwd when given, to an absolute path that must exist."""
    if not path:
        raise InvalidPath(path, "empty path")
    resolved = Path(cwd) / path if cwd is not None else Path(path)
    try:
        return resolved.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidPath(path, getattr(e, "strerror", None) or str(e)) from None
