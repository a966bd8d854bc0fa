"""bootimage command-line entry point.

Parses the argument vector, applies configuration, and prints the cargo and
runner invocations for build, run and test. Help and version requests are
answered directly.

Exit codes:
- 0: Success (plan, help or version printed).
- 1: No subcommand given. Help is printed to stderr.
- 2: Usage or configuration error. A diagnostic is printed to stderr.
"""

from __future__ import annotations

import sys
from pathlib import Path

from bootimage import __version__
from bootimage.core.args import UsageError, parse_args
from bootimage.core.config import configure_logging, load_config, log_event
from bootimage.core.help import help_for
from bootimage.core.plan import make_plan


def run(argv: list[str], cwd: Path | None = None) -> int:
    """Handle one invocation and return the exit code."""
    if cwd is None:
        cwd = Path.cwd()

    try:
        command = parse_args(argv, cwd)
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        _log_rejected(argv, e, cwd)
        return 2

    if command.kind == "version":
        print(f"bootimage {__version__}")
        return 0
    if command.kind == "no-subcommand":
        print(help_for(command.kind), file=sys.stderr, end="")
        return 1
    if command.args is None:
        print(help_for(command.kind), end="")
        return 0

    args = command.args
    try:
        config = load_config(cwd, manifest_path=args.manifest_path)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    configure_logging(config)
    log_event(
        "parsed",
        subcommand=command.kind,
        cargo_args=args.cargo_args,
        run_args=args.run_args,
    )

    plan = make_plan(command, config, cwd)
    log_event("planned", subcommand=plan.subcommand, cargo=plan.cargo, runner=plan.runner)

    if config.verbose:
        print(f"target: {args.target or '(host)'}", file=sys.stderr)
        print(f"bin: {args.bin_name or config.package_name or '(unknown)'}", file=sys.stderr)
        if config.manifest_path is not None:
            print(f"manifest: {config.manifest_path}", file=sys.stderr)

    print(plan.render())
    return 0


def _log_rejected(argv: list[str], error: UsageError, cwd: Path) -> None:
    """Record a usage error using the settings found from cwd."""
    try:
        config = load_config(cwd)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return
    configure_logging(config)
    log_event("rejected", level="warning", argv=argv, error=str(error))


def main() -> None:
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
