"""Help text for the bootimage command line."""

from __future__ import annotations

HELP = """\
Creates a bootable disk image from a Rust kernel

USAGE:
    bootimage [OPTIONS]
    bootimage [SUBCOMMAND] [OPTIONS] [-- RUN_ARGS]

SUBCOMMANDS:
    build   Build the kernel and create a bootable disk image
    run     Build the disk image and run it in the configured runner
    test    Build the integration tests and run each in the runner

OPTIONS:
    -h, --help   Print help information and exit
    --version    Print version information and exit

Run `bootimage <SUBCOMMAND> --help` for subcommand options.
"""

_SHARED_OPTIONS = """\
OPTIONS:
    Any cargo build option may be given; it is passed through unchanged.
    These are also read by bootimage:

    --bin <NAME>              Binary to build (at most once)
    --target <TRIPLE>         Target triple (at most once)
    --manifest-path <PATH>    Path to Cargo.toml (at most once)
    --release                 Build in release mode
    -h, --help                Print this help and exit
    --version                 Print version information and exit
"""

BUILD_HELP = f"""\
Build the kernel and create a bootable disk image

USAGE:
    bootimage build [BUILD_OPTS]

{_SHARED_OPTIONS}"""

RUN_HELP = f"""\
Build the disk image and run it

USAGE:
    bootimage run [BUILD_OPTS] [-- RUN_ARGS]

Everything after `--` is passed to the runner unchanged.

{_SHARED_OPTIONS}"""

TEST_HELP = f"""\
Build the integration tests and run each in the runner

USAGE:
    bootimage test [BUILD_OPTS] [-- RUN_ARGS]

`--bin` is not accepted; test binaries are selected by cargo.

{_SHARED_OPTIONS}"""

_BY_KIND = {
    "help": HELP,
    "no-subcommand": HELP,
    "build-help": BUILD_HELP,
    "run-help": RUN_HELP,
    "test-help": TEST_HELP,
}


def help_for(kind: str) -> str:
    """Return the help text shown for a command kind."""
    try:
        return _BY_KIND[kind]
    except KeyError:
        raise ValueError(f"no help text for {kind!r}") from None
