"""
bootimage - Command-line front end for building bootable kernel images.

Classifies the subcommand and splits arguments between cargo and the runner.
"""

from __future__ import annotations

__version__ = "0.5.0"

from bootimage.core.args import Args, parse_args
from bootimage.core.command import Command

__all__ = ["Args", "Command", "parse_args", "__version__"]
