"""bootimage configuration and logging."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

import structlog

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from bootimage.core.tokens import split_words

USER_CONFIG = Path.home() / ".bootimage" / "config"
PROJECT_CONFIG_NAME = ".bootimage"
MANIFEST_NAME = "Cargo.toml"
ENV_CONFIG = "BOOTIMAGE_CONFIG"

DEFAULT_RUN_COMMAND = ["qemu-system-x86_64", "-drive", "format=raw,file={}"]

# Keys accepted in [package.metadata.bootimage]
MANIFEST_KEYS = {
    "default-target": "default_target",
    "run-command": "run_command",
    "run-args": "run_args",
    "test-args": "test_args",
}

# Settings whose value is a list of shell words
WORD_SETTINGS = ("run_command", "run_args", "test_args")


@dataclass
class Config:
    """Merged settings. None means not set by any source."""

    default_target: str | None = None
    run_command: list[str] | None = None
    run_args: list[str] | None = None
    test_args: list[str] | None = None
    log: Path | None = None  # None = no logging
    verbose: bool = False

    package_name: str | None = None
    """Package name from the manifest, if one was found."""

    manifest_path: Path | None = None
    """Manifest the metadata was read from."""

    @property
    def runner(self) -> list[str]:
        """Runner template, `{}` standing for the disk image."""
        if self.run_command is not None:
            return list(self.run_command)
        return list(DEFAULT_RUN_COMMAND)


# === Config Loading ===


def _find_upward(cwd: Path, name: str) -> Path | None:
    """Walk up from cwd to find a file called name."""
    current = cwd.resolve()
    while True:
        candidate = current / name
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # reached root
            return None
        current = parent


def _merge_configs(base: Config, overlay: Config) -> Config:
    """Merge overlay into base. Settings the overlay sets win."""
    return replace(
        base,
        default_target=overlay.default_target
        if overlay.default_target is not None
        else base.default_target,
        run_command=overlay.run_command
        if overlay.run_command is not None
        else base.run_command,
        run_args=overlay.run_args if overlay.run_args is not None else base.run_args,
        test_args=overlay.test_args
        if overlay.test_args is not None
        else base.test_args,
        log=overlay.log if overlay.log is not None else base.log,
        verbose=overlay.verbose or base.verbose,
        package_name=overlay.package_name or base.package_name,
        manifest_path=overlay.manifest_path or base.manifest_path,
    )


def _read_config_file(path: Path) -> Config:
    """Parse a line-based config file, prefixing errors with its path."""
    try:
        return parse_config(path.read_text())
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from None


def load_config(cwd: Path, manifest_path: Path | None = None) -> Config:
    """Load settings from every source. Later sources override earlier ones.

    Order: ~/.bootimage/config, the manifest's [package.metadata.bootimage],
    .bootimage (walking up from cwd), then $BOOTIMAGE_CONFIG.
    Raises ValueError on malformed files.
    """
    config = Config()

    # 1. User config (lowest priority)
    if USER_CONFIG.is_file():
        config = _merge_configs(config, _read_config_file(USER_CONFIG))

    # 2. Cargo manifest metadata
    if manifest_path is None:
        manifest_path = _find_upward(cwd, MANIFEST_NAME)
    if manifest_path is not None and manifest_path.is_file():
        config = _merge_configs(config, load_manifest(manifest_path))

    # 3. Project config (walk up from cwd)
    project_path = _find_upward(cwd, PROJECT_CONFIG_NAME)
    if project_path is not None:
        config = _merge_configs(config, _read_config_file(project_path))

    # 4. Env override (highest priority)
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if env_config_path.is_file():
            config = _merge_configs(config, _read_config_file(env_config_path))

    return config


def load_manifest(path: Path) -> Config:
    """Read [package.metadata.bootimage] from a cargo manifest.

    Raises ValueError if the manifest is not valid TOML or the table holds
    unknown keys or values of the wrong type.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"{path}: {e}") from None

    package = data.get("package", {})
    if not isinstance(package, dict):
        raise ValueError(f"{path}: [package] must be a table")
    package_metadata = package.get("metadata", {})
    if not isinstance(package_metadata, dict):
        raise ValueError(f"{path}: [package.metadata] must be a table")
    metadata = package_metadata.get("bootimage", {})
    if not isinstance(metadata, dict):
        raise ValueError(f"{path}: [package.metadata.bootimage] must be a table")

    values: dict[str, str | list[str]] = {}
    for key, value in metadata.items():
        name = MANIFEST_KEYS.get(key)
        if name is None:
            raise ValueError(f"{path}: unknown key '{key}' in package.metadata.bootimage")
        if name in WORD_SETTINGS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"{path}: '{key}' must be a list of strings")
        elif not isinstance(value, str):
            raise ValueError(f"{path}: '{key}' must be a string")
        values[name] = value

    name = package.get("name")
    return Config(
        package_name=name if isinstance(name, str) else None,
        manifest_path=path,
        **values,
    )


def parse_config(text: str) -> Config:
    """Parse config text into Config object. Raises ValueError on syntax errors."""
    settings: dict[str, bool | str | Path | list[str]] = {}

    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(None, 1)
        directive = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""

        try:
            if directive == "set":
                _apply_setting(settings, rest)
            else:
                raise ValueError(f"unknown directive '{directive}'")
        except ValueError as e:
            raise ValueError(f"line {lineno}: {e}") from None

    return Config(
        default_target=settings.get("default_target"),
        run_command=settings.get("run_command"),
        run_args=settings.get("run_args"),
        test_args=settings.get("test_args"),
        log=settings.get("log"),
        verbose=settings.get("verbose", False),
    )


def _apply_setting(settings: dict[str, bool | str | Path | list[str]], rest: str) -> None:
    """Parse and apply a 'set' directive. Raises ValueError on invalid setting."""
    if not rest:
        raise ValueError("'set' requires a setting name")

    parts = rest.split(None, 1)
    key = parts[0].lower()
    value = parts[1] if len(parts) > 1 else None
    key_normalized = key.replace("-", "_")

    if key_normalized == "verbose":
        if value is not None:
            raise ValueError(f"'{key}' takes no value")
        settings[key_normalized] = True

    elif key_normalized == "default_target":
        if value is None or len(value.split()) != 1:
            raise ValueError(f"'{key}' requires a single target triple")
        settings[key_normalized] = value

    # Shell word settings
    elif key_normalized in WORD_SETTINGS:
        if value is None:
            raise ValueError(f"'{key}' requires a value")
        words = split_words(value)
        if key_normalized == "run_command" and not words:
            raise ValueError(f"'{key}' requires a program")
        settings[key_normalized] = words

    # Path settings
    elif key_normalized == "log":
        if value is None:
            raise ValueError("'log' requires a path")
        settings[key_normalized] = Path(value).expanduser()

    else:
        raise ValueError(f"unknown setting '{key}'")


# === Logging ===

_logger: structlog.typing.FilteringBoundLogger | None = None
_log_file = None


def configure_logging(config: Config) -> None:
    """Configure logging based on config settings. Call once at startup."""
    global _logger, _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None

    if config.log is None:
        _logger = None
        return

    # Ensure log directory exists
    config.log.parent.mkdir(parents=True, exist_ok=True)
    _log_file = open(config.log, "a")

    # JSON lines appended to the log file
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if config.verbose else logging.INFO
        ),
        logger_factory=structlog.WriteLoggerFactory(file=_log_file),
        cache_logger_on_first_use=False,
    )
    _logger = structlog.get_logger()


def log_event(event: str, level: str = "info", **fields) -> None:
    """Log an event. No-op if logging not configured."""
    if _logger is None:
        return
    getattr(_logger, level)(event, **fields)
