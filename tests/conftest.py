"""
Shared test fixtures for bootimage tests.
"""

import pytest
import structlog

from bootimage.core import config as config_module
from bootimage.core.config import Config, configure_logging


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the real user config and environment out of every test."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(config_module, "USER_CONFIG", home / ".bootimage" / "config")
    monkeypatch.delenv(config_module.ENV_CONFIG, raising=False)
    yield home
    configure_logging(Config())
    structlog.reset_defaults()


@pytest.fixture
def cargo_project(tmp_path):
    """Factory for a crate directory with a Cargo.toml."""

    def _make(metadata: str = "", name: str = "kernel"):
        manifest = tmp_path / "Cargo.toml"
        text = f'[package]\nname = "{name}"\nversion = "0.1.0"\n'
        if metadata:
            text += "\n[package.metadata.bootimage]\n" + metadata
        manifest.write_text(text)
        return tmp_path

    return _make


def args_of(command):
    """Return the Args of a build/run/test command."""
    assert command.args is not None, f"{command!r} carries no args"
    return command.args
