"""Locating and reading the ``vagrant-exec.yaml`` task file."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .protocol import Config, ConfigError

CONFIG_FILE_NAME = "vagrant-exec.yaml"


def _candidate_paths() -> list[Path]:
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser(
        "~/.config"
    )
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path(xdg_home) / "vagrant-exec" / "config.yaml",
    ]


def find_config_file(config_path: str | None = None) -> Path:
    """Locate the task file.

    An explicit *config_path* must exist.  Otherwise the project
    directory is tried first, then the per-user XDG config directory.
    """
    if config_path is not None:
        explicit = Path(config_path)
        if not explicit.is_file():
            raise ConfigError(f"Task file not found: {config_path}")
        return explicit

    candidates = _candidate_paths()
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(c) for c in candidates)
    raise ConfigError(f"No task file found (looked in {searched})")


def load_config(config_path: str | None = None) -> Config:
    """Read the task file and validate it into a ``Config``.

    An empty file is an empty task file: no shared options and
    no targets.
    """
    path = find_config_file(config_path)
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigError(
            f"{path}: task file must be a YAML mapping, "
            f"got {type(raw).__name__}"
        )
    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e
