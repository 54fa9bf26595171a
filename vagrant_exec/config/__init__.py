"""Configuration types, loading, and option resolution."""

from .loader import find_config_file, load_config
from .protocol import (
    Config,
    ConfigError,
    ResolvedOptions,
    ResolvedSshOptions,
    Slug,
    SshConfig,
    TaskDefaults,
    TaskOptions,
)
from .resolution import (
    read_key_file,
    reconcile_ssh_options,
    resolve_options,
)

__all__ = [
    "Config",
    "ConfigError",
    "ResolvedOptions",
    "ResolvedSshOptions",
    "Slug",
    "SshConfig",
    "TaskDefaults",
    "TaskOptions",
    "find_config_file",
    "load_config",
    "read_key_file",
    "reconcile_ssh_options",
    "resolve_options",
]
