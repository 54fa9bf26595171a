"""Remote command wrapping, SSH config discovery and execution."""

from .commands import CommandList, normalize_commands, wrap_commands
from .fabricssh import run_remote_commands
from .sshconfig import load_identity_file, parse_ssh_config, probe_ssh_config

__all__ = [
    "CommandList",
    "load_identity_file",
    "normalize_commands",
    "parse_ssh_config",
    "probe_ssh_config",
    "run_remote_commands",
    "wrap_commands",
]
