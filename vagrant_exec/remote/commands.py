"""Wrapping of user commands to run inside a working directory."""

from __future__ import annotations

import logging
import shlex
from typing import Sequence, Union

from ..errors import EmptyCommandError

logger = logging.getLogger(__name__)


class CommandList(tuple[str, ...]):
    """Ordered wrapped commands; ``str()`` gives the display form."""

    def __str__(self) -> str:
        return "\n\t".join(self)


def normalize_commands(
    command: Union[str, Sequence[str], None],
) -> list[str]:
    """Coerce the ``command`` option into a list."""
    if command is None:
        return []
    elif isinstance(command, str):
        return [command]
    else:
        return list(command)


def wrap_command(command: str, cwd: str) -> str:
    """Wrap *command* so it runs in *cwd* and returns to the old dir.

    The remote shell keeps no working directory between commands,
    so every command changes into *cwd* itself.
    """
    return f"cd {shlex.quote(cwd)}; {command}; cd - >/dev/null"


def wrap_commands(
    command: Union[str, Sequence[str], None],
    cwd: str,
) -> CommandList:
    """Wrap each user command; raises ``EmptyCommandError`` if none."""
    commands = normalize_commands(command)
    if not commands:
        raise EmptyCommandError()
    wrapped = CommandList(wrap_command(cmd, cwd) for cmd in commands)
    logger.debug("Parsed command(s)")
    return wrapped
