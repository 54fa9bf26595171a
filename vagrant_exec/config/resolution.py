"""Option resolution: defaults, key material, and SSH options."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import KeyReadError
from .protocol import (
    ResolvedOptions,
    ResolvedSshOptions,
    SshConfig,
    TaskDefaults,
    TaskOptions,
)

logger = logging.getLogger(__name__)

_DEFAULTED_FIELDS = ("cwd", "user", "host", "port")


def read_key_file(path: str) -> str:
    """Read a private key file as text."""
    return Path(path).expanduser().read_text()


def resolve_options(
    options: TaskOptions,
    defaults: TaskDefaults | None = None,
) -> ResolvedOptions:
    """Fill unset options from *defaults* and read ``keyfile``.

    Explicitly set fields are never overwritten.  Raises
    ``KeyReadError`` when ``keyfile`` is set but unreadable.
    """
    if defaults is None:
        defaults = TaskDefaults()
    values = options.model_dump()
    for name in _DEFAULTED_FIELDS:
        if values[name] is None:
            values[name] = getattr(defaults, name)

    if options.keyfile:
        try:
            values["key"] = read_key_file(options.keyfile)
        except (OSError, UnicodeDecodeError) as e:
            raise KeyReadError(options.keyfile, e) from e
        logger.debug('Read identity file "%s"', options.keyfile)

    return ResolvedOptions.model_validate(values)


def reconcile_ssh_options(
    options: ResolvedOptions,
    config: SshConfig,
) -> ResolvedSshOptions:
    """Combine resolved options with discovered SSH config.

    User options take precedence.  A password, when given, is used
    exclusively and any key material is dropped.  Nothing is
    validated here: a missing host or credentials fail when the
    connection is attempted.
    """
    ssh_options = ResolvedSshOptions(
        host=options.host or config.host,
        user=options.user or config.user,
        port=options.port or config.port,
        password=options.password or None,
        key=None if options.password else options.key,
    )
    logger.debug("Using SSH options: %s", ssh_options.display())
    return ssh_options
