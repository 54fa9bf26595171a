"""Discovery of connection settings through ``vagrant ssh-config``."""

from __future__ import annotations

import logging
import re
import subprocess

import paramiko  # type: ignore[import-untyped]
from pydantic import ValidationError

from ..config import ResolvedOptions, SshConfig, read_key_file
from ..errors import ConfigParseError, IdentityFileReadError

logger = logging.getLogger(__name__)

VAGRANT_SSH_CONFIG_COMMAND = ["vagrant", "ssh-config"]

_HOST_LINE = re.compile(r"^\s*host(?:\s*=\s*|\s+)(\S+)", re.IGNORECASE)
_MATCH_LINE = re.compile(r"^\s*match(?:\s*=\s*|\s+)", re.IGNORECASE)
_KEYWORD = re.compile(r"^\s*(\w+)(?:\s*=\s*|\s+)\S", re.IGNORECASE)


def _first_host_block(text: str) -> tuple[str | None, set[str]]:
    """Return the first Host alias and the keywords set in its block."""
    alias: str | None = None
    keywords: set[str] = set()
    for line in text.splitlines():
        if alias is None:
            match = _HOST_LINE.match(line)
            if match:
                alias = match.group(1).strip('"')
            continue
        if _HOST_LINE.match(line) or _MATCH_LINE.match(line):
            break
        keyword = _KEYWORD.match(line)
        if keyword:
            keywords.add(keyword.group(1).lower())
    return alias, keywords


def _unquote(value: str) -> str:
    return value.strip().strip('"')


def parse_ssh_config(text: str) -> SshConfig:
    """Parse ``ssh_config`` text and return its first host block.

    Raises ``ConfigParseError`` when the text cannot be parsed or
    holds no host block.
    """
    try:
        parsed = paramiko.SSHConfig.from_text(text)
    except paramiko.ssh_exception.ConfigParseError as e:
        raise ConfigParseError(text, e) from e

    alias, keywords = _first_host_block(text)
    if alias is None:
        err = ValueError("No Host entry found")
        raise ConfigParseError(text, err) from err

    entry = parsed.lookup(alias)
    identity_files = entry.get("identityfile") or []
    try:
        return SshConfig(
            host_alias=alias,
            host=entry.get("hostname") if "hostname" in keywords else None,
            user=entry.get("user"),
            port=entry.get("port"),
            identity_file=(
                _unquote(identity_files[0]) if identity_files else None
            ),
        )
    except ValidationError as e:
        raise ConfigParseError(text, e) from e


def probe_ssh_config(cwd: str | None = None) -> SshConfig:
    """Run ``vagrant ssh-config`` and parse its output.

    A failing command (no Vagrant environment, or no ``vagrant``
    executable) yields an empty ``SshConfig``.  Unparseable output
    raises ``ConfigParseError``.
    """
    try:
        proc = subprocess.run(
            VAGRANT_SSH_CONFIG_COMMAND,
            capture_output=True,
            text=True,
            cwd=cwd,
        )
    except OSError as e:
        logger.debug("Could not read Vagrant ssh config: %s", e)
        return SshConfig()

    if proc.returncode != 0:
        logger.debug(
            "Could not read Vagrant ssh config: %s", proc.stderr.strip()
        )
        return SshConfig()

    logger.debug("Received Vagrant ssh config")
    config = parse_ssh_config(proc.stdout)
    logger.debug("Parsed Vagrant ssh config")
    return config


def load_identity_file(
    options: ResolvedOptions,
    config: SshConfig,
) -> ResolvedOptions:
    """Read the discovered identity file unless a key is already set."""
    id_file = config.identity_file
    if options.key or not id_file:
        return options
    try:
        key = read_key_file(id_file)
    except (OSError, UnicodeDecodeError) as e:
        raise IdentityFileReadError(id_file, e) from e
    logger.debug('Read identity file "%s"', id_file)
    return options.model_copy(update={"key": key})
