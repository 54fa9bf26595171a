"""Fabric-based remote command execution."""

from __future__ import annotations

import io
import logging
from concurrent.futures import Future
from typing import Callable, Sequence

import paramiko  # type: ignore[import-untyped]
from fabric import Connection  # type: ignore[import-untyped]
from invoke.exceptions import ThreadException  # type: ignore[import-untyped]

from ..config import ResolvedSshOptions
from .commands import CommandList
from ..errors import (
    ExecutionError,
    RemoteCommandError,
    RemoteConnectionError,
    VagrantExecError,
)

logger = logging.getLogger(__name__)
remote_logger = logging.getLogger("vagrant_exec.remote")

# paramiko reports -1 when the server sent no exit status
NO_EXIT_STATUS = -1

_KEY_TYPES: tuple[type[paramiko.PKey], ...] = (
    paramiko.Ed25519Key,
    paramiko.ECDSAKey,
    paramiko.RSAKey,
)


class LineStream:
    """File-like sink that hands complete lines to a callback.

    Errors raised by the callback are logged and do not interrupt
    the remote session.
    """

    def __init__(self, emit: Callable[[str], None]):
        self._emit = emit
        self._buffer = ""

    def _send(self, line: str) -> None:
        try:
            self._emit(line.rstrip("\r"))
        except Exception:
            logger.warning("Output callback failed", exc_info=True)

    def write(self, data: str) -> int:
        self._buffer += data
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self._send(line)
        return len(data)

    def flush(self) -> None:
        pass

    def isatty(self) -> bool:
        return False

    def drain(self) -> None:
        """Emit a trailing line that had no newline."""
        if self._buffer:
            self._send(self._buffer)
            self._buffer = ""


class SessionOutcome:
    """Single result of a remote session, settled exactly once.

    Whichever terminal event reports first wins; later attempts
    to settle are ignored.
    """

    def __init__(self) -> None:
        self._future: Future[str] = Future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def succeed(self, summary: str) -> None:
        if not self._future.done():
            self._future.set_result(summary)

    def fail(self, error: VagrantExecError) -> None:
        if not self._future.done():
            self._future.set_exception(error)

    def result(self) -> str:
        return self._future.result()


def load_private_key(key: str) -> paramiko.PKey:
    """Load private key text as a paramiko key."""
    for key_type in _KEY_TYPES:
        try:
            return key_type.from_private_key(io.StringIO(key))
        except paramiko.SSHException:
            continue
    raise paramiko.SSHException("Unsupported or invalid private key")


def build_connection(opts: ResolvedSshOptions) -> Connection:
    """Build a Fabric Connection using only the resolved credentials."""
    if not opts.host:
        raise ValueError("No host to connect to")
    connect_kwargs: dict[str, object] = {
        "allow_agent": False,
        "look_for_keys": False,
    }
    if opts.password is not None:
        connect_kwargs["password"] = opts.password
    elif opts.key is not None:
        connect_kwargs["pkey"] = load_private_key(opts.key)

    conn = Connection(
        host=opts.host,
        port=opts.port,
        user=opts.user,
        connect_kwargs=connect_kwargs,
    )
    # Vagrant boxes get fresh host keys on every `vagrant up`.
    conn.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    return conn


def _run_commands(
    conn: Connection,
    commands: Sequence[str],
    outcome: SessionOutcome,
    out: LineStream,
    err: LineStream,
) -> None:
    for cmd in commands:
        logger.debug('Running command "%s"', cmd)
        try:
            result = conn.run(
                cmd,
                warn=True,
                hide=False,
                in_stream=False,
                out_stream=out,
                err_stream=err,
            )
        except (
            paramiko.SSHException,
            OSError,
            EOFError,
            ThreadException,
        ) as e:
            outcome.fail(ExecutionError(e))
            return
        finally:
            out.drain()
            err.drain()
        code = result.exited
        if code not in (0, None, NO_EXIT_STATUS):
            outcome.fail(RemoteCommandError(code, cmd))
            return


def run_remote_commands(
    opts: ResolvedSshOptions,
    commands: Sequence[str],
    on_output: Callable[[str], None] | None = None,
    on_error_output: Callable[[str], None] | None = None,
) -> str:
    """Run *commands* in order over a single SSH connection.

    Returns a summary of the executed commands.  Raises
    ``RemoteConnectionError``, ``ExecutionError`` or
    ``RemoteCommandError``.  Remote output is passed line by line
    to *on_output* / *on_error_output*.
    """
    out = LineStream(on_output or remote_logger.info)
    err = LineStream(on_error_output or remote_logger.warning)
    outcome = SessionOutcome()

    try:
        conn = build_connection(opts)
        conn.open()
    except (paramiko.SSHException, OSError, ValueError) as e:
        outcome.fail(RemoteConnectionError(opts.host, opts.port, e))
        return outcome.result()

    logger.debug("Connected successfully to %s:%s", opts.host, opts.port)
    try:
        _run_commands(conn, commands, outcome, out, err)
        outcome.succeed(
            f"Executed command(s) successfully:\n\t{CommandList(commands)}"
        )
    finally:
        conn.close()
    return outcome.result()
