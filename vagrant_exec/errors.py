"""Errors raised by the execution pipeline."""

from __future__ import annotations

from typing import Optional


class VagrantExecError(Exception):
    """Base class for pipeline failures.

    ``msg`` is the human-readable message reported to the user,
    ``err`` the underlying cause (if any).  ``stage`` is filled in
    by the pipeline with the stage that failed.
    """

    def __init__(self, msg: str, err: Optional[BaseException] = None):
        super().__init__(msg)
        self.msg = msg
        self.err = err
        self.stage: Optional[str] = None
        if err is not None:
            self.__cause__ = err


class EmptyCommandError(VagrantExecError):
    def __init__(self) -> None:
        super().__init__('Non-empty "command" property required')


class KeyReadError(VagrantExecError):
    """The identity file given with ``keyfile`` could not be read."""

    def __init__(self, path: str, err: BaseException):
        super().__init__(
            f'Could not read specified identity file "{path}"', err
        )
        self.path = path


class IdentityFileReadError(VagrantExecError):
    """The identity file named by ``vagrant ssh-config`` could not be read."""

    def __init__(self, path: str, err: BaseException):
        super().__init__(
            "Failed to read identity file specified by "
            f"Vagrant ssh config: {path}",
            err,
        )
        self.path = path


class ConfigParseError(VagrantExecError):
    def __init__(self, output: str, err: BaseException):
        super().__init__(
            f"Failed to parse Vagrant ssh config output: {output}", err
        )
        self.output = output


class RemoteConnectionError(VagrantExecError):
    def __init__(
        self, host: Optional[str], port: Optional[int], err: BaseException
    ):
        super().__init__(f"Failed to connect to {host}:{port}", err)
        self.host = host
        self.port = port


class ExecutionError(VagrantExecError):
    def __init__(self, err: BaseException):
        super().__init__("Error executing command", err)


class RemoteCommandError(VagrantExecError):
    """A remote command ran but exited with a non-zero status."""

    def __init__(self, code: int, command: str):
        super().__init__(f"Returned code {code}")
        self.code = code
        self.command = command
