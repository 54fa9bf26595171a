"""Task pipeline: options -> commands -> ssh config -> ssh options -> run."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from pydantic import BaseModel

from .config import (
    TaskDefaults,
    TaskOptions,
    reconcile_ssh_options,
    resolve_options,
)
from .errors import RemoteCommandError, VagrantExecError
from .remote import (
    load_identity_file,
    probe_ssh_config,
    run_remote_commands,
    wrap_commands,
)

logger = logging.getLogger(__name__)


class PipelineStage(str, enum.Enum):
    RESOLVING_OPTIONS = "resolving-options"
    WRAPPING_COMMANDS = "wrapping-commands"
    PROBING_CONFIG = "probing-config"
    RECONCILING_SSH_OPTIONS = "reconciling-ssh-options"
    EXECUTING = "executing"


class TaskResult(BaseModel):
    """Result of running one task target."""

    target: str
    success: bool
    summary: Optional[str] = None
    error: Optional[str] = None
    stage: Optional[PipelineStage] = None
    exit_code: Optional[int] = None


def execute(
    options: TaskOptions,
    defaults: TaskDefaults | None = None,
    on_output: Callable[[str], None] | None = None,
) -> str:
    """Run the commands in *options* on the Vagrant machine.

    Returns the success summary.  Any failure is logged once and
    re-raised as a ``VagrantExecError`` with ``stage`` set.
    """
    stage = PipelineStage.RESOLVING_OPTIONS
    try:
        resolved = resolve_options(options, defaults)

        stage = PipelineStage.WRAPPING_COMMANDS
        commands = wrap_commands(resolved.command, resolved.cwd or "")

        stage = PipelineStage.PROBING_CONFIG
        ssh_config = probe_ssh_config()
        resolved = load_identity_file(resolved, ssh_config)

        stage = PipelineStage.RECONCILING_SSH_OPTIONS
        ssh_options = reconcile_ssh_options(resolved, ssh_config)

        stage = PipelineStage.EXECUTING
        return run_remote_commands(ssh_options, commands, on_output)
    except VagrantExecError as e:
        e.stage = stage
        logger.error(e.msg)
        if e.err is not None:
            logger.debug("Caused by: %r", e.err)
        raise


def run_task(
    target: str,
    options: TaskOptions,
    defaults: TaskDefaults | None = None,
    on_output: Callable[[str], None] | None = None,
) -> TaskResult:
    """Run one target and capture the outcome as a ``TaskResult``."""
    try:
        summary = execute(options, defaults, on_output)
    except VagrantExecError as e:
        return TaskResult(
            target=target,
            success=False,
            error=e.msg if e.err is None else f"{e.msg}: {e.err}",
            stage=e.stage,
            exit_code=e.code if isinstance(e, RemoteCommandError) else None,
        )
    return TaskResult(target=target, success=True, summary=summary)
