"""CLI output formatting."""

from __future__ import annotations

import enum

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import (
    Config,
    ConfigError,
    ResolvedOptions,
    SshConfig,
    resolve_options,
)
from .errors import VagrantExecError
from .pipeline import TaskResult
from .remote import wrap_commands


class OutputFormat(str, enum.Enum):
    """Output format for CLI commands."""

    HUMAN = "human"
    JSON = "json"


def print_human_results(
    results: list[TaskResult],
    *,
    console: Console | None = None,
) -> None:
    """Print human-readable task results."""
    if console is None:
        console = Console()

    table = Table(title="Task results:")
    table.add_column("Target", style="bold")
    table.add_column("Status")
    table.add_column("Details")

    for r in results:
        if r.success:
            status = Text("OK", style="green")
        else:
            status = Text("FAILED", style="red")

        details_parts: list[str] = []
        if r.error:
            details_parts.append(f"Error: {r.error}")
        if r.stage is not None and not r.success:
            details_parts.append(f"Stage: {r.stage.value}")
        if r.exit_code is not None:
            details_parts.append(f"Exit code: {r.exit_code}")
        if r.summary:
            details_parts.append(r.summary)

        table.add_row(
            r.target,
            status,
            "\n".join(details_parts),
        )

    console.print(table)


def _wrapped_display(options: ResolvedOptions) -> str:
    try:
        return "\n".join(wrap_commands(options.command, options.cwd or ""))
    except VagrantExecError as e:
        return e.msg


def print_targets(
    config: Config,
    *,
    console: Console | None = None,
) -> None:
    """Print the configured targets and their wrapped commands."""
    if console is None:
        console = Console()

    table = Table(title="Targets:")
    table.add_column("Name", style="bold")
    table.add_column("Host")
    table.add_column("Port")
    table.add_column("User")
    table.add_column("Cwd")
    table.add_column("Commands")

    for target in config.targets:
        options = config.task_options(target)
        # keyfile is not read here, only the defaulted fields are shown
        shown = resolve_options(options.model_copy(update={"keyfile": None}))
        table.add_row(
            target,
            shown.host or "",
            str(shown.port or ""),
            shown.user or "",
            shown.cwd or "",
            _wrapped_display(shown),
        )

    console.print(table)


def print_ssh_config(
    config: SshConfig,
    *,
    console: Console | None = None,
) -> None:
    """Print the discovered Vagrant SSH config."""
    if console is None:
        console = Console()

    if config.is_empty:
        console.print(
            Text("No Vagrant ssh config available", style="yellow")
        )
        return

    table = Table(title="Vagrant SSH config:")
    table.add_column("Host", style="bold")
    table.add_column("HostName")
    table.add_column("Port")
    table.add_column("User")
    table.add_column("IdentityFile")
    table.add_row(
        config.host_alias or "",
        config.host or "",
        str(config.port or ""),
        config.user or "",
        config.identity_file or "",
    )
    console.print(table)


def _validation_lines(cause: ValidationError) -> list[str]:
    lines = []
    for detail in cause.errors(include_url=False):
        where = ".".join(str(part) for part in detail["loc"])
        msg = detail["msg"].removeprefix("Value error, ")
        lines.append(f"{where}: {msg}" if where else msg)
    return lines


def print_config_error(
    e: ConfigError,
    *,
    console: Console | None = None,
) -> None:
    """Show a task file or option problem on stderr."""
    if console is None:
        console = Console(stderr=True)
    cause = e.__cause__
    if isinstance(cause, ValidationError):
        body = "\n".join(_validation_lines(cause))
    else:
        body = str(e)
    console.print(Panel(body, title="Configuration error", style="red"))
