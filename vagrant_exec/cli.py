"""Typer CLI: run, targets and ssh-config commands."""

from __future__ import annotations

import json
from typing import Annotated, Optional

import typer

from .config import Config, ConfigError, TaskOptions, load_config
from .errors import ConfigParseError
from .log import configure_logging
from .output import (
    OutputFormat,
    print_config_error,
    print_human_results,
    print_ssh_config,
    print_targets,
)
from .pipeline import TaskResult, run_task
from .remote import probe_ssh_config

ADHOC_TARGET = "adhoc"

app = typer.Typer(
    name="vagrant-exec",
    help="Run shell commands on a Vagrant machine over SSH",
    no_args_is_help=True,
)


@app.command()
def run(
    targets: Annotated[
        Optional[list[str]],
        typer.Argument(help="Target name(s) to run (default: all)"),
    ] = None,
    config: Annotated[
        Optional[str],
        typer.Option("--config", "-c", help="Path to task file"),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.HUMAN,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show verbose messages"),
    ] = False,
    command: Annotated[
        Optional[list[str]],
        typer.Option(
            "--command",
            "-x",
            help="Run this command instead of task file targets",
        ),
    ] = None,
    cwd: Annotated[
        Optional[str],
        typer.Option("--cwd", help="Working directory on the machine"),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", help="SSH user"),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="SSH host"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="SSH port"),
    ] = None,
    password: Annotated[
        Optional[str],
        typer.Option("--password", help="SSH password"),
    ] = None,
    keyfile: Annotated[
        Optional[str],
        typer.Option("--keyfile", help="Path to an identity file"),
    ] = None,
) -> None:
    """Run command(s) on the Vagrant machine."""
    configure_logging(verbose)

    if command:
        if targets:
            typer.echo(
                "Error: targets cannot be combined with --command",
                err=True,
            )
            raise typer.Exit(2)
        flags = {
            "command": command,
            "cwd": cwd,
            "user": user,
            "host": host,
            "port": port,
            "password": password,
            "keyfile": keyfile,
        }
        try:
            options = TaskOptions.model_validate(
                {k: v for k, v in flags.items() if v is not None}
            )
        except ValueError as e:
            print_config_error(ConfigError(str(e)))
            raise typer.Exit(2)
        selected = [(ADHOC_TARGET, options)]
    else:
        cfg = _load_config_or_exit(config)
        selected = _select_targets_or_exit(cfg, targets)

    results: list[TaskResult] = []
    for target, options in selected:
        result = run_task(target, options)
        results.append(result)
        if not result.success:
            break

    match output:
        case OutputFormat.JSON:
            data = [r.model_dump(mode="json") for r in results]
            typer.echo(json.dumps(data, indent=2))
        case OutputFormat.HUMAN:
            print_human_results(results)

    if any(not r.success for r in results):
        raise typer.Exit(1)


@app.command("targets")
def list_targets(
    config: Annotated[
        Optional[str],
        typer.Option("--config", "-c", help="Path to task file"),
    ] = None,
) -> None:
    """List task file targets and the commands they run."""
    cfg = _load_config_or_exit(config)
    print_targets(cfg)


@app.command("ssh-config")
def ssh_config(
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.HUMAN,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show verbose messages"),
    ] = False,
) -> None:
    """Show the SSH config reported by `vagrant ssh-config`."""
    configure_logging(verbose)
    try:
        discovered = probe_ssh_config()
    except ConfigParseError as e:
        typer.echo(f"Error: {e.msg}", err=True)
        raise typer.Exit(1)

    match output:
        case OutputFormat.JSON:
            typer.echo(json.dumps(discovered.model_dump(), indent=2))
        case OutputFormat.HUMAN:
            print_ssh_config(discovered)


def _load_config_or_exit(config_path: str | None) -> Config:
    """Load config or exit with code 2 on error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(2)


def _select_targets_or_exit(
    cfg: Config,
    names: list[str] | None,
) -> list[tuple[str, TaskOptions]]:
    """Resolve target names to options or exit with code 2."""
    try:
        return [
            (name, cfg.task_options(name))
            for name in cfg.select_targets(names)
        ]
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(2)
    except ValueError as e:
        print_config_error(ConfigError(str(e)))
        raise typer.Exit(2)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
