"""Tests for vagrant_exec.output."""

from __future__ import annotations

import io

import pytest
from pydantic import ValidationError
from rich.console import Console

from vagrant_exec.config import Config, ConfigError, SshConfig, TaskOptions
from vagrant_exec.output import (
    print_config_error,
    print_human_results,
    print_ssh_config,
    print_targets,
)
from vagrant_exec.pipeline import PipelineStage, TaskResult


def _console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, width=200, color_system=None), buf


class TestPrintHumanResults:
    def test_success_and_failure(self) -> None:
        console, buf = _console()
        print_human_results(
            [
                TaskResult(
                    target="build",
                    success=True,
                    summary="Executed command(s) successfully:",
                ),
                TaskResult(
                    target="test",
                    success=False,
                    error="Returned code 2",
                    stage=PipelineStage.EXECUTING,
                    exit_code=2,
                ),
            ],
            console=console,
        )
        output = buf.getvalue()
        assert "OK" in output
        assert "FAILED" in output
        assert "Error: Returned code 2" in output
        assert "Stage: executing" in output
        assert "Exit code: 2" in output


class TestPrintTargets:
    def test_wrapped_commands(self, sample_config: Config) -> None:
        console, buf = _console()
        print_targets(sample_config, console=console)
        output = buf.getvalue()
        assert "cd /srv; make; cd - >/dev/null" in output
        assert "cd /srv; make lint; cd - >/dev/null" in output
        assert "127.0.0.1" in output
        assert "2200" in output

    def test_target_without_command(self) -> None:
        console, buf = _console()
        config = Config(targets={"empty": TaskOptions()})
        print_targets(config, console=console)
        assert 'Non-empty "command" property required' in buf.getvalue()


class TestPrintSshConfig:
    def test_table(self) -> None:
        console, buf = _console()
        print_ssh_config(
            SshConfig(
                host_alias="default",
                host="127.0.0.1",
                user="vagrant",
                port=2222,
                identity_file="/keys/private_key",
            ),
            console=console,
        )
        output = buf.getvalue()
        assert "default" in output
        assert "/keys/private_key" in output


class TestPrintConfigError:
    def test_validation_error(self) -> None:
        console, buf = _console()
        with pytest.raises(ValidationError) as exc_info:
            TaskOptions.model_validate({"command": "ls", "port": 0})
        error = ConfigError(str(exc_info.value))
        error.__cause__ = exc_info.value
        print_config_error(error, console=console)
        output = buf.getvalue()
        assert "Configuration error" in output
        assert "port: Input should be greater than or equal to 1" in output

    def test_plain_error(self) -> None:
        console, buf = _console()
        error = ConfigError("No task file found")
        print_config_error(error, console=console)
        assert "No task file found" in buf.getvalue()
