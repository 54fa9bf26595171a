"""Tests for vagrant_exec.remote.sshconfig."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vagrant_exec.config import ResolvedOptions, SshConfig
from vagrant_exec.errors import ConfigParseError, IdentityFileReadError
from vagrant_exec.remote import (
    load_identity_file,
    parse_ssh_config,
    probe_ssh_config,
)


def _completed(
    returncode: int, stdout: str = "", stderr: str = ""
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["vagrant", "ssh-config"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


class TestParseSshConfig:
    def test_vagrant_output(self, vagrant_ssh_config_output: str) -> None:
        config = parse_ssh_config(vagrant_ssh_config_output)
        assert config.host_alias == "default"
        assert config.host == "192.168.56.10"
        assert config.user == "vagrant"
        assert config.port == 2200
        assert config.identity_file is not None
        assert config.identity_file.endswith("private_key")

    def test_first_host_block(self) -> None:
        text = (
            "Host web\n"
            "  HostName 10.0.0.1\n"
            "  Port 2222\n"
            "\n"
            "Host db\n"
            "  HostName 10.0.0.2\n"
            "  Port 2200\n"
        )
        config = parse_ssh_config(text)
        assert config.host_alias == "web"
        assert config.host == "10.0.0.1"
        assert config.port == 2222

    def test_no_hostname_leaves_host_unset(self) -> None:
        config = parse_ssh_config("Host default\n  User vagrant\n")
        assert config.host_alias == "default"
        assert config.host is None
        assert config.user == "vagrant"

    def test_hostname_from_later_block_ignored(self) -> None:
        text = (
            "Host web\n"
            "  Port 2222\n"
            "Host db\n"
            "  HostName 10.0.0.2\n"
        )
        config = parse_ssh_config(text)
        assert config.host is None
        assert config.port == 2222

    def test_hostname_with_equals(self) -> None:
        config = parse_ssh_config("Host default\n  HostName=10.0.0.9\n")
        assert config.host == "10.0.0.9"

    def test_quoted_identity_file(self) -> None:
        text = 'Host default\n  IdentityFile "/keys/private_key"\n'
        config = parse_ssh_config(text)
        assert config.identity_file == "/keys/private_key"

    def test_no_host_block(self) -> None:
        with pytest.raises(ConfigParseError) as exc_info:
            parse_ssh_config("")
        assert exc_info.value.output == ""

    def test_unparseable_line(self) -> None:
        with pytest.raises(ConfigParseError, match="Failed to parse"):
            parse_ssh_config("Host default\n  not-a-config-line\n")

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigParseError):
            parse_ssh_config("Host default\n  Port twenty\n")


class TestProbeSshConfig:
    @patch("vagrant_exec.remote.sshconfig.subprocess.run")
    def test_success(
        self, mock_run: MagicMock, vagrant_ssh_config_output: str
    ) -> None:
        mock_run.return_value = _completed(0, vagrant_ssh_config_output)
        config = probe_ssh_config()
        assert config.host == "192.168.56.10"
        args = mock_run.call_args
        assert args.args[0] == ["vagrant", "ssh-config"]

    @patch("vagrant_exec.remote.sshconfig.subprocess.run")
    def test_command_fails(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(
            1, stderr="A Vagrant environment or target machine is required"
        )
        config = probe_ssh_config()
        assert config == SshConfig()
        assert config.is_empty

    @patch("vagrant_exec.remote.sshconfig.subprocess.run")
    def test_vagrant_not_installed(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("vagrant")
        assert probe_ssh_config().is_empty

    @patch("vagrant_exec.remote.sshconfig.subprocess.run")
    def test_bad_output_is_fatal(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(0, "garbage\n")
        with pytest.raises(ConfigParseError):
            probe_ssh_config()

    @patch("vagrant_exec.remote.sshconfig.subprocess.run")
    def test_cwd_passed(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(1)
        probe_ssh_config(cwd="/projects/box")
        assert mock_run.call_args.kwargs["cwd"] == "/projects/box"


class TestLoadIdentityFile:
    def test_reads_discovered_file(self, tmp_path: Path) -> None:
        identity = tmp_path / "private_key"
        identity.write_text("vagrant-key")
        options = ResolvedOptions(command="ls")
        config = SshConfig(identity_file=str(identity))
        updated = load_identity_file(options, config)
        assert updated.key == "vagrant-key"
        assert options.key is None

    def test_explicit_key_kept(self, tmp_path: Path) -> None:
        options = ResolvedOptions(command="ls", key="explicit")
        config = SshConfig(identity_file=str(tmp_path / "missing"))
        assert load_identity_file(options, config) is options

    def test_no_identity_file(self) -> None:
        options = ResolvedOptions(command="ls")
        assert load_identity_file(options, SshConfig()) is options

    def test_unreadable(self, tmp_path: Path) -> None:
        missing = str(tmp_path / "missing")
        with pytest.raises(IdentityFileReadError) as exc_info:
            load_identity_file(
                ResolvedOptions(command="ls"),
                SshConfig(identity_file=missing),
            )
        assert exc_info.value.path == missing
        assert "Vagrant ssh config" in exc_info.value.msg
