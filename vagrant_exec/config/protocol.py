from __future__ import annotations

from typing import Annotated, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


class ConfigError(Exception):
    """Raised when the task file or a target in it is missing or invalid."""


def _to_kebab(name: str) -> str:
    return name.replace("_", "-")


class _BaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_kebab,
        populate_by_name=True,
        frozen=True,
    )


Slug = Annotated[
    str,
    Field(
        min_length=1,
        max_length=50,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
    ),
]

Port = Annotated[int, Field(ge=1, le=65535)]


class TaskOptions(_BaseModel):
    """Options for one task, as supplied by the user.

    Fields left unset stay ``None`` so the resolver can tell
    an explicit value from a missing one.
    """

    model_config = ConfigDict(extra="forbid")

    command: Union[str, List[str], None] = None
    cwd: Optional[str] = None
    user: Optional[str] = None
    host: Optional[str] = None
    port: Optional[Port] = None
    password: Optional[str] = None
    keyfile: Optional[str] = None


class TaskDefaults(_BaseModel):
    """Values used for task options the user did not set.

    Setting a field to ``None`` leaves it for ``vagrant ssh-config``
    discovery to fill in.
    """

    cwd: Optional[str] = "/vagrant"
    user: Optional[str] = "vagrant"
    host: Optional[str] = "127.0.0.1"
    port: Optional[Port] = 2222


class ResolvedOptions(_BaseModel):
    """Task options after defaulting, plus the private key text."""

    command: Union[str, List[str], None] = None
    cwd: Optional[str] = None
    user: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = Field(default=None, repr=False)
    keyfile: Optional[str] = None
    key: Optional[str] = Field(default=None, repr=False)


class SshConfig(_BaseModel):
    """First host block of ``vagrant ssh-config`` output.

    All fields are ``None`` when no config could be obtained.
    """

    host_alias: Optional[str] = None
    host: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    identity_file: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self == SshConfig()


class ResolvedSshOptions(_BaseModel):
    """Final connection parameters for the remote session."""

    host: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = Field(default=None, repr=False)
    key: Optional[str] = Field(default=None, repr=False)

    @model_validator(mode="after")
    def validate_single_auth(self) -> ResolvedSshOptions:
        if self.password is not None and self.key is not None:
            raise ValueError("Only one of password or key may be set")
        return self

    @property
    def auth_method(self) -> str:
        if self.password is not None:
            return "password"
        elif self.key is not None:
            return "key"
        else:
            return "none"

    def display(self) -> dict[str, object]:
        """Connection parameters without secrets, for logs and output."""
        return {
            "host": self.host,
            "user": self.user,
            "port": self.port,
            "auth": self.auth_method,
        }


class Config(_BaseModel):
    """Top-level task file: shared options and named targets."""

    model_config = ConfigDict(extra="forbid")

    options: TaskOptions = Field(default_factory=lambda: TaskOptions())
    targets: Dict[Slug, TaskOptions] = Field(default_factory=dict)

    def task_options(self, target: str) -> TaskOptions:
        """Layer a target's explicitly set options over the shared ones."""
        if target not in self.targets:
            raise ConfigError(f"Unknown target: {target}")
        merged = {
            **self.options.model_dump(exclude_unset=True),
            **self.targets[target].model_dump(exclude_unset=True),
        }
        return TaskOptions.model_validate(merged)

    def select_targets(self, names: list[str] | None = None) -> list[str]:
        """Return the requested target slugs, or all of them in order."""
        if not names:
            return list(self.targets)
        unknown = [n for n in names if n not in self.targets]
        if unknown:
            raise ConfigError(f"Unknown target(s): {', '.join(unknown)}")
        return list(names)
