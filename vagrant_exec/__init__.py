"""Run shell commands on a Vagrant machine over SSH."""

__version__ = "0.1.0"

from .config import TaskDefaults, TaskOptions
from .errors import VagrantExecError
from .pipeline import TaskResult, execute, run_task

__all__ = [
    "TaskDefaults",
    "TaskOptions",
    "TaskResult",
    "VagrantExecError",
    "execute",
    "run_task",
]
