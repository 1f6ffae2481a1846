"""Command screening and execution for cmdgate.

Screens submitted commands against a fixed denylist and runs the accepted
ones in a subprocess under a hard timeout.

Public API:
    CommandValidator -- Denylist screening
    CommandExecutor -- Abstract executor base class
    SubprocessExecutor -- Local subprocess implementation
"""

from cmdgate.executor.base import CommandExecutor, ExecutorError
from cmdgate.executor.denylist import DEFAULT_DENYLIST, CommandValidator, is_dangerous
from cmdgate.executor.subprocess_runner import SubprocessExecutor

__all__ = [
    "DEFAULT_DENYLIST",
    "CommandExecutor",
    "CommandValidator",
    "ExecutorError",
    "SubprocessExecutor",
    "is_dangerous",
]
