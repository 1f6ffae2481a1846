"""Abstract base class for command executors.

All executors must conform to this interface so the gateway can run
commands through a local subprocess in production and through a spy or
stub in tests without changing any other code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from cmdgate.domain.models import ExecutionResult

logger = logging.getLogger(__name__)


class CommandExecutor(ABC):
    """Abstract interface for running a single shell command.

    Implementations must always resolve: timeouts and spawn failures are
    reported through the returned ExecutionResult rather than raised, and
    no process may outlive the call.

    Example usage::

        executor = SubprocessExecutor(working_dir="/tmp", timeout=30.0)
        result = await executor.execute("echo hello")
        print(result.exit_code, result.stdout)
    """

    @abstractmethod
    async def execute(self, command: str) -> ExecutionResult:
        """Run the command and wait for it to finish or time out.

        Args:
            command: The command line, passed verbatim to the shell.

        Returns:
            ExecutionResult with captured output, exit status and the
            timeout flag.
        """
        ...


class ExecutorError(Exception):
    """Raised when an executor is misconfigured or used incorrectly."""
