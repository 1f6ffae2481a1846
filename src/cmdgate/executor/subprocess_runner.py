"""Subprocess-backed command executor.

Runs each command through the system shell in its own process group,
inside a fixed working directory, and kills the whole group once the
wall-clock budget is exhausted.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import tempfile
from pathlib import Path

from cmdgate.domain.models import ExecutionResult
from cmdgate.executor.base import CommandExecutor, ExecutorError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class SubprocessExecutor(CommandExecutor):
    """Executes commands with ``asyncio.create_subprocess_shell``.

    Each call owns its process: it is either waited on after a normal exit
    or killed and reaped on timeout or cancellation before the call
    returns.
    """

    def __init__(
        self,
        working_dir: Path | str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        env: dict[str, str] | None = None,
    ) -> None:
        path = Path(working_dir) if working_dir is not None else Path(tempfile.gettempdir())
        if path.resolve() == Path(path.anchor or "/").resolve():
            raise ExecutorError(f"Refusing to execute commands in filesystem root: {path}")
        if timeout <= 0:
            raise ExecutorError(f"Timeout must be positive, got {timeout}")
        self._working_dir = path
        self._timeout = timeout
        self._env = env

    @property
    def working_dir(self) -> Path:
        return self._working_dir

    @property
    def timeout(self) -> float:
        return self._timeout

    async def execute(self, command: str) -> ExecutionResult:
        """Run a command and capture stdout, stderr and the exit status."""
        try:
            self._working_dir.mkdir(parents=True, exist_ok=True)
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=self._working_dir,
                env=self._env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Failed to spawn command %r: %s", command, e)
            return ExecutionResult(stdout="", stderr=str(e), exit_code=-1)

        logger.debug("Spawned pid=%d for %r", proc.pid, command)
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            await self._kill(proc)
            logger.warning("Command timed out after %gs: %r", self._timeout, command)
            return ExecutionResult(
                stdout="",
                stderr=f"Command timed out after {self._timeout:g} seconds",
                exit_code=-1,
                timed_out=True,
            )
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        exit_code = proc.returncode if proc.returncode is not None else -1
        logger.debug("pid=%d exited with %d", proc.pid, exit_code)
        return ExecutionResult(
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            exit_code=exit_code,
        )

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        """SIGKILL the process group and reap the shell."""
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        await proc.wait()
