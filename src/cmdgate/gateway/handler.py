"""Request orchestration for the execution gateway.

Validates the submitted command, screens it against the denylist, runs it
and shapes the result into a GatewayResponse. Every outcome, including
unexpected faults, is reported in the body rather than as an exception.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from pydantic import ValidationError

from cmdgate.domain.models import CommandRequest, GatewayResponse
from cmdgate.executor.base import CommandExecutor
from cmdgate.executor.denylist import CommandValidator

logger = logging.getLogger(__name__)

NO_COMMAND_MESSAGE = "No command provided"
DENIED_MESSAGE = "Command not allowed for security reasons"


class ExecutionGateway:
    """Validator -> executor pipeline behind ``POST /run``.

    Example usage::

        gateway = ExecutionGateway(SubprocessExecutor(working_dir="/tmp"))
        response = await gateway.handle({"command": "uname -a"})
        assert response.success
    """

    def __init__(
        self,
        executor: CommandExecutor,
        validator: CommandValidator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._executor = executor
        self._validator = validator or CommandValidator()
        self._clock = clock

    @property
    def validator(self) -> CommandValidator:
        return self._validator

    async def handle(self, payload: Any) -> GatewayResponse:
        """Handle one decoded ``/run`` request body.

        Args:
            payload: The JSON body, expected to be ``{"command": "..."}``.
                     Any other shape is treated as a missing command.
        """
        try:
            request = self._parse(payload)
            if request is None:
                return self._reject(NO_COMMAND_MESSAGE)

            pattern = self._validator.match(request.command)
            if pattern is not None:
                logger.warning("Blocked command %r (matched %r)", request.command, pattern)
                return self._reject(DENIED_MESSAGE)

            logger.info("Executing: %s", request.command)
            result = await self._executor.execute(request.command)
            if result.timed_out:
                logger.warning("Command timed out: %s", request.command)

            return GatewayResponse(
                success=True,
                command=request.command,
                output=result.stdout,
                error=result.stderr,
                exit_code=result.exit_code,
                timestamp=self._clock(),
            )
        except Exception as e:
            logger.exception("Server error while handling command")
            return self._reject(f"Server error: {e}")

    @staticmethod
    def _parse(payload: Any) -> CommandRequest | None:
        if not isinstance(payload, dict):
            return None
        try:
            return CommandRequest.model_validate({"command": payload.get("command")})
        except ValidationError:
            return None

    def _reject(self, message: str) -> GatewayResponse:
        return GatewayResponse(success=False, error=message, timestamp=self._clock())
