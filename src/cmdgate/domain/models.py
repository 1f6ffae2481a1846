"""Core domain models for the cmdgate system.

These models represent the data flowing through both services: command
requests and execution results on the gateway side, instance records and
degraded responses on the router side.
"""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class LifecycleState(str, enum.Enum):
    """Lifecycle state of a backend instance as seen by the router."""

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"
    FAULTED = "faulted"  # Last forward attempt failed at the transport level


# ---------------------------------------------------------------------------
# Execution Gateway Models
# ---------------------------------------------------------------------------


class CommandRequest(BaseModel):
    """A single shell command submitted to the gateway.

    The command must be text and must not be blank; it is stored trimmed.
    Anything else fails validation before the denylist is consulted.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    command: str = Field(description="Shell command line to execute")

    @field_validator("command")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("command must not be empty")
        return value


class ExecutionResult(BaseModel):
    """Outcome of running one command in a subprocess."""

    model_config = ConfigDict(frozen=True)

    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error or failure message")
    exit_code: int = Field(description="Process exit status, -1 on timeout or spawn failure")
    timed_out: bool = Field(default=False, description="Whether the wall-clock budget was exceeded")


class GatewayResponse(BaseModel):
    """Body returned by ``POST /run``.

    ``success`` tells whether the command was executed at all; a non-zero
    ``exit_code`` with ``success=True`` is a command that ran and failed.
    """

    success: bool
    command: str | None = None
    output: str | None = None
    error: str | None = None
    exit_code: int | None = None
    timestamp: float = Field(default_factory=time.time, description="Epoch seconds")


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "Linux Command Executor"
    timestamp: float = Field(default_factory=time.time)


# ---------------------------------------------------------------------------
# Router Models
# ---------------------------------------------------------------------------


class InstanceRecord(BaseModel):
    """Snapshot of the router's bookkeeping for one backend instance."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0, description="Instance index within its pool")
    last_request_timestamp: float | None = Field(
        default=None, description="Epoch seconds of the last forward attempt, if any"
    )


class FallbackResponse(BaseModel):
    """Degraded body synthesized when an instance cannot be reached."""

    message: str
    instance: int
    timestamp: float = Field(default_factory=time.time)
    last_request_timestamp: float | None = None
    error: str
