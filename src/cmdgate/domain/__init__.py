"""Domain models for cmdgate.

This package contains the core data structures and enumerations shared by
the execution gateway and the router. All models use Pydantic v2 for
validation and serialization.
"""

from cmdgate.domain.models import (
    CommandRequest,
    ExecutionResult,
    FallbackResponse,
    GatewayResponse,
    HealthResponse,
    InstanceRecord,
    LifecycleState,
)

__all__ = [
    "CommandRequest",
    "ExecutionResult",
    "FallbackResponse",
    "GatewayResponse",
    "HealthResponse",
    "InstanceRecord",
    "LifecycleState",
]
