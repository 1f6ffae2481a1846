"""Lifecycle state machine for backend instances.

States::

    uninitialized --start--> running --stop--> stopped --start--> running
                                |
                                +--fail--> faulted --start--> running
                                              |
                                              +--stop--> stopped

Transition callbacks are plain callables so the router can log, alert or
bootstrap without depending on any particular hosting runtime.
"""

from __future__ import annotations

import logging
from typing import Callable

from cmdgate.domain.models import LifecycleState

logger = logging.getLogger(__name__)

StartCallback = Callable[[int], None]
StopCallback = Callable[[int], None]
ErrorCallback = Callable[[int, BaseException], None]

_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.UNINITIALIZED: frozenset({LifecycleState.RUNNING, LifecycleState.FAULTED}),
    LifecycleState.RUNNING: frozenset({LifecycleState.STOPPED, LifecycleState.FAULTED}),
    LifecycleState.STOPPED: frozenset({LifecycleState.RUNNING}),
    LifecycleState.FAULTED: frozenset(
        {LifecycleState.RUNNING, LifecycleState.STOPPED, LifecycleState.FAULTED}
    ),
}


def _log_start(instance_id: int) -> None:
    logger.info("Instance %d started", instance_id)


def _log_stop(instance_id: int) -> None:
    logger.info("Instance %d shut down", instance_id)


def _log_error(instance_id: int, error: BaseException) -> None:
    logger.error("Instance %d error: %s", instance_id, error)


class InstanceLifecycle:
    """Tracks one instance's lifecycle state and fires transition hooks."""

    def __init__(
        self,
        instance_id: int,
        on_start: StartCallback | None = None,
        on_stop: StopCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._instance_id = instance_id
        self._state = LifecycleState.UNINITIALIZED
        self._on_start = on_start or _log_start
        self._on_stop = on_stop or _log_stop
        self._on_error = on_error or _log_error
        self._last_error: BaseException | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    def start(self) -> None:
        self._transition(LifecycleState.RUNNING)
        self._last_error = None
        self._on_start(self._instance_id)

    def stop(self) -> None:
        self._transition(LifecycleState.STOPPED)
        self._on_stop(self._instance_id)

    def fail(self, error: BaseException) -> None:
        """Record a fault. A stopped instance keeps its state."""
        self._last_error = error
        if self._state is not LifecycleState.STOPPED:
            self._transition(LifecycleState.FAULTED)
        self._on_error(self._instance_id, error)

    def mark_reachable(self) -> None:
        """Bring a faulted or never-started instance back to running."""
        if self._state in (LifecycleState.UNINITIALIZED, LifecycleState.FAULTED):
            self.start()

    def _transition(self, target: LifecycleState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise LifecycleError(
                f"Instance {self._instance_id}: cannot go from {self._state.value} to {target.value}"
            )
        logger.debug("Instance %d: %s -> %s", self._instance_id, self._state.value, target.value)
        self._state = target


class LifecycleError(Exception):
    """Raised on an invalid lifecycle transition."""
