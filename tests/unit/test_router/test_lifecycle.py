"""Tests for the instance lifecycle state machine."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cmdgate.domain.models import LifecycleState
from cmdgate.router.lifecycle import InstanceLifecycle, LifecycleError


@pytest.fixture
def hooks() -> dict[str, MagicMock]:
    return {"on_start": MagicMock(), "on_stop": MagicMock(), "on_error": MagicMock()}


@pytest.fixture
def lifecycle(hooks: dict[str, MagicMock]) -> InstanceLifecycle:
    return InstanceLifecycle(3, **hooks)


class TestInstanceLifecycle:
    def test_initial_state(self, lifecycle: InstanceLifecycle) -> None:
        assert lifecycle.state is LifecycleState.UNINITIALIZED
        assert lifecycle.last_error is None

    def test_start_stop_restart(self, lifecycle: InstanceLifecycle, hooks) -> None:
        lifecycle.start()
        assert lifecycle.state is LifecycleState.RUNNING
        lifecycle.stop()
        assert lifecycle.state is LifecycleState.STOPPED
        lifecycle.start()
        assert lifecycle.state is LifecycleState.RUNNING
        assert hooks["on_start"].call_count == 2
        hooks["on_stop"].assert_called_once_with(3)

    def test_fail_and_recover(self, lifecycle: InstanceLifecycle, hooks) -> None:
        lifecycle.start()
        err = ConnectionError("refused")
        lifecycle.fail(err)
        assert lifecycle.state is LifecycleState.FAULTED
        assert lifecycle.last_error is err
        hooks["on_error"].assert_called_once_with(3, err)

        lifecycle.mark_reachable()
        assert lifecycle.state is LifecycleState.RUNNING
        assert lifecycle.last_error is None

    def test_repeated_faults(self, lifecycle: InstanceLifecycle, hooks) -> None:
        lifecycle.fail(RuntimeError("a"))
        lifecycle.fail(RuntimeError("b"))
        assert lifecycle.state is LifecycleState.FAULTED
        assert hooks["on_error"].call_count == 2

    def test_fail_while_stopped_keeps_state(self, lifecycle: InstanceLifecycle, hooks) -> None:
        lifecycle.start()
        lifecycle.stop()
        lifecycle.fail(RuntimeError("late"))
        assert lifecycle.state is LifecycleState.STOPPED
        hooks["on_error"].assert_called_once()

    def test_mark_reachable_on_running_is_noop(self, lifecycle: InstanceLifecycle, hooks) -> None:
        lifecycle.start()
        lifecycle.mark_reachable()
        assert hooks["on_start"].call_count == 1

    def test_mark_reachable_does_not_revive_stopped(self, lifecycle: InstanceLifecycle) -> None:
        lifecycle.start()
        lifecycle.stop()
        lifecycle.mark_reachable()
        assert lifecycle.state is LifecycleState.STOPPED

    def test_invalid_transitions(self, lifecycle: InstanceLifecycle) -> None:
        with pytest.raises(LifecycleError):
            lifecycle.stop()
        lifecycle.start()
        with pytest.raises(LifecycleError):
            lifecycle.start()

    def test_default_callbacks_log(self, caplog: pytest.LogCaptureFixture) -> None:
        lc = InstanceLifecycle(0)
        with caplog.at_level("INFO", logger="cmdgate.router.lifecycle"):
            lc.start()
            lc.stop()
        assert "Instance 0 started" in caplog.text
        assert "Instance 0 shut down" in caplog.text
