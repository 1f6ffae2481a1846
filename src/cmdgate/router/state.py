"""Per-instance last-contact bookkeeping.

The store is the only state shared between concurrent router requests.
Each entry is a single scalar written last-writer-wins under a lock, and
never moves backwards even if the clock does.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from cmdgate.domain.models import InstanceRecord

logger = logging.getLogger(__name__)


class InstanceStateStore:
    """Tracks when each instance of one pool was last contacted."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last_contact: dict[int, float] = {}
        self._lock = threading.Lock()

    def record_contact(self, instance_id: int) -> float | None:
        """Stamp the instance with the current time.

        Called before a request is forwarded, so a forward that never
        completes still leaves a trace of the attempt.

        Returns:
            The timestamp recorded before this call, or None if the
            instance had never been contacted.
        """
        now = self._clock()
        with self._lock:
            previous = self._last_contact.get(instance_id)
            self._last_contact[instance_id] = now if previous is None else max(previous, now)
        logger.debug("Recorded contact with instance %d (previous=%s)", instance_id, previous)
        return previous

    def last_contact(self, instance_id: int) -> float | None:
        with self._lock:
            return self._last_contact.get(instance_id)

    def get(self, instance_id: int) -> InstanceRecord:
        return InstanceRecord(id=instance_id, last_request_timestamp=self.last_contact(instance_id))

    def snapshot(self) -> list[InstanceRecord]:
        """All recorded instances, ordered by id."""
        with self._lock:
            items = sorted(self._last_contact.items())
        return [InstanceRecord(id=i, last_request_timestamp=ts) for i, ts in items]
