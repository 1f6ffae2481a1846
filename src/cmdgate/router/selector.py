"""Instance selection strategies.

A selector picks which instance of a pool receives the next request. The
default draws uniformly at random with no affinity and no load awareness;
a latency-aware strategy can replace it by implementing the same
interface.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class InstanceSelector(ABC):
    """Abstract strategy interface for choosing an instance id."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy."""
        ...

    @abstractmethod
    def pick(self, pool_size: int) -> int:
        """Return an instance id in ``[0, pool_size)``.

        Raises:
            ValueError: If pool_size is smaller than 1.
        """
        ...


class RandomSelector(InstanceSelector):
    """Uniform random choice, independent per call."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return "random"

    def pick(self, pool_size: int) -> int:
        if pool_size < 1:
            raise ValueError(f"Pool size must be at least 1, got {pool_size}")
        return self._rng.randrange(pool_size)
