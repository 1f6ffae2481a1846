"""Front-door router module for cmdgate.

Spreads requests across fixed pools of backend instances, records when
each instance was last contacted, and answers with a degraded response
when the chosen instance cannot be reached.

Public API:
    InstanceSelector -- Abstract selection strategy
    RandomSelector -- Uniform random selection
    InstanceStateStore -- Per-instance last-contact bookkeeping
    InstanceLifecycle -- Instance lifecycle state machine
    InstancePool -- Named pool of backend instances
    InstanceProxy -- Forwarding with fallback
    RouterObserver -- Observability hooks
"""

from cmdgate.router.lifecycle import InstanceLifecycle, LifecycleError
from cmdgate.router.observer import LoggingObserver, RouterObserver
from cmdgate.router.proxy import InstancePool, InstanceProxy
from cmdgate.router.selector import InstanceSelector, RandomSelector
from cmdgate.router.state import InstanceStateStore

__all__ = [
    "InstanceLifecycle",
    "InstancePool",
    "InstanceProxy",
    "InstanceSelector",
    "InstanceStateStore",
    "LifecycleError",
    "LoggingObserver",
    "RandomSelector",
    "RouterObserver",
]
