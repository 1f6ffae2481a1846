"""cmdgate -- Denylist-gated shell command gateway and instance router.

This package implements two cooperating HTTP services: an execution
gateway that screens and runs one shell command per request under a hard
timeout, and a front-door router that spreads requests over fixed pools of
backend instances and answers with a degraded response when the chosen
instance cannot be reached.
"""

__version__ = "0.1.0"
