"""Observability hooks for the router.

The proxy calls an observer at three fixed points of every proxied
request instead of logging inline. The default observer logs; a metrics
or tracing observer can replace it.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class RouterObserver:
    """No-op base observer. Override the hooks you need."""

    def request_started(self, pool: str, method: str, path: str) -> None:
        pass

    def instance_selected(self, pool: str, instance_id: int) -> None:
        pass

    def forward_completed(
        self,
        pool: str,
        instance_id: int,
        status_code: int | None,
        error: BaseException | None = None,
    ) -> None:
        pass


class LoggingObserver(RouterObserver):
    """Logs each hook through the standard logging module."""

    def request_started(self, pool: str, method: str, path: str) -> None:
        logger.info("[%s] %s %s", pool, method, path)

    def instance_selected(self, pool: str, instance_id: int) -> None:
        logger.debug("[%s] selected instance %d", pool, instance_id)

    def forward_completed(
        self,
        pool: str,
        instance_id: int,
        status_code: int | None,
        error: BaseException | None = None,
    ) -> None:
        if error is not None:
            logger.warning("[%s] instance %d unreachable: %s", pool, instance_id, error)
        else:
            logger.info("[%s] instance %d answered %s", pool, instance_id, status_code)
