"""Secondary-service collaborator: forwards raw requests unmodified."""

from __future__ import annotations

import logging

import httpx
from fastapi import Request, Response

from cmdgate.router.proxy import forward_request

logger = logging.getLogger(__name__)


class SecondaryService:
    """Relays every request under its prefix to one fixed upstream."""

    def __init__(self, base_url: str, client: httpx.AsyncClient, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def forward(self, request: Request) -> Response:
        """Forward the request.

        Raises:
            httpx.TransportError: If the upstream cannot be reached.
        """
        logger.debug("Forwarding %s %s to %s", request.method, request.url.path, self._base_url)
        return await forward_request(self._client, self._base_url, request, timeout=self._timeout)
