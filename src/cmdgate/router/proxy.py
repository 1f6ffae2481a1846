"""Request forwarding to instance pools, with a degraded fallback.

A pool is a fixed list of backend base URLs. For each request the proxy
picks one instance, stamps its last-contact time, then forwards the request
once. A transport failure is answered with a synthesized 500 body that
carries the instance's previous contact time; the request is neither
retried nor sent to another instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from cmdgate.domain.models import FallbackResponse, LifecycleState
from cmdgate.router.lifecycle import (
    ErrorCallback,
    InstanceLifecycle,
    StartCallback,
    StopCallback,
)
from cmdgate.router.observer import LoggingObserver, RouterObserver
from cmdgate.router.selector import InstanceSelector, RandomSelector
from cmdgate.router.state import InstanceStateStore

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Backend instance is currently unavailable"

# Headers that describe a single hop and must not be relayed
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)


async def forward_request(
    client: httpx.AsyncClient,
    base_url: str,
    request: Request,
    timeout: float | None = None,
) -> Response:
    """Relay a request to ``base_url`` and return the upstream response.

    Method, path, query string, end-to-end headers and body are passed
    through unchanged.

    Raises:
        httpx.TransportError: If the upstream cannot be reached or times out.
    """
    url = base_url.rstrip("/") + request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    headers = [
        (k, v) for k, v in request.headers.items() if k.lower() not in HOP_BY_HOP_HEADERS
    ]
    body = await request.body()

    upstream = await client.request(
        request.method,
        url,
        headers=headers,
        content=body,
        timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
    )

    response = Response(content=upstream.content, status_code=upstream.status_code)
    for k, v in upstream.headers.multi_items():
        # httpx has already decoded the body
        if k.lower() in HOP_BY_HOP_HEADERS or k.lower() == "content-encoding":
            continue
        response.headers.append(k, v)
    return response


@dataclass
class BackendInstance:
    id: int
    base_url: str
    lifecycle: InstanceLifecycle = field(repr=False)


class InstancePool:
    """A named, fixed-size set of backend instances behind one path prefix."""

    def __init__(
        self,
        name: str,
        prefix: str,
        instance_urls: list[str],
        selector: InstanceSelector | None = None,
        store: InstanceStateStore | None = None,
        forward_timeout: float = 30.0,
        on_start: StartCallback | None = None,
        on_stop: StopCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        if not instance_urls:
            raise ValueError(f"Pool {name!r} needs at least one instance")
        self._name = name
        self._prefix = prefix
        self._selector = selector or RandomSelector()
        self._store = store or InstanceStateStore()
        self._forward_timeout = forward_timeout
        self._instances = tuple(
            BackendInstance(
                id=i,
                base_url=url,
                lifecycle=InstanceLifecycle(
                    i, on_start=on_start, on_stop=on_stop, on_error=on_error
                ),
            )
            for i, url in enumerate(instance_urls)
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def size(self) -> int:
        return len(self._instances)

    @property
    def instances(self) -> tuple[BackendInstance, ...]:
        return self._instances

    @property
    def store(self) -> InstanceStateStore:
        return self._store

    @property
    def forward_timeout(self) -> float:
        return self._forward_timeout

    def instance(self, instance_id: int) -> BackendInstance:
        return self._instances[instance_id]

    def select(self) -> BackendInstance:
        return self._instances[self._selector.pick(self.size)]

    def start(self) -> None:
        for inst in self._instances:
            inst.lifecycle.start()
        logger.info("Pool %s started with %d instance(s) at %s", self._name, self.size, self._prefix)

    def stop(self) -> None:
        for inst in self._instances:
            if inst.lifecycle.state in (LifecycleState.RUNNING, LifecycleState.FAULTED):
                inst.lifecycle.stop()
        logger.info("Pool %s stopped", self._name)


class InstanceProxy:
    """Forwards requests to one pool and synthesizes fallbacks."""

    def __init__(
        self,
        pool: InstancePool,
        client: httpx.AsyncClient,
        observer: RouterObserver | None = None,
    ) -> None:
        self._pool = pool
        self._client = client
        self._observer = observer or LoggingObserver()

    @property
    def pool(self) -> InstancePool:
        return self._pool

    async def handle(self, request: Request) -> Response:
        """Pick an instance for the request and forward to it."""
        self._observer.request_started(self._pool.name, request.method, request.url.path)
        instance = self._pool.select()
        self._observer.instance_selected(self._pool.name, instance.id)
        return await self.forward(request, instance.id)

    async def forward(self, request: Request, instance_id: int) -> Response:
        """Forward to a specific instance, falling back on transport failure."""
        instance = self._pool.instance(instance_id)
        previous = self._pool.store.record_contact(instance_id)
        try:
            response = await forward_request(
                self._client, instance.base_url, request, timeout=self._pool.forward_timeout
            )
        except httpx.TransportError as e:
            instance.lifecycle.fail(e)
            self._observer.forward_completed(self._pool.name, instance_id, None, e)
            return self._fallback(instance_id, previous, e)

        instance.lifecycle.mark_reachable()
        self._observer.forward_completed(self._pool.name, instance_id, response.status_code)
        return response

    @staticmethod
    def _fallback(instance_id: int, previous: float | None, error: BaseException) -> JSONResponse:
        body = FallbackResponse(
            message=FALLBACK_MESSAGE,
            instance=instance_id,
            last_request_timestamp=previous,
            error=str(error) or type(error).__name__,
        )
        return JSONResponse(status_code=500, content=body.model_dump())
