"""FastAPI front-door router.

Dispatches by path:

    /<pool prefix>/*       -> random instance of the pool, fallback on failure
    GET /kv?key=           -> {"key": ..., "value": ...}
    GET /image?width=&height=&key=
                           -> transformed image bytes, 404 if absent
    GET /ai?prompt=        -> managed inference result
    /<secondary prefix>/*  -> raw forward to the secondary service
    anything else          -> 404 Not Found
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import httpx
from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from cmdgate.config.settings import Settings
from cmdgate.inference.base import InferenceError, InferenceProvider
from cmdgate.router.observer import LoggingObserver, RouterObserver
from cmdgate.router.proxy import InstancePool, InstanceProxy
from cmdgate.services.blob import BlobStore, FileSystemBlobStore
from cmdgate.services.kv import InMemoryKeyValueStore, KeyValueStore, YamlKeyValueStore
from cmdgate.services.secondary import SecondaryService
from cmdgate.utils.imaging import ImageTransform, transform_image

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
DEFAULT_PROMPT = "What is the origin of the phrase Hello, World?"
DEFAULT_IMAGE_KEY = "ai-generated/1746948849155-zjng9a.jpg"


def create_app(
    pools: list[InstancePool] | None = None,
    kv_store: KeyValueStore | None = None,
    blob_store: BlobStore | None = None,
    inference: InferenceProvider | None = None,
    secondary_url: str | None = None,
    secondary_prefix: str = "/workflow",
    kv_default_key: str = "demo-key",
    image_key: str = DEFAULT_IMAGE_KEY,
    image_format: str = "webp",
    image_fit: str = "cover",
    default_prompt: str = DEFAULT_PROMPT,
    client: httpx.AsyncClient | None = None,
    observer: RouterObserver | None = None,
) -> FastAPI:
    """Create the router application.

    Args:
        pools: Instance pools, each mounted at its own prefix. Defaults to
               one ``backend`` pool of two local instances under ``/api``.
        kv_store: Store behind ``/kv`` (default: empty in-memory store).
        blob_store: Store behind ``/image`` (default: ``./blobs``).
        inference: Provider behind ``/ai``; the route answers 404 without one.
        secondary_url: Upstream for the secondary-service prefix, if any.
        client: Optional pre-configured httpx client (for testing).
        observer: Hooks invoked for every proxied request.
    """
    if pools is None:
        pools = [
            InstancePool(
                "backend", "/api", ["http://127.0.0.1:8080", "http://127.0.0.1:8082"]
            )
        ]
    kv_store = kv_store or InMemoryKeyValueStore()
    blob_store = blob_store or FileSystemBlobStore("blobs")
    observer = observer or LoggingObserver()
    owns_client = client is None
    http_client = client or httpx.AsyncClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        for pool in pools:
            pool.start()
        logger.info("Router started (%d pool(s))", len(pools))
        yield
        for pool in pools:
            pool.stop()
        if owns_client:
            await http_client.aclose()
        logger.info("Router stopped")

    app = FastAPI(
        title="cmdgate Router",
        description="Front-door router over fixed backend instance pools",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.pools = {pool.name: pool for pool in pools}

    @app.get("/kv")
    async def get_kv(key: str | None = Query(default=None)) -> dict[str, str | None]:
        key = key or kv_default_key
        value = await kv_store.get(key)
        return {"key": key, "value": value}

    @app.get("/image")
    async def get_image(
        key: str | None = Query(default=None),
        width: int = Query(default=100, ge=1, le=4096),
        height: int = Query(default=100, ge=1, le=4096),
    ) -> Response:
        blob = await blob_store.get(key or image_key)
        if blob is None:
            return PlainTextResponse("Image not found", status_code=404)
        transform = ImageTransform(width=width, height=height, fit=image_fit, format=image_format)
        try:
            data, content_type = await asyncio.to_thread(transform_image, blob.data, transform)
        except ValueError as e:
            logger.warning("Cannot transform blob %r: %s", blob.key, e)
            return PlainTextResponse("Unsupported image", status_code=415)
        return Response(content=data, media_type=content_type)

    @app.get("/ai")
    async def run_inference(prompt: str = Query(default=default_prompt)) -> Response:
        if inference is None:
            return PlainTextResponse("Inference not configured", status_code=404)
        try:
            result = await inference.run(prompt)
        except InferenceError as e:
            logger.error("Inference failed (%s): %s", e.provider, e)
            return JSONResponse(status_code=502, content={"error": str(e)})
        return JSONResponse(content=result.model_dump())

    for pool in pools:
        proxy = InstanceProxy(pool, http_client, observer)
        _mount(app, pool.prefix, _proxy_endpoint(proxy))

    secondary = (
        SecondaryService(secondary_url, http_client) if secondary_url else None
    )
    _mount(app, "/" + secondary_prefix.strip("/"), _secondary_endpoint(secondary))

    @app.api_route("/{path:path}", methods=HTTP_METHODS)
    async def not_found(path: str) -> Response:
        return PlainTextResponse("Not Found", status_code=404)

    return app


def _mount(app: FastAPI, prefix: str, endpoint: Callable[[Request], Awaitable[Response]]) -> None:
    app.add_api_route(prefix, endpoint, methods=HTTP_METHODS)
    app.add_api_route(prefix + "/{path:path}", endpoint, methods=HTTP_METHODS)


def _proxy_endpoint(proxy: InstanceProxy) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        return await proxy.handle(request)

    return endpoint


def _secondary_endpoint(
    secondary: SecondaryService | None,
) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        if secondary is None:
            return PlainTextResponse("Service not configured", status_code=404)
        try:
            return await secondary.forward(request)
        except httpx.TransportError as e:
            logger.warning("Secondary service unreachable: %s", e)
            return PlainTextResponse("Bad Gateway", status_code=502)

    return endpoint


def build_app(settings: Settings, client: httpx.AsyncClient | None = None) -> FastAPI:
    """Assemble the router from loaded settings."""
    pools = [
        InstancePool(
            name,
            cfg.prefix,
            list(cfg.instances),
            forward_timeout=cfg.forward_timeout,
        )
        for name, cfg in settings.router.pools.items()
    ]

    svc = settings.services
    kv_store: KeyValueStore = (
        YamlKeyValueStore(svc.kv_path) if svc.kv_path else InMemoryKeyValueStore()
    )

    return create_app(
        pools=pools,
        kv_store=kv_store,
        blob_store=FileSystemBlobStore(svc.blob_root),
        inference=_build_inference(settings),
        secondary_url=svc.secondary_url,
        secondary_prefix=svc.secondary_prefix,
        kv_default_key=svc.kv_default_key,
        image_key=svc.image_key,
        image_format=svc.image_format,
        image_fit=svc.image_fit,
        default_prompt=settings.inference.default_prompt,
        client=client,
    )


def _build_inference(settings: Settings) -> InferenceProvider | None:
    cfg = settings.inference
    if cfg.provider == "openai":
        api_key = settings.openai_api_key.get_secret_value()
        if not api_key:
            logger.warning("OpenAI provider selected but no API key set; /ai disabled")
            return None
        from cmdgate.inference.openai import OpenAIProvider
        return OpenAIProvider(
            api_key=api_key, model=cfg.model, base_url=cfg.base_url, max_tokens=cfg.max_tokens
        )
    if cfg.provider == "anthropic":
        api_key = settings.anthropic_api_key.get_secret_value()
        if not api_key:
            logger.warning("Anthropic provider selected but no API key set; /ai disabled")
            return None
        from cmdgate.inference.anthropic import AnthropicProvider
        return AnthropicProvider(api_key=api_key, model=cfg.model, max_tokens=cfg.max_tokens)
    return None

