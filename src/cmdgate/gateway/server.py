"""FastAPI HTTP server for the execution gateway.

    GET  /     -> {"status": "healthy", "service": ..., "timestamp": ...}
    POST /run  <- {"command": "uname -a"}

``/run`` always answers 200 and signals the outcome through ``success``.
Only faults outside the gateway's own handling (e.g. an unparsable body)
produce a 500.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cmdgate.domain.models import GatewayResponse, HealthResponse
from cmdgate.executor.denylist import DEFAULT_DENYLIST, CommandValidator
from cmdgate.executor.subprocess_runner import DEFAULT_TIMEOUT, SubprocessExecutor
from cmdgate.gateway.handler import ExecutionGateway

logger = logging.getLogger(__name__)


def create_app(
    gateway: ExecutionGateway | None = None,
    working_dir: Path | str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    denylist: list[str] | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure the gateway application.

    Args:
        gateway: Optional pre-configured ExecutionGateway (for testing).
        working_dir: Directory commands run in (default: system temp dir).
        timeout: Wall-clock budget per command, in seconds.
        denylist: Patterns to block (default: the built-in denylist).
        cors_origins: Allowed CORS origins (default: all).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Ready to execute Linux commands via POST /run")
        logger.info("Health check available at GET /")
        yield
        logger.info("Gateway stopped")

    if gateway is None:
        gateway = ExecutionGateway(
            executor=SubprocessExecutor(working_dir=working_dir, timeout=timeout),
            validator=CommandValidator(denylist if denylist is not None else DEFAULT_DENYLIST),
        )

    app = FastAPI(
        title="cmdgate Execution Gateway",
        description="Runs denylist-screened shell commands under a hard timeout",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    @app.middleware("http")
    async def internal_error_guard(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "timestamp": time.time(),
                },
            )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def health_check() -> HealthResponse:
        return HealthResponse()

    @app.post("/run", response_model=GatewayResponse, response_model_exclude_none=True)
    async def run_command(request: Request) -> GatewayResponse:
        # An absent body counts as an empty object
        payload = await request.json() if (await request.body()).strip() else {}
        g: ExecutionGateway = app.state.gateway
        return await g.handle(payload)

    return app

