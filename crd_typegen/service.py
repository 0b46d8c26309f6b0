"""FastAPI application serving rendered type declarations."""

from __future__ import annotations

import time
from typing import Callable, Tuple

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .codegen.core.generator import GenerationResult
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    status: str


def create_app(render: Callable[[], GenerationResult]) -> FastAPI:
    """Create the FastAPI application.

    Every request to ``/`` runs ``render`` afresh over the same immutable
    package graph, so requests share no mutable state.
    """
    app = FastAPI(title="crd-typegen", version="0.1.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/", response_class=PlainTextResponse)
    def render_types() -> PlainTextResponse:
        started = time.perf_counter()
        try:
            result = render()
        finally:
            logger.info("request took %.3fs", time.perf_counter() - started)

        if not result.success:
            logger.warning("failed: %s", result.error_message)
            return PlainTextResponse(f"error: {result.error_message}", status_code=500)
        return PlainTextResponse(result.code)

    return app


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` or ``:port`` into host and port.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def serve(app: FastAPI, address: str) -> None:
    """Serve app with uvicorn until interrupted."""
    host, port = parse_listen_address(address)
    logger.info("server listening at %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
