"""FastAPI application factory."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Optional
from uuid import uuid4

from fastapi import FastAPI
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from bucket_index import __version__
from bucket_index.api.error_handlers import register_exception_handlers
from bucket_index.core.config import Settings, get_settings
from bucket_index.core.logging import configure_logging, request_context
from bucket_index.services.registry import ServiceRegistry
from bucket_index.web.routes import router as web_router

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware:
    """Tags each request with an id for logs and echoes it in the response."""

    def __init__(self, app, logger: logging.Logger):
        self.app = app
        self.logger = logger

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
            await send(message)

        with request_context(request_id):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                duration_ms = int((time.perf_counter() - start) * 1000)
                self.logger.debug(
                    "%s %s -> %s (%d ms)",
                    scope.get("method"),
                    scope.get("path"),
                    status_code,
                    duration_ms,
                )


def create_app(settings: Optional[Settings] = None, *, store: Optional[Any] = None) -> FastAPI:
    """Build the application; ``store`` replaces the S3 client (used by tests)."""

    settings = settings or get_settings()
    logger = configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the store client for the lifetime of the process."""

        registry = ServiceRegistry(settings, store=store)
        app.state.services = registry

        await registry.startup()
        try:
            yield
        finally:
            await registry.shutdown()

    app = FastAPI(
        title="Bucket Index",
        description="Browse an S3-compatible bucket like a file server",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(RequestIdMiddleware, logger=logger)
    app.include_router(web_router)
    register_exception_handlers(app)
    return app
