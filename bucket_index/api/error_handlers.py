"""Shared FastAPI exception handlers."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from bucket_index.core.exceptions import DomainError
from bucket_index.core.logging import LOGGER_NAME


def register_exception_handlers(app: FastAPI) -> None:
    """Attach global exception handlers to the FastAPI app.

    Errors are answered in plain text as ``"<status> <detail>"``.
    """

    logger = logging.getLogger(LOGGER_NAME)

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError) -> PlainTextResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed (%s %s): %s",
                request.method,
                request.url.path,
                exc.detail,
                exc_info=exc.__cause__ or exc,
            )
        else:
            logger.debug("Request failed (%s %s): %s", request.method, request.url.path, exc.detail)
        return PlainTextResponse(f"{exc.status_code} {exc.detail}", status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> PlainTextResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return PlainTextResponse(
            "500 Internal Server Error",
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )
