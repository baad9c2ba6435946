"""Catch-all route serving objects and directory listings."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from fastapi.templating import Jinja2Templates
from starlette.background import BackgroundTask

from bucket_index.api.dependencies import get_path_resolver
from bucket_index.schemas import ListingView
from bucket_index.services.file_resolver import FileDownload
from bucket_index.services.path_resolver import PathResolver

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES = Jinja2Templates(directory=str(BASE_DIR / "templates"))
LISTING_TEMPLATE = "listing.html"
LISTING_MEDIA_TYPE = "text/html; charset=utf-8"

router = APIRouter()


def render_listing(view: ListingView) -> Iterator[str]:
    """Render the listing lazily; failures after headers are sent truncate the page."""
    template = TEMPLATES.get_template(LISTING_TEMPLATE)
    try:
        yield from template.generate(view=view)
    except Exception:  # noqa: BLE001
        logger.exception("Rendering listing for %s failed", view.path)


def file_response(download: FileDownload) -> StreamingResponse:
    return StreamingResponse(
        download.body(),
        media_type=download.content_type,
        headers={"Content-Length": str(download.size)},
        background=BackgroundTask(download.stream.close),
    )


@router.get("/{path:path}", include_in_schema=False)
async def serve(
    request: Request,
    resolver: PathResolver = Depends(get_path_resolver),
) -> StreamingResponse:
    """Serve the object named by the path, else the listing of the prefix, else 404."""

    # decoded path as received; keys may contain "?" or "#"
    resolved = await resolver.resolve(request.scope["path"])
    if isinstance(resolved, FileDownload):
        return file_response(resolved)
    return StreamingResponse(render_listing(resolved), media_type=LISTING_MEDIA_TYPE)
