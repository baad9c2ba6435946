"""Maps request paths to store keys and picks the file or directory interpretation."""
from __future__ import annotations

import logging
import time
from typing import Union

from bucket_index.core.exceptions import NotFoundError
from bucket_index.core.metrics import MetricsCollector
from bucket_index.schemas import ListingView
from bucket_index.services.directory_resolver import DirectoryResolver
from bucket_index.services.file_resolver import FileDownload, FileResolver

logger = logging.getLogger(__name__)

Resolution = Union[FileDownload, ListingView]


def store_key(request_path: str) -> str:
    """Drop exactly one leading slash; nothing else is normalized."""
    return request_path[1:] if request_path.startswith("/") else request_path


class PathResolver:
    """Exact-key (file) interpretation always wins over prefix (directory)."""

    def __init__(
        self,
        file_resolver: FileResolver,
        directory_resolver: DirectoryResolver,
        metrics: MetricsCollector,
    ) -> None:
        self._file_resolver = file_resolver
        self._directory_resolver = directory_resolver
        self._metrics = metrics

    async def resolve(self, request_path: str) -> Resolution:
        key = store_key(request_path)
        start = time.perf_counter()

        resolved: Resolution | None = await self._file_resolver.resolve(key)
        outcome = "file"
        if resolved is None:
            resolved = await self._directory_resolver.resolve(key)
            outcome = "directory"
        if resolved is None:
            outcome = "miss"

        self._record(f"resolve.{outcome}", start)
        logger.debug("Resolved %r as %s", key, outcome)
        if resolved is None:
            raise NotFoundError()
        return resolved

    def _record(self, metric_name: str, start: float) -> None:
        duration_ms = int((time.perf_counter() - start) * 1000)
        self._metrics.record(metric_name, ok=True, duration_ms=duration_ms)
        for name in (metric_name, "store.stat", "store.list", "store.transfer"):
            if self._metrics.should_alert(name):
                logger.warning("Metric alert for %s: %s", name, self._metrics.snapshot().get(name))
