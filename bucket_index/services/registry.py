"""Service registry that wires the store client and the resolvers together."""
import asyncio
import logging
from typing import Any, Optional

from bucket_index.core.config import Settings
from bucket_index.core.logging import request_context
from bucket_index.core.metrics import MetricsCollector
from bucket_index.core.object_store import S3ObjectStore
from bucket_index.services.directory_resolver import DirectoryResolver
from bucket_index.services.file_resolver import FileResolver
from bucket_index.services.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Container object for dependency injection.

    Owns the single store client shared by all requests.
    """

    def __init__(self, settings: Settings, *, store: Optional[Any] = None) -> None:
        self.settings = settings
        self.metrics = MetricsCollector()
        self.store = store if store is not None else S3ObjectStore(settings)
        self.file_resolver = FileResolver(
            self.store,
            self.metrics,
            stat_error_policy=settings.stat_error_policy,
        )
        self.directory_resolver = DirectoryResolver(self.store, self.metrics)
        self.path_resolver = PathResolver(
            file_resolver=self.file_resolver,
            directory_resolver=self.directory_resolver,
            metrics=self.metrics,
        )
        self._started = False
        self._lifecycle_lock = asyncio.Lock()

    async def startup(self) -> None:
        async with self._lifecycle_lock:
            if self._started:
                return
            with request_context("bg:registry"):
                logger.info(
                    "Serving bucket %s from %s (stat errors: %s)",
                    self.settings.bucket,
                    self.settings.endpoint_url,
                    self.settings.stat_error_policy,
                )
                self._started = True

    async def shutdown(self) -> None:
        async with self._lifecycle_lock:
            if not self._started:
                return
            with request_context("bg:registry"):
                logger.info("Closing object store client")
                close = getattr(self.store, "close", None)
                if close is not None:
                    close()
                self._started = False
