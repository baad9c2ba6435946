"""Serves keys that name real objects."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from bucket_index.core.config import StatErrorPolicy
from bucket_index.core.exceptions import BadGatewayError
from bucket_index.core.metrics import MetricsCollector
from bucket_index.core.object_store import (
    EntryKind,
    NoSuchKeyError,
    ObjectStream,
    StoreError,
    classify,
)
from bucket_index.services.utils.content_types import content_type_for

logger = logging.getLogger(__name__)


@dataclass
class FileDownload:
    """A resolved object whose body has not been sent yet."""

    key: str
    size: int
    content_type: str
    stream: ObjectStream
    metrics: MetricsCollector

    async def body(self) -> AsyncIterator[bytes]:
        """Copy the object verbatim, always releasing the stream afterwards.

        Headers are committed before the first chunk, so a read failure can
        only truncate the response.
        """
        sent = 0
        try:
            async for chunk in self.stream.iter_chunks():
                sent += len(chunk)
                yield chunk
        except StoreError as exc:
            logger.warning(
                "Transfer of %s interrupted after %s of %s bytes: %s",
                self.key,
                sent,
                self.size,
                exc,
            )
            self.metrics.record("store.transfer", ok=False)
        else:
            self.metrics.record("store.transfer", ok=True)
        finally:
            self.stream.close()


class FileResolver:
    """Decides whether a key is a retrievable object."""

    def __init__(
        self,
        store,
        metrics: MetricsCollector,
        *,
        stat_error_policy: StatErrorPolicy = "fall_through",
    ) -> None:
        self._store = store
        self._metrics = metrics
        self._stat_error_policy = stat_error_policy

    async def resolve(self, key: str) -> Optional[FileDownload]:
        if not key:
            # the bucket root is never an object
            return None

        try:
            meta = await self._store.stat(key)
        except NoSuchKeyError:
            self._metrics.record("store.stat", ok=True)
            return None
        except StoreError as exc:
            self._metrics.record("store.stat", ok=False)
            if self._stat_error_policy == "raise":
                raise BadGatewayError(f"Metadata lookup failed for {key}") from exc
            logger.warning("Metadata lookup failed for %s, trying directory: %s", key, exc)
            return None
        self._metrics.record("store.stat", ok=True)

        if classify(meta) is EntryKind.DIRECTORY_PLACEHOLDER:
            logger.debug("%s is a directory placeholder", key)
            return None

        try:
            stream = await self._store.open(key)
        except NoSuchKeyError:
            logger.debug("%s disappeared between stat and get", key)
            return None
        except StoreError as exc:
            logger.warning("Opening %s failed: %s", key, exc)
            return None

        return FileDownload(
            key=key,
            size=meta.size,
            content_type=content_type_for(key),
            stream=stream,
            metrics=self._metrics,
        )
