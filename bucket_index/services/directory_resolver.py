"""Synthesizes directory listings from prefix enumeration."""
from __future__ import annotations

import logging
from typing import List, Optional

from bucket_index.core.metrics import MetricsCollector
from bucket_index.core.object_store import EntryKind, StoreError, classify
from bucket_index.models.listing import DirectoryEntry
from bucket_index.schemas import ListingView
from bucket_index.services.listing_formatter import build_listing_view
from bucket_index.services.utils.listing_helpers import directory_prefix, parent_prefix

logger = logging.getLogger(__name__)


class DirectoryResolver:
    """Decides whether a prefix is a non-empty virtual directory."""

    def __init__(self, store, metrics: MetricsCollector) -> None:
        self._store = store
        self._metrics = metrics

    async def list_entries(self, prefix: str) -> Optional[List[DirectoryEntry]]:
        """Immediate children of ``prefix`` in store order, or None on a listing error."""
        try:
            listed = await self._store.list(prefix)
        except StoreError as exc:
            self._metrics.record("store.list", ok=False)
            logger.warning("Listing %r failed: %s", prefix, exc)
            return None
        self._metrics.record("store.list", ok=True)

        entries: List[DirectoryEntry] = []
        for meta in listed:
            if meta.key == prefix:
                continue
            if classify(meta) is EntryKind.DIRECTORY_PLACEHOLDER:
                entries.append(DirectoryEntry.for_directory(meta.key))
            else:
                entries.append(DirectoryEntry.for_file(meta))
        return entries

    async def resolve(self, key: str) -> Optional[ListingView]:
        prefix = directory_prefix(key)
        entries = await self.list_entries(prefix)
        if not entries:
            logger.debug("No children under %r", prefix)
            return None

        if prefix:
            entries.insert(0, DirectoryEntry.for_parent(parent_prefix(prefix)))
        return build_listing_view(f"/{prefix}", entries)
