"""S3-compatible object store client.

- One boto3 client per process, shared by every request
- Blocking boto3 calls run in worker threads through ``asyncio.to_thread``
- botocore errors are translated into ``NoSuchKeyError`` / ``StoreError``
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucket_index.core.config import Settings

logger = logging.getLogger(__name__)

DIRECTORY_CONTENT_TYPE = "application/x-directory"
DEFAULT_STORAGE_CLASS = "STANDARD"
DELIMITER = "/"

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


class StoreError(Exception):
    """Base class for object store failures."""
    pass


class NoSuchKeyError(StoreError):
    """Raised when the requested key does not exist."""
    pass


@dataclass(frozen=True)
class ObjectMeta:
    """Attributes the store reports for one key.

    ``storage_class`` is empty for listing entries that stand for a common
    sub-prefix. ``content_type`` is only known for stat results.
    """

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    storage_class: str = ""


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY_PLACEHOLDER = "directory"


def classify(meta: ObjectMeta) -> EntryKind:
    """Tell real objects apart from directory markers using store conventions."""
    if meta.content_type:
        media_type = meta.content_type.split(";", 1)[0].strip().lower()
        if media_type == DIRECTORY_CONTENT_TYPE:
            return EntryKind.DIRECTORY_PLACEHOLDER
    if not meta.storage_class:
        return EntryKind.DIRECTORY_PLACEHOLDER
    if meta.key.endswith(DELIMITER):
        return EntryKind.DIRECTORY_PLACEHOLDER
    return EntryKind.FILE


class ObjectStream:
    """Readable object body. Callers must ``close()`` it once the copy ends."""

    def __init__(self, body: Any, chunk_size: int) -> None:
        self._body = body
        self._chunk_size = chunk_size
        self._closed = False

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        while True:
            try:
                chunk = await asyncio.to_thread(self._body.read, self._chunk_size)
            except (BotoCoreError, OSError) as exc:
                raise StoreError(f"read failed: {exc}") from exc
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()


def _translate_client_error(exc: ClientError, operation: str, key: str) -> StoreError:
    error = exc.response.get("Error", {}) if exc.response else {}
    code = str(error.get("Code", ""))
    if code in _NOT_FOUND_CODES:
        return NoSuchKeyError(f"No such key: {key}")
    return StoreError(f"{operation} {key!r} failed: {code or exc}")


class S3ObjectStore:
    """Read-only view of one bucket."""

    def __init__(self, settings: Settings, *, client: Any = None) -> None:
        self.bucket = settings.bucket
        self._chunk_size = settings.chunk_size
        self._client = client if client is not None else self._create_client(settings)

    @staticmethod
    def _create_client(settings: Settings) -> Any:
        session = boto3.session.Session()
        return session.client(
            "s3",
            endpoint_url=settings.endpoint_url,
            region_name=settings.region,
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
                retries={"max_attempts": 3, "mode": "standard"},
            ),
        )

    # -------------------------
    # blocking primitives
    # -------------------------
    def _head(self, key: str) -> ObjectMeta:
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            raise _translate_client_error(exc, "stat", key) from exc
        except BotoCoreError as exc:
            raise StoreError(f"stat {key!r} failed: {exc}") from exc
        # HEAD omits the storage class header for STANDARD objects
        return ObjectMeta(
            key=key,
            size=int(response.get("ContentLength", 0)),
            last_modified=response.get("LastModified"),
            content_type=response.get("ContentType"),
            storage_class=response.get("StorageClass") or DEFAULT_STORAGE_CLASS,
        )

    def _get(self, key: str) -> ObjectStream:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            raise _translate_client_error(exc, "get", key) from exc
        except BotoCoreError as exc:
            raise StoreError(f"get {key!r} failed: {exc}") from exc
        return ObjectStream(response["Body"], self._chunk_size)

    def _list(self, prefix: str) -> List[ObjectMeta]:
        entries: List[ObjectMeta] = []
        paginator = self._client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter=DELIMITER):
                for item in page.get("Contents", []):
                    entries.append(
                        ObjectMeta(
                            key=item["Key"],
                            size=int(item.get("Size", 0)),
                            last_modified=item.get("LastModified"),
                            storage_class=item.get("StorageClass") or DEFAULT_STORAGE_CLASS,
                        )
                    )
                for common in page.get("CommonPrefixes", []):
                    entries.append(ObjectMeta(key=common["Prefix"]))
        except ClientError as exc:
            raise _translate_client_error(exc, "list", prefix) from exc
        except BotoCoreError as exc:
            raise StoreError(f"list {prefix!r} failed: {exc}") from exc
        return entries

    # -------------------------
    # async API
    # -------------------------
    async def stat(self, key: str) -> ObjectMeta:
        return await asyncio.to_thread(self._head, key)

    async def open(self, key: str) -> ObjectStream:
        return await asyncio.to_thread(self._get, key)

    async def list(self, prefix: str) -> List[ObjectMeta]:
        """Immediate children of ``prefix``: objects first, then sub-prefixes, page by page."""
        return await asyncio.to_thread(self._list, prefix)

    def close(self) -> None:
        logger.debug("Closing S3 client for bucket %s", self.bucket)
        self._client.close()
