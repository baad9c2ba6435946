"""Pytest configuration and fixtures.

``FakeObjectStore`` keeps objects in memory and answers ``stat``/``open``/``list``
the way an S3 bucket listed with delimiter ``/`` does.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from bucket_index.core.config import Settings
from bucket_index.core.object_store import (
    DEFAULT_STORAGE_CLASS,
    DIRECTORY_CONTENT_TYPE,
    NoSuchKeyError,
    ObjectMeta,
    ObjectStream,
)
from bucket_index.main import create_app

MODIFIED = datetime(2024, 5, 17, 8, 30, 5, tzinfo=timezone.utc)


@dataclass
class FakeObject:
    data: bytes
    content_type: str
    last_modified: datetime


class FakeBody:
    """File-like body that can fail after ``fail_after`` bytes."""

    def __init__(self, data: bytes, fail_after: int | None = None) -> None:
        self._buffer = io.BytesIO(data)
        self._fail_after = fail_after
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        if self._fail_after is not None and self._buffer.tell() >= self._fail_after:
            raise OSError("connection reset by peer")
        return self._buffer.read(size)

    def close(self) -> None:
        self.closed = True


class FakeObjectStore:
    def __init__(self, chunk_size: int = 4) -> None:
        self.objects: dict[str, FakeObject] = {}
        self.chunk_size = chunk_size
        self.stat_error: Exception | None = None
        self.open_error: Exception | None = None
        self.list_error: Exception | None = None
        self.fail_read_after: int | None = None
        self.bodies: list[FakeBody] = []
        self.stat_calls: list[str] = []
        self.list_calls: list[str] = []
        self.closed = False

    def put(
        self,
        key: str,
        data: bytes = b"",
        *,
        content_type: str = "binary/octet-stream",
        last_modified: datetime = MODIFIED,
    ) -> None:
        self.objects[key] = FakeObject(data, content_type, last_modified)

    def put_placeholder(self, key: str) -> None:
        self.put(key, b"", content_type=DIRECTORY_CONTENT_TYPE)

    async def stat(self, key: str) -> ObjectMeta:
        self.stat_calls.append(key)
        if self.stat_error is not None:
            raise self.stat_error
        obj = self.objects.get(key)
        if obj is None:
            raise NoSuchKeyError(f"No such key: {key}")
        return ObjectMeta(
            key=key,
            size=len(obj.data),
            last_modified=obj.last_modified,
            content_type=obj.content_type,
            storage_class=DEFAULT_STORAGE_CLASS,
        )

    async def open(self, key: str) -> ObjectStream:
        if self.open_error is not None:
            raise self.open_error
        obj = self.objects.get(key)
        if obj is None:
            raise NoSuchKeyError(f"No such key: {key}")
        body = FakeBody(obj.data, fail_after=self.fail_read_after)
        self.bodies.append(body)
        return ObjectStream(body, self.chunk_size)

    async def list(self, prefix: str) -> list[ObjectMeta]:
        self.list_calls.append(prefix)
        if self.list_error is not None:
            raise self.list_error
        contents: list[ObjectMeta] = []
        prefixes: list[ObjectMeta] = []
        seen: set[str] = set()
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if "/" in rest:
                common = prefix + rest.split("/", 1)[0] + "/"
                if common not in seen:
                    seen.add(common)
                    prefixes.append(ObjectMeta(key=common))
                continue
            obj = self.objects[key]
            contents.append(
                ObjectMeta(
                    key=key,
                    size=len(obj.data),
                    last_modified=obj.last_modified,
                    storage_class=DEFAULT_STORAGE_CLASS,
                )
            )
        return contents + prefixes

    def close(self) -> None:
        self.closed = True


def build_sample_store() -> FakeObjectStore:
    store = FakeObjectStore()
    store.put("readme.txt", b"Hello, world!", content_type="text/plain")
    store.put("index.html", b"<h1>home</h1>", content_type="text/html")
    store.put_placeholder("docs/")
    store.put("docs/guide.pdf", b"%" * 1536, content_type="application/pdf")
    store.put("docs/nested/deep.txt", b"Deep content")
    store.put("a/b", b"object b")
    store.put("a/b/c", b"object c")
    store.put_placeholder("empty/")
    store.put("images/logo.png", b"\x89PNG\r\n\x1a\n\x00\x01")
    return store


@pytest.fixture
def store() -> FakeObjectStore:
    return build_sample_store()


@pytest.fixture
def settings() -> Settings:
    return Settings(bucket="test-bucket", endpoint="localhost:9000", log_level="WARNING")


@pytest.fixture
def client(settings: Settings, store: FakeObjectStore):
    """Test client whose lifespan wires the fake store into the registry."""
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
