"""End-to-end tests for the catch-all route."""

from __future__ import annotations

import asyncio
import re

from fastapi.testclient import TestClient

from bucket_index.core.config import Settings
from bucket_index.core.metrics import MetricsCollector
from bucket_index.core.object_store import StoreError
from bucket_index.main import create_app
from bucket_index.services.file_resolver import FileResolver
from bucket_index.web.routes import file_response


def _hrefs(html: str) -> list[str]:
    return re.findall(r'<a href="([^"]*)"', html)


def test_file_is_served_verbatim(client: TestClient, store) -> None:
    response = client.get("/images/logo.png")

    assert response.status_code == 200
    assert response.content == store.objects["images/logo.png"].data
    assert response.headers["content-type"] == "image/png"
    assert response.headers["content-length"] == str(len(store.objects["images/logo.png"].data))


def test_unknown_suffix_is_octet_stream(client: TestClient) -> None:
    response = client.get("/readme.txt")

    assert response.status_code == 200
    assert response.content == b"Hello, world!"
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.headers["content-length"] == "13"


def test_root_listing(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/html; charset=utf-8"
    assert "<title>Index of /</title>" in response.text
    assert _hrefs(response.text) == [
        "/index.html",
        "/readme.txt",
        "/a/",
        "/docs/",
        "/empty/",
        "/images/",
    ]


def test_directory_listing_with_parent(client: TestClient) -> None:
    response = client.get("/docs/")

    assert response.status_code == 200
    assert "Index of /docs/" in response.text
    assert _hrefs(response.text) == ["/", "/docs/guide.pdf", "/docs/nested/"]
    assert "1.5 KB" in response.text
    assert "2024-05-17 08:30:05" in response.text
    assert 'alt="[DIR]"' in response.text
    assert 'alt="[FILE]"' in response.text


def test_directory_without_trailing_slash(client: TestClient) -> None:
    response = client.get("/docs/nested")

    assert response.status_code == 200
    assert _hrefs(response.text) == ["/docs/", "/docs/nested/deep.txt"]


def test_ambiguous_key_resolves_as_file(client: TestClient) -> None:
    response = client.get("/a/b")

    assert response.status_code == 200
    assert response.content == b"object b"


def test_ambiguous_prefix_with_slash_lists(client: TestClient) -> None:
    response = client.get("/a/b/")

    assert response.status_code == 200
    assert _hrefs(response.text) == ["/a/", "/a/b/c"]


def test_missing_path_is_404(client: TestClient) -> None:
    response = client.get("/does/not/exist")

    assert response.status_code == 404
    assert response.text == "404 Not Found"
    assert response.headers["content-type"].startswith("text/plain")


def test_placeholder_only_directory_is_404(client: TestClient) -> None:
    assert client.get("/empty/").status_code == 404
    assert client.get("/empty").status_code == 404


def test_listing_error_is_404(client: TestClient, store) -> None:
    store.list_error = StoreError("list failed: InternalError")

    response = client.get("/docs/")

    assert response.status_code == 404
    assert "<table>" not in response.text


def test_names_are_escaped_and_urls_quoted(client: TestClient, store) -> None:
    store.put("odd/<b>& name?.txt", b"x")

    response = client.get("/odd/")

    assert response.status_code == 200
    assert "&lt;b&gt;&amp; name?.txt" in response.text
    assert "/odd/%3Cb%3E%26%20name%3F.txt" in _hrefs(response.text)


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/readme.txt", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client: TestClient) -> None:
    response = client.get("/missing")

    assert len(response.headers["X-Request-ID"]) == 32


def test_raise_policy_surfaces_bad_gateway(store) -> None:
    settings = Settings(bucket="test-bucket", log_level="WARNING", stat_error_policy="raise")
    store.stat_error = StoreError("stat failed: SlowDown")

    with TestClient(create_app(settings, store=store)) as client:
        response = client.get("/readme.txt")

    assert response.status_code == 502
    assert response.text.startswith("502 ")


def test_store_is_closed_on_shutdown(settings, store) -> None:
    with TestClient(create_app(settings, store=store)) as client:
        client.get("/")
        assert not store.closed

    assert store.closed


def test_key_with_question_mark_is_served_from_listing_link(client: TestClient, store) -> None:
    store.put("odd/what?.txt", b"question")

    listing = client.get("/odd/")
    href = _hrefs(listing.text)[-1]
    response = client.get(href)

    assert href == "/odd/what%3F.txt"
    assert response.status_code == 200
    assert response.content == b"question"
    assert store.stat_calls[-1] == "odd/what?.txt"


def test_key_with_hash_is_served(client: TestClient, store) -> None:
    store.put("odd/c#.txt", b"sharp")

    response = client.get("/odd/c%23.txt")

    assert response.status_code == 200
    assert response.content == b"sharp"


def test_file_response_releases_stream_without_sending_body(store) -> None:
    resolver = FileResolver(store, MetricsCollector())
    download = asyncio.run(resolver.resolve("readme.txt"))
    assert download is not None

    response = file_response(download)
    asyncio.run(response.background())

    assert store.bodies[-1].closed
