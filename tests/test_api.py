"""
HTTP Surface Tests
==================

Request/response mapping of the FastAPI app: Cache header round trips,
304s, input rejection at the boundary and startup failures.
"""

import json

import pytest
from fastapi.testclient import TestClient

from poststore.api.server import CACHE_HEADER, create_app
from poststore.clock import Clock
from poststore.contracts.base import CorruptCollectionError, InvalidContentError
from poststore.engine import PostStore, PostStoreConfig
from poststore.fingerprint import fingerprint
from poststore.storage import InMemoryPostStorage, StorageConfig


@pytest.fixture
def storage():
    return InMemoryPostStorage()


@pytest.fixture
def store(storage):
    config = PostStoreConfig(max_content_bytes=64)
    return PostStore.open(config, storage=storage, clock=Clock.replay([1000, 2000, 3000]))


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as client:
        yield client


class TestReadEndpoint:

    def test_read_empty(self, client):
        r = client.get("/api/read")
        assert r.status_code == 200
        assert r.text == "[]"
        assert r.headers["content-type"].startswith("application/json")
        assert r.headers[CACHE_HEADER] == fingerprint("[]")

    def test_matching_token_is_304(self, client):
        token = client.get("/api/read").headers[CACHE_HEADER]
        r = client.get("/api/read", headers={CACHE_HEADER: token})
        assert r.status_code == 304
        assert r.content == b""
        assert r.headers[CACHE_HEADER] == token

    def test_unknown_token_returns_body(self, client):
        r = client.get("/api/read", headers={CACHE_HEADER: "garbage"})
        assert r.status_code == 200
        assert r.text == "[]"


class TestWriteEndpoint:

    def test_scenario(self, client):
        r1 = client.post("/api/write", content=b"hello")
        assert r1.status_code == 200
        assert json.loads(r1.text) == [{"content": "hello", "timestamp": 1000, "id": 0}]
        h1 = r1.headers[CACHE_HEADER]

        assert client.get("/api/read", headers={CACHE_HEADER: h1}).status_code == 304

        r2 = client.post("/api/write", content=b"world")
        h2 = r2.headers[CACHE_HEADER]
        assert h2 != h1

        r3 = client.get("/api/read", headers={CACHE_HEADER: h1})
        assert r3.status_code == 200
        assert r3.headers[CACHE_HEADER] == h2
        assert [p["content"] for p in json.loads(r3.text)] == ["hello", "world"]

    def test_write_persists(self, client, storage):
        client.post("/api/write", content="ünï".encode("utf-8"))
        assert json.loads(storage.data.decode("utf-8"))[0]["content"] == "ünï"

    def test_non_utf8_rejected(self, client, store):
        r = client.post("/api/write", content=b"\xff\xfe\xfd")
        assert r.status_code == 422
        assert r.text == "input should be utf-8"
        assert len(store) == 0

    def test_oversized_body_rejected(self, client, store):
        r = client.post("/api/write", content=b"x" * 65)
        assert r.status_code == 413
        assert len(store) == 0

    def test_body_at_limit_accepted(self, client):
        assert client.post("/api/write", content=b"x" * 64).status_code == 200

    def test_chunked_body_over_limit_rejected(self, client, store):
        """No Content-Length: the limit is enforced while streaming."""
        r = client.post("/api/write", content=iter([b"x" * 40, b"x" * 40]))
        assert r.status_code == 413
        assert len(store) == 0

    def test_chunked_body_under_limit_accepted(self, client, store):
        r = client.post("/api/write", content=iter([b"ab", b"cd"]))
        assert r.status_code == 200
        assert store.entries()[0].content == "abcd"

    def test_unencodable_content_maps_to_422(self, client, store, monkeypatch):
        def reject(content):
            raise InvalidContentError("surrogate")

        monkeypatch.setattr(store, "write", reject)
        r = client.post("/api/write", content=b"x")
        assert r.status_code == 422
        assert r.text == "input should be utf-8"

    def test_empty_body_is_a_post(self, client, store):
        assert client.post("/api/write", content=b"").status_code == 200
        assert store.entries()[0].content == ""

    def test_persist_failure_is_500(self, client, storage, store):
        storage.fail_persist = True
        r = client.post("/api/write", content=b"x")
        assert r.status_code == 500
        assert "persist_failed" in r.text
        # Known gap: memory advanced without the file
        assert len(store) == 1


class TestCors:

    def test_preflight(self, client):
        r = client.options("/api/read", headers={
            "Origin": "https://example.org",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": CACHE_HEADER,
        })
        assert r.status_code == 200
        assert r.headers["access-control-allow-origin"] == "*"
        assert r.headers["access-control-max-age"] == "10000000"
        assert CACHE_HEADER.lower() in r.headers["access-control-allow-headers"].lower()

    def test_cache_header_exposed(self, client):
        r = client.get("/api/read", headers={"Origin": "https://example.org"})
        assert CACHE_HEADER.lower() in r.headers["access-control-expose-headers"].lower()


class TestHealth:

    def test_health(self, client):
        client.post("/api/write", content=b"a")
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "online"
        assert body["entries"] == 1
        assert body["token"] == client.get("/api/read").headers[CACHE_HEADER]


class TestStartup:

    def test_opens_store_from_config(self, tmp_path):
        path = tmp_path / "posts.json"
        config = PostStoreConfig(storage=StorageConfig(path=str(path)))
        with TestClient(create_app(config=config)) as client:
            client.post("/api/write", content=b"hi")
        assert json.loads(path.read_text())[0]["content"] == "hi"

    def test_corrupt_file_aborts_startup(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text("[{]")
        config = PostStoreConfig(storage=StorageConfig(path=str(path)))
        with pytest.raises(CorruptCollectionError):
            with TestClient(create_app(config=config)):
                pass
