"""API tests for GET /ls: recursive listing behind a read check."""

import pytest

from blobgate.api.deps import get_blob_store
from blobgate.main import app
from blobgate.storage.sql_store import SqlBlobStore

from conftest import bearer


@pytest.fixture()
def seeded(gateway_setup, store):
    for key in ("public/a.txt", "public/docs/b.txt", "public/docs/deep/c.txt", "publicity.txt"):
        store.put(key, b"x")
    store.put("restricted/r1", b"r1")


class TestListing:

    def test_missing_prefix_is_400(self, client, seeded):
        resp = client.get("/ls")
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert resp.json()["details"] == {"field": "prefix"}

    def test_empty_prefix_is_400(self, client, seeded):
        assert client.get("/ls", params={"prefix": ""}).status_code == 400

    def test_recursive_listing(self, client, seeded):
        resp = client.get("/ls", params={"prefix": "public/"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["prefix"] == "public/"
        assert [o["key"] for o in body["objects"]] == [
            "public/a.txt",
            "public/docs/b.txt",
            "public/docs/deep/c.txt",
        ]
        first = body["objects"][0]
        assert set(first) == {"key", "size", "uploaded", "etag"}
        assert first["size"] == 1

    def test_trailing_separator_added(self, client, seeded):
        body = client.get("/ls", params={"prefix": "public"}).json()
        assert body["prefix"] == "public/"
        assert "publicity.txt" not in [o["key"] for o in body["objects"]]

    def test_cache_header(self, client, seeded):
        resp = client.get("/ls", params={"prefix": "public/"})
        assert resp.headers["cache-control"] == "public, max-age=0"

    def test_restricted_requires_role(self, client, seeded):
        assert client.get("/ls", params={"prefix": "restricted/"}).status_code == 401
        resp = client.get(
            "/ls", params={"prefix": "restricted/"}, headers=bearer("viewer-token")
        )
        assert resp.status_code == 200
        assert [o["key"] for o in resp.json()["objects"]] == ["restricted/r1"]

    def test_ungoverned_prefix_denied(self, client, seeded):
        resp = client.get("/ls", params={"prefix": "other/"}, headers=bearer("admin-token"))
        assert resp.status_code == 401

    def test_follows_every_page(self, client, seeded, db, store):
        for i in range(7):
            store.put(f"public/many/{i}", b"x")
        app.dependency_overrides[get_blob_store] = lambda: SqlBlobStore(db, page_size=2)

        resp = client.get("/ls", params={"prefix": "public/many/"})

        assert resp.status_code == 200
        assert [o["key"] for o in resp.json()["objects"]] == [f"public/many/{i}" for i in range(7)]

    def test_one_level_listing(self, client, seeded):
        resp = client.get("/ls", params={"prefix": "public", "delimiter": "/"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["prefix"] == "public/"
        assert body["directories"] == ["public/docs/"]
        assert [o["key"] for o in body["objects"]] == ["public/a.txt"]

    def test_recursive_listing_has_no_directories(self, client, seeded):
        body = client.get("/ls", params={"prefix": "public/"}).json()
        assert body["directories"] == []

    def test_one_level_listing_requires_read(self, client, seeded):
        resp = client.get("/ls", params={"prefix": "restricted/", "delimiter": "/"})
        assert resp.status_code == 401
