"""Shared test fixtures for the blobgate test suite.

All tests run against an in-memory SQLite database shared through a single
pooled connection. Tables are dropped and recreated before each test, so
every test starts with no objects, no tokens and no policy.
"""

import hashlib
import json
import os
from datetime import datetime, timezone

# Configure the app before any blobgate import reads the settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ["POLICY_KEY"] = "_config/policy.json"
os.environ["PUBLIC_PREFIX"] = "public/"
os.environ["RESTRICTED_PREFIX"] = "restricted/"
os.environ["POLICY_CACHE_SECONDS"] = "0"
os.environ["LISTING_CACHE_SECONDS"] = "0"
os.environ["OBJECT_CACHE_SECONDS"] = "3600"
os.environ["CORS_ALLOWED_ORIGINS"] = "http://localhost:3000"

import pytest
from fastapi.testclient import TestClient

from blobgate.database import Base, engine, SessionLocal, get_db
from blobgate.main import app
from blobgate.repositories.token_repository import TokenRepository
from blobgate.storage.base import BlobStore, ListPage, ObjectMetadata, PutResult, StoredObject
from blobgate.storage.sql_store import SqlBlobStore

POLICY_KEY = "_config/policy.json"

# Policy used by the API tests: anonymous public partition, viewer-readable
# restricted partition, and an admin-only corner inside it.
GATEWAY_POLICY = {
    "directories": [
        {"prefix": "public/", "read": "ANONYMOUS", "write": ["editor"]},
        {"prefix": "restricted/", "read": ["viewer"], "write": ["editor"]},
        {"prefix": "restricted/admin/", "read": ["admin"], "write": ["admin"]},
    ]
}

# token -> stored role string (deliberately untidy for the admin token)
TOKENS = {
    "viewer-token": "viewer",
    "editor-token": "editor",
    "admin-token": " admin , viewer,, admin",
}


@pytest.fixture(autouse=True)
def _clean_tables():
    """Recreate all tables and forget any cached policy before each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.state.policy_cache.clear()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def store(db) -> SqlBlobStore:
    return SqlBlobStore(db)


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def put_policy(store):
    """Store a policy document (dict, or raw bytes for malformed cases)."""

    def _put(document=GATEWAY_POLICY):
        raw = document if isinstance(document, bytes) else json.dumps(document).encode()
        store.put(POLICY_KEY, raw, "application/json")

    return _put


@pytest.fixture()
def issue_token(db):
    def _issue(token: str, roles: str) -> str:
        TokenRepository(db).upsert(token, roles)
        return token

    return _issue


@pytest.fixture()
def gateway_setup(put_policy, issue_token):
    """The standard policy plus one token per role."""
    put_policy(GATEWAY_POLICY)
    for token, roles in TOKENS.items():
        issue_token(token, roles)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# In-memory collaborators for service-level tests
# ---------------------------------------------------------------------------


class MemoryBlobStore(BlobStore):
    """Dict-backed store with small pages and a call log.

    The cursor is the index of the next key, so paging is easy to follow.
    """

    def __init__(self, page_size: int = 2):
        self.page_size = page_size
        self.objects: dict[str, tuple[bytes, object]] = {}
        self.calls: list[tuple] = []

    def _meta(self, key: str) -> ObjectMetadata:
        body, content_type = self.objects[key]
        return ObjectMetadata(
            key=key,
            size=len(body),
            etag=hashlib.md5(body).hexdigest(),
            uploaded=datetime(2024, 1, 1, tzinfo=timezone.utc),
            content_type=content_type,
        )

    def get(self, key):
        self.calls.append(("get", key))
        if key not in self.objects:
            return None
        return StoredObject(metadata=self._meta(key), body=self.objects[key][0])

    def head(self, key):
        self.calls.append(("head", key))
        return self._meta(key) if key in self.objects else None

    def put(self, key, body, content_type=None):
        self.calls.append(("put", key))
        self.objects[key] = (body, content_type)
        return PutResult(key=key, etag=hashlib.md5(body).hexdigest())

    def delete(self, key):
        self.calls.append(("delete", key))
        self.objects.pop(key, None)

    def list(self, prefix, delimiter=None, cursor=None):
        self.calls.append(("list", prefix, cursor))
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(cursor) if cursor else 0
        chunk = keys[start:start + self.page_size]
        end = start + len(chunk)
        truncated = end < len(keys)
        return ListPage(
            objects=[self._meta(k) for k in chunk],
            truncated=truncated,
            cursor=str(end) if truncated else None,
        )

    def store_calls(self, *ops: str):
        """Calls other than reading the policy document."""
        return [c for c in self.calls if c[0] in ops and c[1] != POLICY_KEY]


class DictTokenStore:
    def __init__(self, tokens: dict):
        self.tokens = tokens
        self.lookups: list[str] = []

    def lookup(self, token):
        self.lookups.append(token)
        return self.tokens.get(token)


@pytest.fixture()
def memory_store():
    return MemoryBlobStore()


@pytest.fixture()
def token_store():
    return DictTokenStore(dict(TOKENS))
