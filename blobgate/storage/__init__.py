"""Blob store interface and the SQL-backed implementation."""

from .base import (
    DEFAULT_CONTENT_TYPE,
    BlobStore,
    ListPage,
    ObjectMetadata,
    PutResult,
    StoredObject,
)
from .sql_store import SqlBlobStore

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "BlobStore",
    "ListPage",
    "ObjectMetadata",
    "PutResult",
    "StoredObject",
    "SqlBlobStore",
]
