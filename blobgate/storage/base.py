"""Blob store interface.

The gateway only ever talks to storage through ``BlobStore``. Records are
frozen dataclasses so a page handed back by ``list`` can be accumulated
without copying.
"""

import abc
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ObjectMetadata:
    """What ``head`` returns and what a listing row carries."""
    key: str
    size: int
    etag: str
    uploaded: datetime
    content_type: Optional[str] = None


@dataclass(frozen=True)
class StoredObject:
    """A full object: metadata plus body."""
    metadata: ObjectMetadata
    body: bytes

    @property
    def key(self) -> str:
        return self.metadata.key


@dataclass(frozen=True)
class PutResult:
    key: str
    etag: str


@dataclass(frozen=True)
class ListPage:
    """One page of a listing.

    ``cursor`` is opaque to callers; pass it back unchanged to get the next
    page. It is only meaningful while ``truncated`` is true.
    """
    objects: list[ObjectMetadata] = field(default_factory=list)
    delimited_prefixes: list[str] = field(default_factory=list)
    truncated: bool = False
    cursor: Optional[str] = None


class BlobStore(abc.ABC):
    """Durable key -> bytes store."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[StoredObject]:
        """Return the object at *key*, or None if absent."""

    @abc.abstractmethod
    def head(self, key: str) -> Optional[ObjectMetadata]:
        """Return metadata for *key* without the body, or None if absent."""

    @abc.abstractmethod
    def put(self, key: str, body: bytes, content_type: Optional[str] = None) -> PutResult:
        """Create or replace the object at *key*."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Deleting an absent key is not an error."""

    @abc.abstractmethod
    def list(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> ListPage:
        """Return one page of objects whose key starts with *prefix*.

        With a *delimiter*, keys containing the delimiter after the prefix
        are rolled up into ``delimited_prefixes`` instead of ``objects``.
        """
