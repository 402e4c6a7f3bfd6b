"""SQLAlchemy-backed blob store.

Objects live in the ``blobs`` table. Listing pages are ordered by key and
resumed with an opaque cursor, so a full enumeration is a sequence of
``key > cursor`` range scans.
"""

import hashlib
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import StorageError
from ..models.blob import Blob
from .base import BlobStore, ListPage, ObjectMetadata, PutResult, StoredObject

logger = logging.getLogger(__name__)

# Cursor tags: resume after an object key, or after a rolled-up prefix.
_KEY_CURSOR = "k:"
_PREFIX_CURSOR = "p:"


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlBlobStore(BlobStore):
    """BlobStore over a SQLAlchemy session."""

    def __init__(self, db: Session, page_size: int = 1000):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.db = db
        self.page_size = page_size

    @contextmanager
    def _guard(self, operation: str, key: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Blob store operation failed",
                extra={"operation": operation, "key": key, "error": str(e)},
            )
            raise StorageError(f"Blob store {operation} failed", original_error=e) from e

    @staticmethod
    def _metadata(row) -> ObjectMetadata:
        return ObjectMetadata(
            key=row.key,
            size=row.size,
            etag=row.etag,
            uploaded=_aware(row.uploaded),
            content_type=row.content_type,
        )

    def _metadata_query(self):
        return self.db.query(
            Blob.key, Blob.size, Blob.etag, Blob.uploaded, Blob.content_type
        )

    # -- single-object operations ------------------------------------------

    def get(self, key: str) -> Optional[StoredObject]:
        with self._guard("get", key):
            row = self.db.query(Blob).filter(Blob.key == key).first()
        if row is None:
            return None
        return StoredObject(metadata=self._metadata(row), body=bytes(row.data))

    def head(self, key: str) -> Optional[ObjectMetadata]:
        with self._guard("head", key):
            row = self._metadata_query().filter(Blob.key == key).first()
        return self._metadata(row) if row is not None else None

    def put(self, key: str, body: bytes, content_type: Optional[str] = None) -> PutResult:
        etag = hashlib.md5(body).hexdigest()
        with self._guard("put", key):
            row = self.db.query(Blob).filter(Blob.key == key).first()
            if row is None:
                row = Blob(key=key)
                self.db.add(row)
            row.data = body
            row.content_type = content_type
            row.etag = etag
            row.size = len(body)
            row.uploaded = datetime.now(timezone.utc)
            self.db.commit()
        logger.debug("Stored object", extra={"key": key, "size": len(body)})
        return PutResult(key=key, etag=etag)

    def delete(self, key: str) -> None:
        with self._guard("delete", key):
            self.db.query(Blob).filter(Blob.key == key).delete(synchronize_session=False)
            self.db.commit()

    # -- listing -------------------------------------------------------------

    def _scan(self, prefix: str, after: Optional[str]) -> Iterator:
        """Yield metadata rows under *prefix* in key order, strictly after *after*."""
        # substr comparison instead of LIKE: exact and case-sensitive on
        # every backend, and no wildcard escaping.
        under_prefix = func.substr(Blob.key, 1, len(prefix)) == prefix
        batch = self.page_size + 1
        while True:
            query = self._metadata_query().filter(under_prefix)
            if after is not None:
                query = query.filter(Blob.key > after)
            with self._guard("list", prefix):
                rows = query.order_by(Blob.key).limit(batch).all()
            yield from rows
            if len(rows) < batch:
                return
            after = rows[-1].key

    @staticmethod
    def _decode_cursor(cursor: Optional[str]) -> tuple[Optional[str], Optional[str]]:
        if not cursor:
            return None, None
        if cursor.startswith(_KEY_CURSOR):
            return cursor[len(_KEY_CURSOR):], None
        if cursor.startswith(_PREFIX_CURSOR):
            rolled_up = cursor[len(_PREFIX_CURSOR):]
            return rolled_up, rolled_up
        raise ValueError(f"Invalid listing cursor: {cursor!r}")

    def list(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> ListPage:
        after, skip_prefix = self._decode_cursor(cursor)

        objects: list[ObjectMetadata] = []
        prefixes: list[str] = []
        last: Optional[str] = None
        truncated = False

        for row in self._scan(prefix, after):
            # Keys under an already-emitted common prefix are contiguous.
            if skip_prefix is not None and row.key.startswith(skip_prefix):
                continue
            skip_prefix = None

            if len(objects) + len(prefixes) >= self.page_size:
                truncated = True
                break

            rest = row.key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                prefixes.append(common)
                skip_prefix = common
                last = _PREFIX_CURSOR + common
            else:
                objects.append(self._metadata(row))
                last = _KEY_CURSOR + row.key

        return ListPage(
            objects=objects,
            delimited_prefixes=prefixes,
            truncated=truncated,
            cursor=last if truncated else None,
        )
