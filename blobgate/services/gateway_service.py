"""Gateway service: the request-level orchestrator.

Each public method follows the same shape: resolve the caller's roles,
load the current policy, ask permission_service, and only then touch the
blob store. A denial raises UnauthorizedError before any store access.
Endpoints are thin wrappers that translate results into HTTP.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..exceptions import ObjectNotFoundError, UnauthorizedError
from ..schemas.objects import VerifyResponse
from ..schemas.policy import Policy
from ..storage.base import BlobStore, ListPage, ObjectMetadata, PutResult, StoredObject
from . import permission_service
from .policy_service import PolicyStore
from .role_service import RoleResolver, RoleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Listing:
    """Result of a listing request: the normalized prefix and what is under it."""
    prefix: str
    objects: List[ObjectMetadata]
    directories: List[str] = field(default_factory=list)


def _pages(store: BlobStore, prefix: str, delimiter: Optional[str] = None) -> Iterator[ListPage]:
    """Yield listing pages one at a time, following the store cursor.

    Each request needs the cursor from the previous response. Stops as
    soon as the store reports a page that is not truncated.
    """
    cursor: Optional[str] = None
    while True:
        page = store.list(prefix, delimiter=delimiter, cursor=cursor)
        yield page
        if not page.truncated:
            return
        if not page.cursor:
            raise RuntimeError(f"Store reported a truncated listing without a cursor for {prefix!r}")
        cursor = page.cursor


def list_recursive(store: BlobStore, prefix: str) -> List[ObjectMetadata]:
    """Every object under *prefix*, in store order, across all pages."""
    objects: List[ObjectMetadata] = []
    for page in _pages(store, prefix):
        objects.extend(page.objects)
    return objects


def list_level(store: BlobStore, prefix: str, delimiter: str) -> Listing:
    """One level under *prefix*: direct objects plus rolled-up sub-prefixes."""
    objects: List[ObjectMetadata] = []
    directories: List[str] = []
    for page in _pages(store, prefix, delimiter):
        objects.extend(page.objects)
        directories.extend(page.delimited_prefixes)
    return Listing(prefix=prefix, objects=objects, directories=directories)


class ObjectGateway:
    """Authorizes and performs object operations for one request."""

    def __init__(
        self,
        roles: RoleResolver,
        policies: PolicyStore,
        store: BlobStore,
    ):
        self.roles = roles
        self.policies = policies
        self.store = store

    def _context(self, token: Optional[str]) -> tuple[Policy, RoleSet]:
        return self.policies.load(), self.roles.resolve(token)

    def _require_read(self, key: str, token: Optional[str], operation: str) -> None:
        policy, roles = self._context(token)
        if not permission_service.can_read(policy, key, roles):
            logger.debug("Access denied", extra={"operation": operation, "key": key})
            raise UnauthorizedError()

    def _require_write(self, key: str, token: Optional[str], operation: str) -> None:
        policy, roles = self._context(token)
        if not permission_service.can_write(policy, key, roles):
            logger.debug("Access denied", extra={"operation": operation, "key": key})
            raise UnauthorizedError()

    # -- identity --------------------------------------------------------------

    def verify(self, token: Optional[str]) -> VerifyResponse:
        """Describe what *token* grants. Raises UnauthorizedError for no roles."""
        roles = self.roles.resolve(token)
        if not roles:
            raise UnauthorizedError()
        policy = self.policies.load()
        return VerifyResponse(
            roles=sorted(roles),
            prefixes=permission_service.visible_prefixes(policy, roles),
            write_prefixes=permission_service.writable_prefixes(policy, roles),
        )

    # -- reads -------------------------------------------------------------------

    def list_objects(
        self,
        prefix: str,
        token: Optional[str],
        delimiter: Optional[str] = None,
    ) -> Listing:
        """List what is under *prefix*.

        Without a *delimiter* the listing is recursive. With one, only the
        first level is returned and deeper keys are rolled up into
        ``directories``. The prefix is normalized to end with "/" before
        the permission check, so ``docs`` and ``docs/`` are the same request.
        """
        prefix = permission_service.normalize_prefix(prefix)
        self._require_read(prefix, token, "list")
        if delimiter:
            return list_level(self.store, prefix, delimiter)
        return Listing(prefix=prefix, objects=list_recursive(self.store, prefix))

    def read(self, key: str, token: Optional[str]) -> StoredObject:
        self._require_read(key, token, "read")
        obj = self.store.get(key)
        if obj is None:
            raise ObjectNotFoundError(key)
        return obj

    def head(self, key: str, token: Optional[str]) -> ObjectMetadata:
        self._require_read(key, token, "head")
        meta = self.store.head(key)
        if meta is None:
            raise ObjectNotFoundError(key)
        return meta

    # -- writes ------------------------------------------------------------------

    def write(self, key: str, body: bytes, content_type: Optional[str], token: Optional[str]) -> PutResult:
        self._require_write(key, token, "write")
        result = self.store.put(key, body, content_type)
        logger.info("Object written", extra={"key": key, "size": len(body)})
        return result

    def delete(self, key: str, token: Optional[str]) -> None:
        self._require_write(key, token, "delete")
        self.store.delete(key)
        logger.info("Object deleted", extra={"key": key})
