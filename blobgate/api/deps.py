"""FastAPI dependencies wiring the gateway together.

Every collaborator is built per request from the database session, so
tests swap any layer with ``app.dependency_overrides``.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.config import settings
from ..database import get_db
from ..repositories.token_repository import TokenRepository
from ..services.gateway_service import ObjectGateway
from ..services.policy_service import PolicyCache, PolicyStore
from ..services.role_service import RoleResolver
from ..storage.base import BlobStore
from ..storage.sql_store import SqlBlobStore


def get_blob_store(db: Session = Depends(get_db)) -> BlobStore:
    return SqlBlobStore(db, page_size=settings.list_page_size)


def get_role_resolver(db: Session = Depends(get_db)) -> RoleResolver:
    return RoleResolver(TokenRepository(db))


def get_policy_cache(request: Request) -> PolicyCache:
    return request.app.state.policy_cache


def get_policy_store(
    store: BlobStore = Depends(get_blob_store),
    cache: PolicyCache = Depends(get_policy_cache),
) -> PolicyStore:
    return PolicyStore(store, settings.policy_key, cache=cache)


def get_gateway(
    roles: RoleResolver = Depends(get_role_resolver),
    policies: PolicyStore = Depends(get_policy_store),
    store: BlobStore = Depends(get_blob_store),
) -> ObjectGateway:
    return ObjectGateway(roles, policies, store)
