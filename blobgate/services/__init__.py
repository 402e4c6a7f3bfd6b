"""Business logic services."""

from .gateway_service import ObjectGateway, list_recursive
from .policy_service import PolicyCache, PolicyLoadResult, PolicyStore, parse_policy
from .role_service import RoleResolver, parse_roles

__all__ = [
    "ObjectGateway",
    "list_recursive",
    "PolicyCache",
    "PolicyLoadResult",
    "PolicyStore",
    "parse_policy",
    "RoleResolver",
    "parse_roles",
]
