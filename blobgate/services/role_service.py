"""Role resolution: bearer token -> role set."""

import logging
from typing import FrozenSet, Optional, Protocol

logger = logging.getLogger(__name__)

RoleSet = FrozenSet[str]

NO_ROLES: RoleSet = frozenset()


class TokenStore(Protocol):
    def lookup(self, token: str) -> Optional[str]: ...


def parse_roles(value: Optional[str]) -> RoleSet:
    """Split a stored ``"a, b,,a"`` role string into ``{"a", "b"}``."""
    if not value:
        return NO_ROLES
    return frozenset(part.strip() for part in value.split(",") if part.strip())


class RoleResolver:
    """Turns a token into the roles it carries.

    Unknown or missing tokens resolve to the empty set rather than an
    error; whether that is enough is the policy's decision.
    """

    def __init__(self, token_store: TokenStore):
        self.token_store = token_store

    def resolve(self, token: Optional[str]) -> RoleSet:
        if not token:
            return NO_ROLES
        roles = parse_roles(self.token_store.lookup(token))
        if not roles:
            logger.debug("Token resolved to no roles")
        return roles
