"""Token store: opaque bearer token -> comma-separated role string."""

import logging
import secrets
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import StorageError
from ..models.token import ApiToken

logger = logging.getLogger(__name__)

# 32 random bytes, URL-safe so the token also works as ?key=.
_TOKEN_BYTES = 32


def generate_token() -> str:
    """Create a new random opaque token."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


class TokenRepository:
    """Key-value access to the ``api_tokens`` table."""

    def __init__(self, db: Session):
        self.db = db

    def lookup(self, token: str) -> Optional[str]:
        """Return the raw role string for *token*, or None if unknown."""
        try:
            row = self.db.query(ApiToken).filter(ApiToken.token == token).first()
        except SQLAlchemyError as e:
            raise StorageError("Token lookup failed", original_error=e) from e
        return row.roles if row is not None else None

    def upsert(self, token: str, roles: str) -> ApiToken:
        """Create *token* or replace its roles."""
        row = self.db.query(ApiToken).filter(ApiToken.token == token).first()
        if row is None:
            row = ApiToken(token=token, roles=roles)
            self.db.add(row)
        else:
            row.roles = roles
        self.db.commit()
        self.db.refresh(row)
        return row

    def revoke(self, token: str) -> bool:
        """Delete *token*. Returns False when it did not exist."""
        deleted = self.db.query(ApiToken).filter(ApiToken.token == token).delete(
            synchronize_session=False
        )
        self.db.commit()
        if deleted:
            logger.info("Token revoked")
        return bool(deleted)
