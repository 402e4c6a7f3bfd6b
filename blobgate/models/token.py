"""ApiToken model: opaque bearer token -> comma-separated roles."""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from ..database import Base


class ApiToken(Base):
    """Token store row.

    ``roles`` is kept exactly as written (e.g. ``"viewer, editor"``);
    RoleResolver does the splitting and trimming.
    """

    __tablename__ = "api_tokens"

    token = Column(String(255), primary_key=True)
    roles = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
