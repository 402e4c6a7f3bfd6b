"""Blob model: the object table behind SqlBlobStore."""

from sqlalchemy import Column, String, DateTime, Integer, LargeBinary
from ..database import Base


class Blob(Base):
    """One stored object, addressed by its full key.

    Keys are flat strings; "directories" exist only as shared key prefixes.
    """

    __tablename__ = "blobs"

    key = Column(String(1024), primary_key=True)
    data = Column(LargeBinary, nullable=False)
    content_type = Column(String(255), nullable=True)
    etag = Column(String(64), nullable=False)  # MD5 hex of data
    size = Column(Integer, nullable=False)
    uploaded = Column(DateTime(timezone=True), nullable=False)
