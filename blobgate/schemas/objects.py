"""Response schemas for the gateway endpoints."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class PutResponse(BaseModel):
    """Result of a successful upload."""
    key: str
    etag: str


class ObjectEntry(BaseModel):
    """One row of a recursive listing."""
    key: str
    size: int
    uploaded: datetime
    etag: str

    model_config = {"from_attributes": True}


class ListingResponse(BaseModel):
    """Objects under a prefix. ``directories`` is only filled for one-level listings."""
    prefix: str
    directories: List[str] = []
    objects: List[ObjectEntry] = []


class VerifyResponse(BaseModel):
    """What the caller's token grants: its roles and the prefixes it can see."""
    roles: List[str]
    prefixes: List[str]
    write_prefixes: List[str] = Field(serialization_alias="writePrefixes")
