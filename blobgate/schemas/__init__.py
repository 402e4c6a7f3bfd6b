"""Pydantic schemas: the policy document and API responses."""

from .policy import ANONYMOUS, DirectoryRule, Policy
from .objects import ObjectEntry, ListingResponse, PutResponse, VerifyResponse

__all__ = [
    "ANONYMOUS",
    "DirectoryRule",
    "Policy",
    "ObjectEntry",
    "ListingResponse",
    "PutResponse",
    "VerifyResponse",
]
