"""Database models."""

from .blob import Blob
from .token import ApiToken

__all__ = ["Blob", "ApiToken"]
