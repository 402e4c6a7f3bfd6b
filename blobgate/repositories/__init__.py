"""Data access layer."""

from .token_repository import TokenRepository

__all__ = ["TokenRepository"]
