"""Shared utilities."""

from .persistence import PydanticPersistence

__all__ = ["PydanticPersistence"]
