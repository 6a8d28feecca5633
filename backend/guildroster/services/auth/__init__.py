"""API key validation module."""

from .service import ApiKeyValidator

__all__ = ["ApiKeyValidator"]
