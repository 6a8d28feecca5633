"""HTTP API for Guild Roster."""

from .routes import router

__all__ = ["router"]
