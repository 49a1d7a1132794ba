"""Router namespace exports for FastAPI include hooks."""

from . import dispatch, health

__all__ = ["dispatch", "health"]
