"""API routers."""

from .documents import documents_router

__all__ = ["documents_router"]
