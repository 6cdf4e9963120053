"""Database access for docpager."""

from .connection import DatabaseManager
from .documents import PostgresDocumentStore

__all__ = ["DatabaseManager", "PostgresDocumentStore"]
