"""Data models for the docpager API."""

from .documents import Document, DocumentCreate

__all__ = [
    "Document",
    "DocumentCreate"
]
