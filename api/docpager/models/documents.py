"""Pydantic models for documents."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field, ConfigDict


class DocumentCreate(BaseModel):
    """Model for inserting a new document.

    Fields can be sent either wrapped in ``body`` or directly at the top
    level, e.g. ``{"name": "Alice", "age": 30}``.
    """

    body: Dict[str, Any] = Field(
        default_factory=dict,
        description="Document JSON data",
        examples=[{"name": "Alice", "age": 30}]
    )

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {"name": "Alice", "age": 30}
        }
    )

    def to_body(self) -> Dict[str, Any]:
        """Merge top-level extra fields into the stored body."""
        return {**(self.model_extra or {}), **self.body}


class Document(BaseModel):
    """A stored document.

    ``id`` is assigned by the store on insert and grows with insertion
    order, so ordering by ``id`` descending lists the newest documents
    first.
    """

    id: int = Field(description="Document identifier")
    collection: str = Field(description="Collection the document belongs to")
    body: Dict[str, Any] = Field(description="Document JSON data")
    created_at: datetime = Field(description="Insertion timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 4,
                "collection": "people",
                "body": {"name": "David", "age": 28},
                "created_at": "2024-01-01T12:00:00Z"
            }
        }
    )

    def get_path(self, path: list[str], default: Any = None) -> Any:
        """Resolve a list of keys inside ``body``."""
        value: Any = self.body
        for key in path:
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value
