"""Cursor-based pagination over documents ordered by identifier descending."""

import logging
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from ..errors.problem_details import InvalidCursorError, InvalidPaginationParamsError
from ..models.documents import Document
from .filters import DocumentFilter, with_id_before
from .store import Queryable, SortSpec


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

# Identifiers are BIGINT in the document table
MAX_DOCUMENT_ID = 2 ** 63 - 1

_CURSOR_PATTERN = re.compile(r"[0-9]+")


class CursorLinks(BaseModel):
    """Navigation cursors. Absent links are omitted when serialized."""

    next: Optional[str] = Field(default=None, description="Cursor for the next page")
    prev: Optional[str] = Field(default=None, description="Cursor the current page was requested with")

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class CursorPage(BaseModel):
    """One page of cursor pagination."""

    results: List[Document] = Field(description="Documents, newest first")
    pagination: CursorLinks = Field(default_factory=CursorLinks)
    has_next: bool = Field(alias="hasNext", description="Whether another page follows")

    model_config = ConfigDict(
        populate_by_name=True,
        serialize_by_alias=True,
        json_schema_extra={
            "example": {
                "results": [
                    {
                        "id": 4,
                        "collection": "people",
                        "body": {"name": "David", "age": 28},
                        "created_at": "2024-01-01T12:00:03Z"
                    },
                    {
                        "id": 3,
                        "collection": "people",
                        "body": {"name": "Charlie", "age": 35},
                        "created_at": "2024-01-01T12:00:02Z"
                    }
                ],
                "pagination": {"next": "3"},
                "hasNext": True
            }
        }
    )


def encode_cursor(document_id: int) -> str:
    """Encode a document identifier as a cursor string."""
    return str(document_id)


def decode_cursor(cursor: Any) -> int:
    """Decode a cursor string back into a document identifier.

    Args:
        cursor: Cursor received from a client

    Returns:
        The document identifier the cursor points at

    Raises:
        InvalidCursorError: If the cursor is not a non-negative integer
            within identifier range
    """
    if not isinstance(cursor, str) or not _CURSOR_PATTERN.fullmatch(cursor):
        raise InvalidCursorError(cursor)

    document_id = int(cursor)
    if document_id > MAX_DOCUMENT_ID:
        raise InvalidCursorError(cursor, "identifier out of range")
    return document_id


async def paginate_with_cursor(
    store: Queryable,
    filter: Optional[DocumentFilter] = None,
    cursor: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE
) -> CursorPage:
    """Fetch the page of documents that follows ``cursor``.

    Documents are ordered by identifier descending. One extra document is
    requested to find out whether another page exists; it is dropped from
    the results. ``prev`` echoes the cursor this page was requested with
    rather than the boundary of the page before it.

    Args:
        store: Document store to query
        filter: Filter passed through to the store
        cursor: Identifier of the last document of the previous page
        page_size: Maximum number of documents to return

    Returns:
        The page with its navigation cursors

    Raises:
        InvalidCursorError: If ``cursor`` is malformed
        InvalidPaginationParamsError: If ``page_size`` is not positive
    """
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise InvalidPaginationParamsError(
            "Page size must be a positive integer", page_size=page_size
        )

    if cursor:
        query_filter = with_id_before(filter, decode_cursor(cursor))
    else:
        query_filter = dict(filter or {})

    documents = await store.find_matching(
        query_filter,
        sort=SortSpec.by_id_descending(),
        skip=0,
        limit=page_size + 1
    )

    has_next = len(documents) > page_size
    results = documents[:page_size]

    links = CursorLinks(
        next=encode_cursor(results[-1].id) if has_next else None,
        prev=cursor or None
    )

    logger.debug(
        f"Cursor page after {cursor!r}: {len(results)} documents, has_next={has_next}"
    )
    return CursorPage(results=results, pagination=links, has_next=has_next)
