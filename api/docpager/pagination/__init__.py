"""Offset and cursor pagination over document stores."""

from .filters import DocumentFilter, ID_FIELD, parse_filter, with_id_before
from .store import Queryable, SortDirection, SortSpec
from .cursor import (
    CursorLinks,
    CursorPage,
    encode_cursor,
    decode_cursor,
    paginate_with_cursor
)
from .offset import (
    OffsetLinks,
    OffsetPage,
    OffsetPaginationOptions,
    PageRef,
    compute_total_pages,
    paginate_with_offset
)
from .links import create_link_header
from .memory import InMemoryDocumentStore

__all__ = [
    "DocumentFilter",
    "ID_FIELD",
    "parse_filter",
    "with_id_before",
    "Queryable",
    "SortDirection",
    "SortSpec",
    "CursorLinks",
    "CursorPage",
    "encode_cursor",
    "decode_cursor",
    "paginate_with_cursor",
    "OffsetLinks",
    "OffsetPage",
    "OffsetPaginationOptions",
    "PageRef",
    "compute_total_pages",
    "paginate_with_offset",
    "create_link_header",
    "InMemoryDocumentStore"
]
