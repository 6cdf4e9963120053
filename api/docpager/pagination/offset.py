"""Offset (page number) pagination over filtered, optionally sorted documents."""

import logging
import math
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_serializer

from ..errors.problem_details import InvalidPaginationParamsError
from ..models.documents import Document
from .filters import DocumentFilter
from .store import Queryable, SortDirection, SortSpec


logger = logging.getLogger(__name__)


class OffsetPaginationOptions(BaseModel):
    """Options for offset pagination.

    Defaults: ``page=1``, ``per_page=10``, no sort field and
    ``sort_direction=1``. A ``sort_direction`` of 1 sorts ascending; any
    other value sorts descending. Non-positive ``page`` and ``per_page``
    are rejected by ``coerce_options`` as invalid pagination parameters.
    """

    page: int = Field(default=1, description="1-based page number")
    per_page: int = Field(default=10, alias="perPage", description="Documents per page")
    sort_field: Optional[str] = Field(default=None, alias="sortField", description="Body field to sort by")
    sort_direction: int = Field(default=1, alias="sortDirection", description="1 ascending, otherwise descending")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def sort(self) -> Optional[SortSpec]:
        if not self.sort_field:
            return None
        return SortSpec(
            field=self.sort_field,
            direction=SortDirection.from_value(self.sort_direction)
        )


class PageRef(BaseModel):
    """Reference to a neighbouring page."""

    page: int
    size: int


class OffsetLinks(BaseModel):
    """Neighbouring pages. Absent links are omitted when serialized."""

    next: Optional[PageRef] = None
    prev: Optional[PageRef] = None

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler):
        return {key: value for key, value in handler(self).items() if value is not None}


class OffsetPage(BaseModel):
    """One page of offset pagination with page-count metadata."""

    results: List[Document]
    pagination: OffsetLinks = Field(default_factory=OffsetLinks)
    page: int
    per_page: int = Field(alias="perPage")
    total: int
    total_pages: int = Field(alias="totalPages")

    model_config = ConfigDict(
        populate_by_name=True,
        serialize_by_alias=True,
        json_schema_extra={
            "example": {
                "results": [
                    {
                        "id": 2,
                        "collection": "people",
                        "body": {"name": "Bob", "age": 25},
                        "created_at": "2024-01-01T12:00:01Z"
                    },
                    {
                        "id": 4,
                        "collection": "people",
                        "body": {"name": "David", "age": 28},
                        "created_at": "2024-01-01T12:00:03Z"
                    }
                ],
                "pagination": {"next": {"page": 2, "size": 2}},
                "page": 1,
                "perPage": 2,
                "total": 4,
                "totalPages": 2
            }
        }
    )


def compute_total_pages(total: int, per_page: int) -> int:
    """Number of pages needed for ``total`` documents."""
    return math.ceil(total / per_page)


def build_offset_links(page: int, per_page: int, total: int) -> OffsetLinks:
    """Compute the neighbouring pages of ``page``.

    ``next`` exists while ``page`` is before the last page and carries the
    size of that next page. ``prev`` is derived from page arithmetic alone,
    so for a page past the end it can point at a page that has no results.
    """
    total_pages = compute_total_pages(total, per_page)

    next_page = None
    if page < total_pages:
        next_page = PageRef(page=page + 1, size=min(per_page, total - page * per_page))

    prev_page = None
    if page > 1:
        prev_page = PageRef(page=page - 1, size=per_page)

    return OffsetLinks(next=next_page, prev=prev_page)


def coerce_options(
    options: Union[OffsetPaginationOptions, Mapping[str, Any], None]
) -> OffsetPaginationOptions:
    """Build validated options from a model, a mapping or ``None``.

    Raises:
        InvalidPaginationParamsError: If ``page`` or ``per_page`` is not positive
    """
    if options is None:
        options = OffsetPaginationOptions()
    elif not isinstance(options, OffsetPaginationOptions):
        candidate = dict(options)
        try:
            options = OffsetPaginationOptions.model_validate(candidate)
        except ValidationError as e:
            fields = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
            raise InvalidPaginationParamsError(
                f"Invalid pagination parameters: {', '.join(fields) or 'options'}",
                page=candidate.get("page"),
                per_page=candidate.get("perPage", candidate.get("per_page"))
            )

    invalid = [
        name for name, value in (("page", options.page), ("perPage", options.per_page))
        if value < 1
    ]
    if invalid:
        raise InvalidPaginationParamsError(
            f"Invalid pagination parameters: {', '.join(invalid)} must be positive",
            page=options.page,
            per_page=options.per_page
        )
    return options


async def paginate_with_offset(
    store: Queryable,
    filter: Optional[DocumentFilter] = None,
    options: Union[OffsetPaginationOptions, Mapping[str, Any], None] = None
) -> OffsetPage:
    """Fetch one numbered page of documents matching ``filter``.

    The total is counted with the same filter before the page is fetched,
    so a page past the end yields no results and no ``next`` link.

    Args:
        store: Document store to query
        filter: Filter passed through to the store
        options: Page, page size and sort options

    Returns:
        The page with its neighbours and page-count metadata

    Raises:
        InvalidPaginationParamsError: If ``page`` or ``per_page`` is not
            positive; raised before the store is queried
    """
    options = coerce_options(options)
    filter = dict(filter or {})

    total = await store.count_matching(filter)
    total_pages = compute_total_pages(total, options.per_page)

    results = await store.find_matching(
        filter,
        sort=options.sort,
        skip=options.skip,
        limit=options.per_page
    )

    logger.debug(
        f"Offset page {options.page}/{total_pages}: {len(results)} of {total} documents"
    )
    return OffsetPage(
        results=results,
        pagination=build_offset_links(options.page, options.per_page, total),
        page=options.page,
        per_page=options.per_page,
        total=total,
        total_pages=total_pages
    )
