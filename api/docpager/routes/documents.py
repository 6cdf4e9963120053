"""Document API endpoints: insert, offset pagination and cursor pagination."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Query, Request, Response

from ..dependencies import AppSettings, DocumentStore
from ..errors.problem_details import InvalidPaginationParamsError
from ..models.documents import Document, DocumentCreate
from ..pagination import (
    CursorPage,
    OffsetPage,
    create_link_header,
    paginate_with_cursor,
    paginate_with_offset,
    parse_filter
)


logger = logging.getLogger(__name__)

documents_router = APIRouter(
    prefix="/collections/{collection}/documents",
    tags=["Documents"],
    responses={
        400: {"description": "Bad Request - Invalid cursor or filter"},
        422: {"description": "Unprocessable Entity - Invalid pagination parameters"},
        500: {"description": "Document store failure"}
    }
)

FilterParam = Annotated[
    Optional[str],
    Query(
        alias="filter",
        description='JSON filter, e.g. {"age": {"$gte": 18}}',
        examples=['{"name": "Alice"}']
    )
]


def _check_page_size(size: int, settings) -> None:
    if size > settings.max_page_size:
        raise InvalidPaginationParamsError(
            f"Page size must not exceed {settings.max_page_size}", page_size=size
        )


def _base_url(request: Request) -> str:
    return str(request.url).split('?')[0]


@documents_router.post(
    "",
    response_model=Document,
    status_code=201,
    summary="Insert a document",
    description="Insert a document; its identifier is assigned in insertion order.",
    responses={201: {"description": "Document created successfully"}}
)
async def create_document(
    collection: str,
    document: DocumentCreate,
    store: DocumentStore
) -> Document:
    """Insert a document into a collection.

    Fields may be sent at the top level or wrapped in ``body``.
    """
    created = await store.insert_document(document.to_body())
    logger.info(f"Inserted document {created.id} into collection '{collection}'")
    return created


@documents_router.get(
    "/offset-paginate",
    response_model=OffsetPage,
    summary="List documents by page number",
    description="Offset pagination with total counts and optional sorting by a body field.",
    responses={200: {"description": "Page retrieved successfully"}}
)
async def offset_paginate(
    collection: str,
    request: Request,
    response: Response,
    store: DocumentStore,
    settings: AppSettings,
    filter: FilterParam = None,
    page: Annotated[int, Query(description="1-based page number")] = 1,
    per_page: Annotated[Optional[int], Query(alias="perPage", description="Documents per page")] = None,
    sort_field: Annotated[Optional[str], Query(alias="sortField", description="Body field to sort by")] = None,
    sort_direction: Annotated[int, Query(alias="sortDirection", description="1 ascending, otherwise descending")] = 1
) -> OffsetPage:
    """List one page of documents.

    Args:
        collection: Collection to list
        request: FastAPI request object
        response: FastAPI response object for adding headers
        store: Document store for the collection
        settings: Application settings
        filter: JSON-encoded document filter
        page: Page number, starting at 1
        per_page: Page size; defaults to the configured page size
        sort_field: Body field to sort by; store order when omitted
        sort_direction: 1 for ascending, anything else for descending

    Returns:
        The page with neighbours, totals and a Link header
    """
    per_page = per_page if per_page is not None else settings.default_page_size
    _check_page_size(per_page, settings)

    options = {
        "page": page,
        "perPage": per_page,
        "sortField": sort_field,
        "sortDirection": sort_direction
    }
    result = await paginate_with_offset(store, parse_filter(filter), options)

    links = result.pagination
    link_header = create_link_header(
        base_url=_base_url(request),
        params={
            "perPage": per_page,
            "sortField": sort_field,
            "sortDirection": sort_direction if sort_field else None,
            "filter": filter
        },
        links={
            "next": {"page": links.next.page} if links.next else None,
            "prev": {"page": links.prev.page} if links.prev else None
        }
    )
    if link_header:
        response.headers["Link"] = link_header

    logger.info(
        f"Offset page {result.page}/{result.total_pages} of '{collection}': "
        f"{len(result.results)} of {result.total} documents"
    )
    return result


@documents_router.get(
    "/cursor-paginate",
    response_model=CursorPage,
    summary="List documents after a cursor",
    description="Cursor pagination, newest documents first.",
    responses={200: {"description": "Page retrieved successfully"}}
)
async def cursor_paginate(
    collection: str,
    request: Request,
    response: Response,
    store: DocumentStore,
    settings: AppSettings,
    filter: FilterParam = None,
    cursor: Annotated[Optional[str], Query(description="Cursor from a previous page's pagination.next")] = None,
    limit: Annotated[Optional[int], Query(description="Documents per page")] = None
) -> CursorPage:
    """List the documents that follow ``cursor``.

    ``pagination.prev`` echoes the cursor the page was requested with.
    """
    page_size = limit if limit is not None else settings.default_page_size
    _check_page_size(page_size, settings)

    result = await paginate_with_cursor(store, parse_filter(filter), cursor, page_size)

    link_header = create_link_header(
        base_url=_base_url(request),
        params={"limit": page_size, "filter": filter},
        links={
            "next": {"cursor": result.pagination.next} if result.has_next else None,
            "first": {} if cursor else None
        }
    )
    if link_header:
        response.headers["Link"] = link_header

    logger.info(
        f"Cursor page of '{collection}' after {cursor!r}: "
        f"{len(result.results)} documents, has_next={result.has_next}"
    )
    return result
