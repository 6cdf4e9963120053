"""FastAPI dependencies wiring document stores into request handlers."""

import logging
from typing import Annotated, Union

from fastapi import Depends, Path, Request
from starlette.datastructures import State

from .config import Settings
from .db.documents import PostgresDocumentStore
from .pagination.memory import InMemoryDocumentStore


logger = logging.getLogger(__name__)

COLLECTION_NAME_PATTERN = r"^[a-zA-Z0-9_-]{1,100}$"


async def open_document_store(
    state: State,
    collection: str
) -> Union[PostgresDocumentStore, InMemoryDocumentStore]:
    """Build the store for one collection from application state.

    A new ``PostgresDocumentStore`` is built per call around the pool
    owned by the application. The in-memory backend keeps one store per
    collection on the state.
    """
    if state.settings.document_store == "memory":
        stores = state.memory_stores
        if collection not in stores:
            stores[collection] = InMemoryDocumentStore(collection)
            logger.info(f"Created in-memory collection '{collection}'")
        return stores[collection]

    pool = await state.db_manager.get_pool()
    return PostgresDocumentStore(pool, collection)


async def get_document_store(
    request: Request,
    collection: Annotated[str, Path(pattern=COLLECTION_NAME_PATTERN, description="Collection name")]
) -> Union[PostgresDocumentStore, InMemoryDocumentStore]:
    """Store for the collection named in the request path."""
    return await open_document_store(request.app.state, collection)


DocumentStore = Annotated[
    Union[PostgresDocumentStore, InMemoryDocumentStore], Depends(get_document_store)
]


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]
