"""List-backed document store evaluating filters in Python."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..models.documents import Document
from .filters import (
    COMPARABLE_KINDS, DocumentFilter, ID_FIELD, iter_conditions, json_kind, split_path
)
from .store import SortSpec


logger = logging.getLogger(__name__)

_MISSING = object()

# Same ordering as jsonb btree comparison; missing fields sort before null
_KIND_RANK = {"null": 0, "string": 1, "number": 2, "boolean": 3, "array": 4, "object": 5}


def _field_value(document: Document, field: str) -> Any:
    if field == ID_FIELD:
        return document.id
    return document.get_path(split_path(field), _MISSING)


def _equals(value: Any, operand: Any) -> bool:
    if value is _MISSING:
        return False
    if json_kind(value) != json_kind(operand):
        return False
    return value == operand


def _compare(value: Any, operator: str, operand: Any) -> bool:
    if value is _MISSING or json_kind(value) != json_kind(operand):
        return False
    if json_kind(value) not in COMPARABLE_KINDS:
        return False
    if operator == "$lt":
        return value < operand
    if operator == "$lte":
        return value <= operand
    if operator == "$gt":
        return value > operand
    return value >= operand


def condition_holds(value: Any, operator: str, operand: Any) -> bool:
    """Evaluate one filter condition against a resolved field value."""
    if operator == "$exists":
        return (value is not _MISSING) == operand
    if operator == "$eq":
        return _equals(value, operand)
    if operator == "$ne":
        return not _equals(value, operand)
    if operator == "$in":
        return any(_equals(value, candidate) for candidate in operand)
    if operator == "$nin":
        return not any(_equals(value, candidate) for candidate in operand)
    return _compare(value, operator, operand)


def matches(document: Document, filter: Optional[DocumentFilter]) -> bool:
    """Check whether a document satisfies every condition of a filter."""
    return all(
        condition_holds(_field_value(document, field), operator, operand)
        for field, operator, operand in iter_conditions(filter)
    )


def _sort_key(value: Any):
    if value is _MISSING:
        return (-1, 0)
    kind = json_kind(value)
    if kind in ("array", "object"):
        return (_KIND_RANK[kind], json.dumps(value, sort_keys=True))
    if kind == "null":
        return (0, 0)
    return (_KIND_RANK[kind], value)


class InMemoryDocumentStore:
    """Document store holding one collection in a Python list.

    Identifiers are assigned from 1 upwards in insertion order.
    """

    def __init__(self, collection: str = "default", bodies: Optional[Iterable[Dict[str, Any]]] = None):
        self.collection = collection
        self._documents: List[Document] = []
        self._next_id = 1
        for body in bodies or ():
            self.add(body)

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, body: Dict[str, Any]) -> Document:
        """Insert a document synchronously and return it."""
        document = Document(
            id=self._next_id,
            collection=self.collection,
            body=dict(body),
            created_at=datetime.now(timezone.utc)
        )
        self._next_id += 1
        self._documents.append(document)
        return document

    async def insert_document(self, body: Dict[str, Any]) -> Document:
        return self.add(body)

    async def count_matching(self, filter: DocumentFilter) -> int:
        return sum(1 for document in self._documents if matches(document, filter))

    async def find_matching(
        self,
        filter: DocumentFilter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Document]:
        conditions = iter_conditions(filter)
        documents = sorted(
            (
                document for document in self._documents
                if all(
                    condition_holds(_field_value(document, field), operator, operand)
                    for field, operator, operand in conditions
                )
            ),
            key=lambda document: document.id
        )

        # Stable sort keeps identifier ascending between equal keys
        if sort is not None:
            documents.sort(
                key=lambda document: _sort_key(_field_value(document, sort.field)),
                reverse=sort.descending
            )

        end = None if limit is None else skip + limit
        page = documents[skip:end]
        logger.debug(
            f"In-memory query on '{self.collection}': {len(documents)} matched, {len(page)} returned"
        )
        return page
