"""The query capability paginators depend on."""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Protocol, runtime_checkable

from ..models.documents import Document
from .filters import DocumentFilter, ID_FIELD


class SortDirection(IntEnum):
    """Sort direction, using the 1 / -1 convention of the query language."""

    ASCENDING = 1
    DESCENDING = -1

    @classmethod
    def from_value(cls, value: int) -> "SortDirection":
        """1 means ascending; anything else means descending."""
        return cls.ASCENDING if value == 1 else cls.DESCENDING


@dataclass(frozen=True)
class SortSpec:
    """Field plus direction. ``field == "_id"`` sorts by identifier."""

    field: str
    direction: SortDirection = SortDirection.ASCENDING

    @classmethod
    def by_id_descending(cls) -> "SortSpec":
        return cls(field=ID_FIELD, direction=SortDirection.DESCENDING)

    @property
    def is_id(self) -> bool:
        return self.field == ID_FIELD

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING


@runtime_checkable
class Queryable(Protocol):
    """A document store that can count and fetch ordered ranges.

    Implementations must apply ``filter`` identically in both methods and
    return documents in ``sort`` order, identifier ascending when ``sort``
    is ``None`` or as a tie-breaker between equal sort keys.
    """

    async def count_matching(self, filter: DocumentFilter) -> int:
        ...

    async def find_matching(
        self,
        filter: DocumentFilter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Document]:
        ...
