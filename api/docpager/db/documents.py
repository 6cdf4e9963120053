"""PostgreSQL document store backed by asyncpg."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import asyncpg
from asyncpg import Pool

from ..models.documents import Document
from ..pagination.filters import DocumentFilter, ID_FIELD, iter_conditions, split_path
from ..pagination.store import SortSpec


logger = logging.getLogger(__name__)

DOCUMENT_COLUMNS = "id, collection, body, created_at"

_ID_OPERATORS = {
    "$eq": "=",
    "$ne": "<>",
    "$lt": "<",
    "$lte": "<=",
    "$gt": ">",
    "$gte": ">=",
}


class SQLParams:
    """Collects positional parameters and hands out ``$n`` placeholders."""

    def __init__(self, *initial: Any):
        self.values: List[Any] = list(initial)

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _id_condition(operator: str, operand: Any, params: SQLParams) -> str:
    if operator == "$exists":
        return "TRUE" if operand else "FALSE"
    if operator == "$in":
        return f"id = ANY({params.add(list(operand))}::bigint[])"
    if operator == "$nin":
        return f"NOT (id = ANY({params.add(list(operand))}::bigint[]))"
    return f"id {_ID_OPERATORS[operator]} {params.add(operand)}"


def _body_condition(field: str, operator: str, operand: Any, params: SQLParams) -> str:
    value = f"(body #> {params.add(split_path(field))}::text[])"

    if operator == "$exists":
        return f"{value} IS {'NOT NULL' if operand else 'NULL'}"

    operand_param = f"{params.add(json.dumps(operand))}::jsonb"
    if operator == "$eq":
        return f"{value} = {operand_param}"
    if operator == "$ne":
        return f"{value} IS DISTINCT FROM {operand_param}"
    if operator == "$in":
        return f"{value} IN (SELECT jsonb_array_elements({operand_param}))"
    if operator == "$nin":
        return f"NOT COALESCE({value} IN (SELECT jsonb_array_elements({operand_param})), FALSE)"

    # Comparisons only hold between values of the same JSON type
    return (
        f"(jsonb_typeof({value}) = jsonb_typeof({operand_param}) "
        f"AND {value} {_ID_OPERATORS[operator]} {operand_param})"
    )


def build_where_clause(
    collection: str,
    filter: Optional[DocumentFilter] = None,
    params: Optional[SQLParams] = None
) -> Tuple[str, List[Any]]:
    """Compile a document filter into a WHERE clause.

    Args:
        collection: Collection the query is scoped to
        filter: Document filter
        params: Parameter collector to append to; a new one when omitted

    Returns:
        Tuple of (where_clause, parameters)

    Raises:
        InvalidFilterError: If the filter is malformed
    """
    params = params or SQLParams()
    conditions = [f"collection = {params.add(collection)}"]

    for field, operator, operand in iter_conditions(filter):
        if field == ID_FIELD:
            conditions.append(_id_condition(operator, operand, params))
        else:
            conditions.append(_body_condition(field, operator, operand, params))

    return " AND ".join(conditions), params.values


def build_order_clause(sort: Optional[SortSpec], params: SQLParams) -> str:
    """Build the ORDER BY clause; identifier ascending breaks ties."""
    if sort is None:
        return "ORDER BY id ASC"
    if sort.is_id:
        return f"ORDER BY id {'DESC' if sort.descending else 'ASC'}"

    path = params.add(split_path(sort.field))
    direction = "DESC NULLS LAST" if sort.descending else "ASC NULLS FIRST"
    return f"ORDER BY body #> {path}::text[] {direction}, id ASC"


def row_to_document(row: asyncpg.Record) -> Document:
    """Convert a result row, decoding a JSONB body delivered as text."""
    row_dict: Dict[str, Any] = dict(row)
    if isinstance(row_dict.get("body"), str):
        row_dict["body"] = json.loads(row_dict["body"])
    return Document.model_validate(row_dict)


class PostgresDocumentStore:
    """Document store for one collection of the ``documents`` table.

    Database errors are logged and re-raised unchanged.
    """

    def __init__(self, pool: Pool, collection: str):
        self.pool = pool
        self.collection = collection

    async def count_matching(self, filter: DocumentFilter) -> int:
        where_clause, params = build_where_clause(self.collection, filter)
        query = f"SELECT COUNT(*) FROM documents WHERE {where_clause}"

        try:
            async with self.pool.acquire() as conn:
                total = await conn.fetchval(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error counting documents in '{self.collection}': {e}")
            raise

        logger.debug(f"Counted {total} documents in '{self.collection}'")
        return int(total or 0)

    async def find_matching(
        self,
        filter: DocumentFilter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Document]:
        params = SQLParams()
        where_clause, _ = build_where_clause(self.collection, filter, params)
        order_clause = build_order_clause(sort, params)
        skip_param = params.add(skip)
        limit_param = params.add(limit)

        query = f"""
            SELECT {DOCUMENT_COLUMNS}
            FROM documents
            WHERE {where_clause}
            {order_clause}
            OFFSET {skip_param}
            LIMIT {limit_param}
        """

        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *params.values)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error querying documents in '{self.collection}': {e}")
            raise

        logger.debug(f"Fetched {len(rows)} documents from '{self.collection}'")
        return [row_to_document(row) for row in rows]

    async def insert_document(self, body: Dict[str, Any]) -> Document:
        """Insert a document and return it with its assigned identifier."""
        query = f"""
            INSERT INTO documents (collection, body)
            VALUES ($1, $2::jsonb)
            RETURNING {DOCUMENT_COLUMNS}
        """

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, self.collection, json.dumps(body))
        except asyncpg.PostgresError as e:
            logger.error(f"Database error inserting document into '{self.collection}': {e}")
            raise

        document = row_to_document(row)
        logger.info(f"Created document {document.id} in collection '{self.collection}'")
        return document
