"""Document filter language shared by every document store.

Filters are Mongo-style mappings. Top-level keys name either a body field
(dotted paths reach into nested objects) or ``_id``, the document
identifier. A plain value means equality; a mapping of ``$``-prefixed keys
applies operators:

    {"age": {"$gte": 18}, "name": "Alice", "_id": {"$lt": 42}}

``$and`` takes a list of filters which must all match.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..errors.problem_details import InvalidFilterError


logger = logging.getLogger(__name__)

DocumentFilter = Dict[str, Any]

ID_FIELD = "_id"

COMPARISON_OPERATORS = ("$lt", "$lte", "$gt", "$gte")
SUPPORTED_OPERATORS = frozenset(
    ("$eq", "$ne", "$in", "$nin", "$exists") + COMPARISON_OPERATORS
)
COMPARABLE_KINDS = frozenset(("number", "string", "boolean"))


def json_kind(value: Any) -> str:
    """Name the JSON type of a value the way ``jsonb_typeof`` does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    raise InvalidFilterError(f"Unsupported filter value of type {type(value).__name__}")


def is_operator_mapping(value: Any) -> bool:
    """Check whether a filter value is an operator mapping like ``{"$gt": 1}``.

    Raises:
        InvalidFilterError: If operator keys are mixed with plain keys
    """
    if not isinstance(value, dict) or not value:
        return False
    dollar_keys = [key for key in value if isinstance(key, str) and key.startswith("$")]
    if not dollar_keys:
        return False
    if len(dollar_keys) != len(value):
        raise InvalidFilterError("Cannot mix operators and plain fields in one condition")
    return True


def split_path(field: str) -> List[str]:
    """Split a dotted body path into its segments."""
    parts = field.split(".")
    if not all(parts):
        raise InvalidFilterError(f"Invalid field path '{field}'", field=field)
    return parts


def iter_conditions(filter: Optional[DocumentFilter]) -> List[Tuple[str, str, Any]]:
    """Flatten a filter into ``(field, operator, operand)`` triples.

    ``$and`` clauses are flattened into the same list since every condition
    has to hold anyway.

    Args:
        filter: Filter mapping, ``None`` or empty for "match everything"

    Returns:
        List of conditions in declaration order

    Raises:
        InvalidFilterError: If the filter is malformed or uses an unknown operator
    """
    if not filter:
        return []
    if not isinstance(filter, dict):
        raise InvalidFilterError(f"Filter must be an object, got {type(filter).__name__}")

    conditions: List[Tuple[str, str, Any]] = []
    for field, value in filter.items():
        if field == "$and":
            if not isinstance(value, list):
                raise InvalidFilterError("$and expects a list of filters", field=field)
            for clause in value:
                conditions.extend(iter_conditions(clause))
            continue

        if not isinstance(field, str) or field.startswith("$"):
            raise InvalidFilterError(f"Unsupported top-level operator '{field}'", field=str(field))

        if is_operator_mapping(value):
            for operator, operand in value.items():
                if operator not in SUPPORTED_OPERATORS:
                    raise InvalidFilterError(f"Unsupported operator '{operator}'", field=field)
                if operator in ("$in", "$nin") and not isinstance(operand, list):
                    raise InvalidFilterError(f"{operator} expects a list", field=field)
                if operator == "$exists" and not isinstance(operand, bool):
                    raise InvalidFilterError("$exists expects a boolean", field=field)
                if operator in COMPARISON_OPERATORS and json_kind(operand) not in COMPARABLE_KINDS:
                    raise InvalidFilterError(
                        f"{operator} expects a number, string or boolean", field=field
                    )
                conditions.append((field, operator, operand))
        else:
            conditions.append((field, "$eq", value))

    for field, operator, operand in conditions:
        if field != ID_FIELD:
            split_path(field)
        elif operator != "$exists":
            _check_id_operand(operator, operand)
    return conditions


def _check_id_operand(operator: str, operand: Any) -> None:
    # Only set membership takes a list of identifiers
    values = operand if operator in ("$in", "$nin") else [operand]
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidFilterError(
                f"Identifier conditions take integers, got {value!r}", field=ID_FIELD
            )


def with_id_before(filter: Optional[DocumentFilter], document_id: int) -> DocumentFilter:
    """Constrain a filter to documents whose identifier is below ``document_id``.

    The caller's filter is never mutated. When it already constrains
    ``_id`` both conditions are kept under ``$and``.
    """
    boundary = {ID_FIELD: {"$lt": document_id}}
    if not filter:
        return boundary
    if ID_FIELD in filter:
        return {"$and": [boundary, dict(filter)]}
    return {**boundary, **filter}


def parse_filter(raw: Optional[str]) -> DocumentFilter:
    """Parse a JSON-encoded filter from a query string parameter.

    Raises:
        InvalidFilterError: If the value is not a JSON object or is malformed
    """
    if raw is None or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidFilterError(f"Filter is not valid JSON: {e.msg}")
    if not isinstance(parsed, dict):
        raise InvalidFilterError("Filter must be a JSON object")

    # Validate eagerly so bad filters fail before reaching a store
    iter_conditions(parsed)
    logger.debug(f"Parsed filter {parsed}")
    return parsed
