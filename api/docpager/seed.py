"""Demo data for trying the pagination endpoints."""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DEMO_PEOPLE: List[Dict[str, Any]] = [
    {"name": "Alice", "age": 30},
    {"name": "Bob", "age": 25},
    {"name": "Charlie", "age": 35},
    {"name": "David", "age": 28},
]


async def seed_demo_data(store) -> int:
    """Insert the demo people into an empty collection.

    Args:
        store: Document store with ``count_matching`` and ``insert_document``

    Returns:
        Number of documents inserted; 0 when the collection already has data
    """
    existing = await store.count_matching({})
    if existing:
        logger.info(f"Skipping demo data, collection '{store.collection}' has {existing} documents")
        return 0

    # Sequential inserts keep identifiers in list order
    for person in DEMO_PEOPLE:
        await store.insert_document(dict(person))

    logger.info(f"Inserted {len(DEMO_PEOPLE)} demo documents into '{store.collection}'")
    return len(DEMO_PEOPLE)
