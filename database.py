"""
Database helpers

MongoDB access for the admin console. The connection is configured from the
environment:
- DATABASE_URL  -> Mongo connection string
- DATABASE_NAME -> database holding the "contacts" and "enrollments" collections

When either variable is missing `db` stays None and the helpers raise.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import MongoClient

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

client: Optional[MongoClient] = None
db = None

if DATABASE_URL and DATABASE_NAME:
    try:
        client = MongoClient(DATABASE_URL)
        db = client[DATABASE_NAME]
    except Exception as e:
        logger.error("Mongo client init failed: %s", e)
        client = None
        db = None


def _require(database):
    if database is None:
        raise RuntimeError("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
    return database


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[Sequence[Tuple[str, int]]] = None,
    database=None,
) -> List[Dict[str, Any]]:
    """Get documents from a collection, optionally sorted and capped"""
    database = _require(database if database is not None else db)
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def count_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, database=None) -> int:
    database = _require(database if database is not None else db)
    return database[collection_name].count_documents(filter_dict or {})
