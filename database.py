"""
MongoDB access for the ordering service.

The client is created at import time; pymongo connects lazily, so importing
this module never blocks on the server. Stores receive a ``Database`` handle
(see ``get_db``) instead of reaching for the module global, which lets tests
swap in an in-memory database.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import structlog
from bson import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

import config
from errors import StorageError

logger = structlog.get_logger(__name__)

# Collection names
MENU_ITEMS = "menuItems"
CART_LINES = "orders"
PLACED_ORDERS = "customerOrders"
ORDER_HISTORY = "orderHistory"
ADMIN_CREDENTIALS = "adminCredentials"

client: MongoClient = MongoClient(config.DATABASE_URL, tz_aware=True, connect=False)
db: Database = client[config.DATABASE_NAME]


def get_db() -> Database:
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for ``value``, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Make a stored document JSON friendly (ObjectId and datetime to str)."""
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            out[key] = str(value)
        elif isinstance(value, datetime):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out


@contextmanager
def storage_errors(operation: str, message: str):
    """Translate driver failures into StorageError, logging the cause."""
    try:
        yield
    except PyMongoError as exc:
        logger.error("storage_failure", operation=operation, error=str(exc))
        raise StorageError(message) from exc


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_none=True)
    doc = dict(data)
    result = database[collection_name].insert_one(doc)
    if not result.acknowledged:
        raise StorageError(f"Insert into {collection_name} was not acknowledged")
    return str(result.inserted_id)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None) -> List[dict]:
    return list(database[collection_name].find(filter_dict or {}))
