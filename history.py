"""Customer-facing archive of fulfilled orders, keyed by session."""

from typing import Any, Dict, List, Mapping

import structlog
from pymongo.database import Database

from database import ORDER_HISTORY, serialize, storage_errors
from errors import NotFound, StorageError, ValidationError

logger = structlog.get_logger(__name__)


class HistoryArchive:
    def __init__(self, database: Database):
        self.collection = database[ORDER_HISTORY]

    def archive(self, order: Mapping[str, Any]) -> str:
        """Store a copy of a ledger entry. The payload is kept as given, including its ``_id``."""
        if not order or not order.get("_id"):
            raise ValidationError("Invalid order data")
        if not order.get("sessionId"):
            raise ValidationError("Invalid order data: sessionId is required")

        doc = dict(order)
        with storage_errors("archive_order", "Failed to save order to history"):
            result = self.collection.insert_one(doc)
        if not result.acknowledged:
            raise StorageError("Failed to save order to history")
        logger.info("order_archived", order_id=str(doc["_id"]), session_id=doc["sessionId"])
        return str(result.inserted_id)

    def list_by_session(self, session_id: str) -> List[Dict[str, Any]]:
        if not session_id:
            raise ValidationError("Session ID is required.")
        with storage_errors("list_history", "Failed to fetch order history"):
            return [serialize(doc) for doc in self.collection.find({"sessionId": session_id})]

    def clear_session(self, session_id: str) -> int:
        """Delete a session's history. Unlike the cart, an empty history is reported as NotFound."""
        if not session_id:
            raise ValidationError("Session ID is required.")
        with storage_errors("clear_history", "Failed to clear order history."):
            result = self.collection.delete_many({"sessionId": session_id})
        if result.deleted_count == 0:
            raise NotFound("No order history found for the given session ID.")
        logger.info("history_cleared", session_id=session_id, removed=result.deleted_count)
        return result.deleted_count
