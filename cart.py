"""Session-scoped cart lines."""

from typing import Any, Dict, List, Mapping

import structlog
from pymongo.database import Database

from database import CART_LINES, parse_object_id, serialize, storage_errors
from errors import NotFound, StorageError, ValidationError
from schemas import CartLine, parse

logger = structlog.get_logger(__name__)


class CartStore:
    """
    Every add inserts a new row; identical items are merged only when the
    cart is read and grouped (see pricing.group_lines).
    """

    def __init__(self, database: Database):
        self.collection = database[CART_LINES]

    def add_line(self, session_id: str, item: Mapping[str, Any], quantity: int = 1) -> Dict[str, Any]:
        data = {
            "sessionId": session_id,
            "name": item.get("name"),
            "price": item.get("price"),
            "quantity": quantity,
            "image": item.get("image"),
            "cuisine": item.get("cuisine"),
            "section": item.get("section"),
        }
        if any(data[k] is None for k in ("sessionId", "name", "price", "quantity")):
            raise ValidationError("Session ID, name, price, and quantity are required.")
        line = parse(CartLine, data)

        doc = line.model_dump(by_alias=True, exclude_none=True)
        with storage_errors("add_line", "Failed to add item to cart."):
            result = self.collection.insert_one(doc)
        if not result.acknowledged:
            raise StorageError("Failed to add item to cart.")
        logger.info("cart_line_added", session_id=session_id, name=line.name, quantity=line.quantity)
        return serialize(doc)

    def list_lines(self, session_id: str) -> List[Dict[str, Any]]:
        if not session_id:
            raise ValidationError("Session ID is required.")
        with storage_errors("list_lines", "Failed to fetch orders"):
            return [serialize(doc) for doc in self.collection.find({"sessionId": session_id})]

    def remove_line(self, session_id: str, line_id: str) -> None:
        if not session_id:
            raise ValidationError("Session ID is required.")
        oid = parse_object_id(line_id)
        if oid is None:
            raise NotFound("Order not found")
        with storage_errors("remove_line", "Failed to remove order"):
            result = self.collection.delete_one({"sessionId": session_id, "_id": oid})
        if result.deleted_count == 0:
            raise NotFound("Order not found")
        logger.info("cart_line_removed", session_id=session_id, line_id=line_id)

    def clear_session(self, session_id: str) -> int:
        """Remove every line of the session. Clearing an empty cart is not an error."""
        if not session_id:
            raise ValidationError("Session ID is required.")
        with storage_errors("clear_cart", "Failed to clear cart."):
            result = self.collection.delete_many({"sessionId": session_id})
        logger.info("cart_cleared", session_id=session_id, removed=result.deleted_count)
        return result.deleted_count
