"""
Order ledger: orders that have been placed and are awaiting fulfilment.

Totals are taken from the caller as submitted; they are rounded but never
recomputed from the items. Serial numbers are the ledger size plus one at
insert time, so two concurrent placements can receive the same number.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pymongo.database import Database

from database import PLACED_ORDERS, now, parse_object_id, serialize, storage_errors
from errors import NotFound, StorageError, ValidationError
from history import HistoryArchive
from schemas import Customer, OrderItem, PlacedOrder, parse

logger = structlog.get_logger(__name__)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


class OrderLedger:
    def __init__(self, database: Database):
        self.collection = database[PLACED_ORDERS]

    def place_order(
        self,
        session_id: str,
        customer: Dict[str, Any],
        items: List[Dict[str, Any]],
        subtotal: Any,
        tax: Any,
        grand_total: Any,
        payment_method: str,
    ) -> Tuple[str, int]:
        customer = customer or {}
        if (
            not session_id
            or not customer.get("name")
            or not customer.get("contact")
            or not customer.get("address")
            or not payment_method
            or not items
            or subtotal is None
            or tax is None
            or grand_total is None
        ):
            raise ValidationError("Invalid order data")
        if not all(_is_number(v) for v in (subtotal, tax, grand_total)):
            raise ValidationError("Invalid subtotal, GST, or grand total values")

        with storage_errors("place_order", "Failed to place order"):
            serial_number = self.collection.count_documents({}) + 1

        order = parse(
            PlacedOrder,
            {
                "serialNumber": serial_number,
                "sessionId": session_id,
                "customer": parse(Customer, customer),
                "items": [parse(OrderItem, item) for item in items],
                "paymentMethod": payment_method,
                "subtotal": round(float(subtotal), 2),
                "gstAmount": round(float(tax), 2),
                "grandTotal": round(float(grand_total), 2),
                "orderDate": now(),
            },
        )
        doc = order.model_dump(by_alias=True, exclude_none=True)
        with storage_errors("place_order", "Failed to place order"):
            result = self.collection.insert_one(doc)
        if not result.acknowledged:
            raise StorageError("Failed to place order")

        order_id = str(result.inserted_id)
        logger.info(
            "order_placed",
            order_id=order_id,
            serial_number=serial_number,
            session_id=session_id,
            grand_total=order.grand_total,
        )
        return order_id, serial_number

    def get_order(self, order_id: str) -> Dict[str, Any]:
        oid = parse_object_id(order_id)
        if oid is None:
            raise NotFound("Order not found")
        with storage_errors("get_order", "Failed to fetch orders"):
            doc = self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFound("Order not found")
        return serialize(doc)

    def list_orders(self, session_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = {}
        if session_id:
            query["sessionId"] = session_id
        with storage_errors("list_orders", "Failed to fetch orders"):
            return [serialize(doc) for doc in self.collection.find(query)]

    def complete_order(self, order_id: str) -> None:
        oid = parse_object_id(order_id)
        if oid is None:
            raise NotFound("Order not found")
        with storage_errors("complete_order", "Failed to mark order as done"):
            result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound("Order not found")
        logger.info("order_completed", order_id=order_id)


def fulfil_order(ledger: OrderLedger, archive: HistoryArchive, order_id: str) -> Dict[str, Any]:
    """
    Copy an order into the history archive, then remove it from the ledger.

    The two writes are independent. A failed archive leaves the ledger
    untouched; a failed delete after a successful archive leaves the order
    in both places.
    """
    order = ledger.get_order(order_id)
    archive.archive(order)
    try:
        ledger.complete_order(order_id)
    except (NotFound, StorageError):
        logger.warning("order_archived_not_completed", order_id=order_id)
        raise
    return order
