"""
Database Schemas for the Restaurant Ordering App

Each Pydantic model describes a MongoDB document or a request body. Python
attribute names are snake_case; the stored and wire names are the camelCase
aliases the web client sends.

Collections:
- menuItems
- orders (cart lines)
- customerOrders (order ledger)
- orderHistory
- adminCredentials
"""

from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class MenuItem(Document):
    name: str = Field(..., min_length=1, description="Dish name")
    cuisine: str = Field(..., min_length=1, description="Cuisine, e.g. Indian, Chinese")
    section: str = Field(..., min_length=1, description="Menu section label, e.g. Starters")
    price: float = Field(..., gt=0, allow_inf_nan=False, description="Unit price")
    image: str = Field(..., min_length=1, description="Dish image URL")
    info: str = Field(..., min_length=1, description="Short description")


class DeleteItemRequest(Document):
    id: str = Field(..., alias="_id", min_length=1)


class CheckNameRequest(Document):
    name: str = Field(..., min_length=1)


class CartLine(Document):
    """A cart row. Display attributes are copied from the menu item when added."""

    session_id: str = Field(..., alias="sessionId", min_length=1)
    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0, allow_inf_nan=False)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None
    cuisine: Optional[str] = None
    section: Optional[str] = None


class RemoveLineRequest(Document):
    session_id: str = Field(..., alias="sessionId", min_length=1)
    id: str = Field(..., alias="_id", min_length=1)


class SessionRequest(Document):
    session_id: str = Field(..., alias="sessionId", min_length=1)


class Customer(Document):
    name: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)


class OrderItem(Document):
    """Snapshot of a grouped cart line; extra display attributes are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    total_price: Optional[float] = Field(None, alias="totalPrice", allow_inf_nan=False)


class PlacedOrder(Document):
    """
    Ledger entry.
    serial_number is count + 1 at insert time and may repeat under
    concurrent placement.
    """

    serial_number: int = Field(..., alias="serialNumber", ge=1)
    session_id: str = Field(..., alias="sessionId")
    customer: Customer
    items: List[OrderItem]
    payment_method: str = Field(..., alias="paymentMethod")
    subtotal: float
    gst_amount: float = Field(..., alias="gstAmount")
    grand_total: float = Field(..., alias="grandTotal")
    order_date: datetime = Field(..., alias="orderDate")


class AdminCredentials(Document):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


def describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse(model: Type[M], data: Any) -> M:
    """Validate ``data`` against ``model``, raising the store ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc)) from exc
