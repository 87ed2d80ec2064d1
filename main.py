from typing import Optional

import structlog
from bson import ObjectId
from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database

import config
from cart import CartStore
from catalog import ALL_SECTIONS, CatalogStore, group_by_section, search, sections
from credentials import CredentialStore
from database import get_db
from errors import StoreError, ValidationError
from history import HistoryArchive
from ledger import OrderLedger, fulfil_order
from logging_config import add_context, clear_context, configure_logging
from pricing import calculate_totals, count_items, group_lines
from schemas import (
    AdminCredentials,
    CheckNameRequest,
    DeleteItemRequest,
    RemoveLineRequest,
    SessionRequest,
    describe_errors,
)

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="Restaurant Ordering API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    clear_context()
    add_context(method=request.method, path=request.url.path)
    return await call_next(request)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": describe_errors(exc)})


# ---------- Helpers ----------

def to_object_id(id_str: str, message: str = "Invalid id format") -> ObjectId:
    if not id_str or not ObjectId.is_valid(id_str):
        raise ValidationError(message)
    return ObjectId(id_str)


def get_catalog(db: Database = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)


def get_cart(db: Database = Depends(get_db)) -> CartStore:
    return CartStore(db)


def get_ledger(db: Database = Depends(get_db)) -> OrderLedger:
    return OrderLedger(db)


def get_archive(db: Database = Depends(get_db)) -> HistoryArchive:
    return HistoryArchive(db)


def get_credentials(db: Database = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


@app.get("/health")
def health(db: Database = Depends(get_db)):
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": db.name,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "Connected & Working"
        response["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("health_check_failed", error=str(e))
        response["database"] = f"Connected but Error: {str(e)[:50]}"
    return response


# ---------- Menu ----------

@app.get("/")
def list_menu(catalog: CatalogStore = Depends(get_catalog)):
    return catalog.list_items()


@app.get("/menu/sections")
def list_sections(catalog: CatalogStore = Depends(get_catalog)):
    return sections(catalog.list_items())


@app.get("/menu")
def browse_menu(
    q: str = "",
    section: str = ALL_SECTIONS,
    catalog: CatalogStore = Depends(get_catalog),
):
    return group_by_section(search(catalog.list_items(), q, section))


@app.post("/check")
def check_menu_item(body: CheckNameRequest, catalog: CatalogStore = Depends(get_catalog)):
    return {"exists": catalog.name_exists(body.name)}


@app.post("/", status_code=201)
def add_menu_item(payload: dict = Body(...), catalog: CatalogStore = Depends(get_catalog)):
    new_item = catalog.create_item(payload)
    return {"message": "Menu item added successfully", "newItem": new_item}


@app.delete("/")
def delete_menu_item(body: DeleteItemRequest, catalog: CatalogStore = Depends(get_catalog)):
    to_object_id(body.id, "Invalid or missing menu item ID.")
    catalog.delete_item(body.id)
    return {"message": "Menu item deleted successfully."}


# ---------- Cart ----------

@app.post("/order", status_code=201)
def add_to_cart(payload: dict = Body(...), cart: CartStore = Depends(get_cart)):
    line = cart.add_line(payload.get("sessionId"), payload, payload.get("quantity"))
    return {"message": "Item added to cart successfully", "cartItem": line}


@app.get("/orders")
def list_cart(session_id: Optional[str] = Query(None, alias="sessionId"), cart: CartStore = Depends(get_cart)):
    return cart.list_lines(session_id)


@app.get("/orders/summary")
def cart_summary(session_id: Optional[str] = Query(None, alias="sessionId"), cart: CartStore = Depends(get_cart)):
    items = group_lines(cart.list_lines(session_id))
    return {"items": items, "totalItems": count_items(items), **calculate_totals(items)}


@app.delete("/orders/clear")
def clear_cart(body: SessionRequest, cart: CartStore = Depends(get_cart)):
    cart.clear_session(body.session_id)
    return {"message": "Cart cleared successfully."}


@app.delete("/orders")
def remove_from_cart(body: RemoveLineRequest, cart: CartStore = Depends(get_cart)):
    to_object_id(body.id, "Invalid or missing session ID or order ID.")
    cart.remove_line(body.session_id, body.id)
    return {"message": "Order removed successfully"}


# ---------- Orders ----------

@app.post("/place-order", status_code=201)
def place_order(payload: dict = Body(...), ledger: OrderLedger = Depends(get_ledger)):
    order_id, serial_number = ledger.place_order(
        session_id=payload.get("sessionId"),
        customer={
            "name": payload.get("name"),
            "contact": payload.get("contact"),
            "address": payload.get("address"),
        },
        items=payload.get("items"),
        subtotal=payload.get("subtotal"),
        tax=payload.get("gstAmount"),
        grand_total=payload.get("grandTotal"),
        payment_method=payload.get("paymentMethod"),
    )
    return {"message": "Order placed successfully", "orderId": order_id, "serialNumber": serial_number}


@app.get("/place-order")
def list_orders(session_id: Optional[str] = Query(None, alias="sessionId"), ledger: OrderLedger = Depends(get_ledger)):
    return ledger.list_orders(session_id)


@app.delete("/place-order/{order_id}")
def complete_order(order_id: str, ledger: OrderLedger = Depends(get_ledger)):
    to_object_id(order_id, "Invalid order ID")
    ledger.complete_order(order_id)
    return {"message": "Order marked as done"}


@app.post("/place-order/{order_id}/fulfil")
def fulfil(
    order_id: str,
    ledger: OrderLedger = Depends(get_ledger),
    archive: HistoryArchive = Depends(get_archive),
):
    to_object_id(order_id, "Invalid order ID")
    order = fulfil_order(ledger, archive, order_id)
    return {"message": "Order marked as done", "serialNumber": order.get("serialNumber")}


# ---------- Admin ----------

@app.get("/admin")
def get_admin(credentials: CredentialStore = Depends(get_credentials)):
    return credentials.fetch()


@app.post("/admin/verify")
def verify_admin(body: AdminCredentials, credentials: CredentialStore = Depends(get_credentials)):
    if not credentials.verify(body.username, body.password):
        return JSONResponse(status_code=401, content={"message": "Invalid username or password."})
    return {"message": "Credentials verified successfully."}


@app.put("/admin")
def update_admin(body: AdminCredentials, credentials: CredentialStore = Depends(get_credentials)):
    credentials.replace(body.username, body.password)
    return {"message": "Admin credentials updated successfully."}


# ---------- Order history ----------

@app.post("/order-history", status_code=201)
def save_history(payload: dict = Body(...), archive: HistoryArchive = Depends(get_archive)):
    archive.archive(payload)
    return {"message": "Order saved to history"}


@app.get("/order-history")
def list_history(session_id: Optional[str] = Query(None, alias="sessionId"), archive: HistoryArchive = Depends(get_archive)):
    return archive.list_by_session(session_id)


@app.delete("/order-history")
def clear_history(session_id: Optional[str] = Query(None, alias="sessionId"), archive: HistoryArchive = Depends(get_archive)):
    archive.clear_session(session_id)
    return {"message": "Order history cleared successfully."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
