"""
Cart aggregation and order totals.

``group_lines`` turns the raw cart rows of a session into the view that is
shown to the customer and submitted as the order's ``items``;
``calculate_totals`` derives subtotal, GST and grand total from that view.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

import config

logger = structlog.get_logger(__name__)

# Per-line attributes carried into the grouped view
DISPLAY_FIELDS = ("image", "cuisine", "section")


def _quantity(line: Mapping[str, Any]) -> int:
    return line.get("quantity") or 1


def group_lines(lines: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Merge lines that share a name.

    The merged quantity and totalPrice are sums over the original lines. The
    unit price and display attributes are those of the first line seen, so
    two lines with the same name and different prices keep an exact
    totalPrice but show the first price.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for line in lines:
        qty = _quantity(line)
        line_total = line["price"] * qty
        existing = grouped.get(line["name"])
        if existing is None:
            merged = {"name": line["name"], "price": line["price"], "quantity": qty, "totalPrice": line_total}
            for field in DISPLAY_FIELDS:
                if line.get(field) is not None:
                    merged[field] = line[field]
            grouped[line["name"]] = merged
            continue
        if existing["price"] != line["price"]:
            logger.warning(
                "cart_price_mismatch",
                name=line["name"],
                first_price=existing["price"],
                other_price=line["price"],
            )
        existing["quantity"] += qty
        existing["totalPrice"] += line_total
    return list(grouped.values())


def count_items(items: Iterable[Mapping[str, Any]]) -> int:
    return sum(_quantity(item) for item in items)


def line_total(item: Mapping[str, Any]) -> float:
    if item.get("totalPrice") is not None:
        return item["totalPrice"]
    return item["price"] * _quantity(item)


def calculate_totals(items: Iterable[Mapping[str, Any]], tax_rate: Optional[float] = None) -> Dict[str, float]:
    if tax_rate is None:
        tax_rate = config.TAX_RATE
    subtotal = sum(line_total(item) for item in items)
    gst_amount = subtotal * tax_rate
    grand_total = subtotal + gst_amount
    return {
        "subtotal": round(subtotal, 2),
        "gstAmount": round(gst_amount, 2),
        "grandTotal": round(grand_total, 2),
    }
