"""Menu items and the section/search views built over them."""

from typing import Any, Dict, List, Mapping

import structlog
from pymongo.database import Database

from database import MENU_ITEMS, create_document, get_documents, parse_object_id, serialize, storage_errors
from errors import NotFound
from schemas import MenuItem, parse

logger = structlog.get_logger(__name__)

ALL_SECTIONS = "All"


class CatalogStore:
    def __init__(self, database: Database):
        self.database = database
        self.collection = database[MENU_ITEMS]

    def create_item(self, item: Mapping[str, Any]) -> Dict[str, Any]:
        menu_item = parse(MenuItem, item)
        doc = menu_item.model_dump()
        with storage_errors("create_item", "Server Error"):
            item_id = create_document(self.database, MENU_ITEMS, doc)
        logger.info("menu_item_created", item_id=item_id, name=menu_item.name)
        return {"_id": item_id, **doc}

    def list_items(self) -> List[Dict[str, Any]]:
        with storage_errors("list_items", "Server Error"):
            return [serialize(doc) for doc in get_documents(self.database, MENU_ITEMS)]

    def delete_item(self, item_id: str) -> None:
        oid = parse_object_id(item_id)
        if oid is None:
            raise NotFound("Menu item not found.")
        with storage_errors("delete_item", "Failed to delete menu item."):
            result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound("Menu item not found.")
        logger.info("menu_item_deleted", item_id=item_id)

    def name_exists(self, name: str) -> bool:
        with storage_errors("check_item", "Failed to check menu item existence."):
            return self.collection.find_one({"name": name.strip()}) is not None


def _section_key(item: Mapping[str, Any]) -> str:
    return (item.get("section") or "").strip().lower()


def sections(items: List[Mapping[str, Any]]) -> List[str]:
    """Distinct section labels, "All" first, the first spelling seen wins."""
    labels: Dict[str, str] = {}
    for item in items:
        labels.setdefault(_section_key(item), (item.get("section") or "").strip())
    return [ALL_SECTIONS] + list(labels.values())


def group_by_section(items: List[Mapping[str, Any]]) -> Dict[str, List[Mapping[str, Any]]]:
    grouped: Dict[str, List[Mapping[str, Any]]] = {}
    labels: Dict[str, str] = {}
    for item in items:
        label = labels.setdefault(_section_key(item), (item.get("section") or "").strip())
        grouped.setdefault(label, []).append(item)
    return grouped


def search(items: List[Mapping[str, Any]], term: str = "", section: str = ALL_SECTIONS) -> List[Mapping[str, Any]]:
    term = term.lower()
    wanted = section.strip().lower()
    return [
        item
        for item in items
        if term in item.get("name", "").lower()
        and (section == ALL_SECTIONS or _section_key(item) == wanted)
    ]
