"""
The single shared admin credential record.

``replace`` does not re-check the current password; callers are expected to
have called ``verify`` first. The two calls are not linked server side.
"""

from typing import Dict

import structlog
from pymongo.database import Database

from database import ADMIN_CREDENTIALS, serialize, storage_errors
from errors import NotFound
from schemas import AdminCredentials, parse

logger = structlog.get_logger(__name__)


class CredentialStore:
    def __init__(self, database: Database):
        self.collection = database[ADMIN_CREDENTIALS]

    def fetch(self) -> Dict[str, str]:
        with storage_errors("fetch_credentials", "Failed to fetch admin credentials."):
            doc = self.collection.find_one({})
        if doc is None:
            raise NotFound("Admin credentials not found.")
        return serialize(doc)

    def verify(self, username: str, password: str) -> bool:
        creds = parse(AdminCredentials, {"username": username, "password": password})
        with storage_errors("verify_credentials", "Internal server error."):
            doc = self.collection.find_one({})
        if doc is None:
            raise NotFound("Admin credentials not found.")
        ok = str(doc.get("username")) == creds.username and str(doc.get("password")) == creds.password
        if not ok:
            logger.warning("admin_verify_failed", username=creds.username)
        return ok

    def replace(self, username: str, password: str) -> None:
        creds = parse(AdminCredentials, {"username": username, "password": password})
        with storage_errors("replace_credentials", "Failed to update admin credentials."):
            self.collection.update_one({}, {"$set": creds.model_dump()}, upsert=True)
        logger.info("admin_credentials_replaced", username=creds.username)
