"""
Error taxonomy shared by every store.

ValidationError and NotFound carry a message meant for the caller.
StorageError wraps a backing-store failure; its message is generic and the
original exception is logged where it is raised.
"""


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class NotFound(StoreError):
    status_code = 404


class StorageError(StoreError):
    status_code = 500
