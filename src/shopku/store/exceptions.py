"""Store error taxonomy.

Every error carries a stable ``kind`` (safe to show to API clients) and the
HTTP status the API layer answers with.
"""


class StoreError(Exception):
    """Base class for store failures."""

    kind = "store_error"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def as_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class InvalidArgument(StoreError):
    """A required identifier or argument is missing or malformed."""

    kind = "invalid_argument"
    status_code = 400


class InvalidPayload(StoreError):
    """An order request is structurally invalid."""

    kind = "invalid_payload"
    status_code = 400


class NotFound(StoreError):
    """A user, product, cart line or order does not exist (or is not visible)."""

    kind = "not_found"
    status_code = 404


class Forbidden(StoreError):
    """The order belongs to a different user."""

    kind = "forbidden"
    status_code = 403


class InsufficientFunds(StoreError):
    """The ShopKu Pay wallet cannot cover the order total."""

    kind = "insufficient_funds"
    status_code = 402


class InvalidOrderState(StoreError):
    """The requested status transition is not allowed from the current status."""

    kind = "invalid_order_state"
    status_code = 409


class StorageError(StoreError):
    """The database rejected or failed a read or write."""

    kind = "storage_error"
    status_code = 500


class ItemPersistenceError(StorageError):
    """Order lines could not be written; the order header was discarded."""

    kind = "item_persistence_error"


class SettlementFailed(StorageError):
    """The paid status could not be persisted; the order is still pending."""

    kind = "settlement_failed"
