"""
Gateway error taxonomy.

Every error carries a human-readable message suitable for display. The
HTTP layer maps each class to a status code via ``status_code``.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway errors."""
    status_code = 400
    code = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(GatewayError):
    """Raised for malformed amounts, addresses or request fields."""
    code = "invalid_input"


class InvalidAddress(InvalidInput):
    """Raised when a payout address matches neither supported format."""
    code = "invalid_address"

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            "Invalid address format: expected an ERC20 address (0x followed by 40 hex "
            "characters) or a TRC20 address (T followed by 33 Base58 characters)"
        )


class Unauthorized(GatewayError):
    """Raised when the actor lacks the rights for an operation."""
    status_code = 403
    code = "unauthorized"


class IllegalTransition(GatewayError):
    """Raised when a status change is not allowed from the current state."""
    status_code = 409
    code = "illegal_transition"

    def __init__(self, entity: str, current: Optional[str], target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot change {entity} status from '{current}' to '{target}'")


class NotFound(GatewayError):
    """Raised when a referenced record does not exist."""
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity.capitalize()} {record_id} not found")


class Conflict(GatewayError):
    """Raised when a record would violate a uniqueness rule."""
    status_code = 409
    code = "conflict"


class StoreUnavailable(GatewayError):
    """Raised when a record store round trip fails. Retryable by the caller."""
    status_code = 503
    code = "store_unavailable"


class NotificationFailed(GatewayError):
    """Raised inside the notification sink only; never reaches callers."""
    status_code = 502
    code = "notification_failed"
