"""Domain exceptions for the receipt lifecycle.

Each exception carries a ``code`` naming its place in the error taxonomy.
Decision points (verification, dispatch) turn these into typed results and
the HTTP layer maps the rest onto status codes.
"""


class ReceiptError(Exception):
    """Base exception for receipt lifecycle errors."""
    code = "ReceiptError"


class DuplicateReceiptNumber(ReceiptError):
    """Raised when a receipt number (or id) is already in the store."""
    code = "DuplicateReceiptNumber"


class ImmutableFieldViolation(ReceiptError):
    """Raised when an update touches anything but the three status fields."""
    code = "ImmutableFieldViolation"


class IllegalStatusTransition(ReceiptError):
    """Raised when a channel status would leave a terminal state."""
    code = "IllegalStatusTransition"


class MalformedPayload(ReceiptError):
    """Raised when a verification payload cannot be decoded."""
    code = "MalformedPayload"


class ReceiptNotFound(ReceiptError):
    """Raised when a receipt does not exist."""
    code = "NotFound"


class InvalidReference(ReceiptError):
    """Raised when issuance names an unknown or inactive organization, category or template."""
    code = "InvalidReference"


class StatusConflict(ReceiptError):
    """Raised by a store when a compare-and-swap status write loses."""
    code = "StatusConflict"
