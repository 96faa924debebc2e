from recetra.schemas.base import (
    Channel,
    ChannelCounts,
    DeliveryStatus,
    DispatchOutcome,
    DispatchResult,
    IssueResponse,
    MAX_PAYLOAD_LENGTH,
    PaymentMethod,
    PaymentStatus,
    Receipt,
    ReceiptCreate,
    ReceiptStats,
    RenderedReceipt,
    VerificationRequest,
    VerificationResult,
)
from recetra.schemas.reference import (
    CategoryResponse,
    OrganizationResponse,
    TemplateResponse,
)

__all__ = [
    "Channel",
    "ChannelCounts",
    "DeliveryStatus",
    "DispatchOutcome",
    "DispatchResult",
    "IssueResponse",
    "MAX_PAYLOAD_LENGTH",
    "PaymentMethod",
    "PaymentStatus",
    "Receipt",
    "ReceiptCreate",
    "ReceiptStats",
    "RenderedReceipt",
    "VerificationRequest",
    "VerificationResult",
    "CategoryResponse",
    "OrganizationResponse",
    "TemplateResponse",
]
