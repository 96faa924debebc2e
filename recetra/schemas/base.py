"""
recetra-contracts — Canonical schemas for the receipt lifecycle.

Every lifecycle component produces and consumes these Pydantic v2 models.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Channels and statuses
# ---------------------------------------------------------------------------

class Channel(str, Enum):
    PAYMENT = "payment"
    EMAIL = "email"
    SMS = "sms"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


PaymentMethod = Literal["Manual", "Paymongo"]

# QR codes top out around 4k characters
MAX_PAYLOAD_LENGTH = 4096


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------

class ReceiptCreate(BaseModel):
    """Issuance request submitted by an encoder."""
    payer: str = Field(..., min_length=1, description="Name of the person who paid")
    payer_email: Optional[str] = None
    payer_phone: Optional[str] = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Pesos")
    purpose: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, description="e.g. Membership Fee")
    organization: str = Field(..., min_length=1)
    template_id: Optional[str] = None
    payment_method: PaymentMethod = "Manual"
    issued_by: str = "Manual Issuance"
    notify: bool = Field(
        default=False,
        description="Dispatch payment, email and SMS right after issuance",
    )


class Receipt(BaseModel):
    id: str
    receipt_number: str = Field(..., description="OR-<year>-<sequence>")
    payer: str
    payer_email: Optional[str] = None
    payer_phone: Optional[str] = None
    amount: Decimal
    purpose: str
    category: str
    organization: str
    issued_by: str
    issued_at: datetime
    template_id: Optional[str] = None
    payment_method: PaymentMethod = "Manual"
    verification_payload: str = Field(..., description="QR code content")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    email_status: DeliveryStatus = DeliveryStatus.PENDING
    sms_status: DeliveryStatus = DeliveryStatus.PENDING


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class DispatchResult(BaseModel):
    """The whole contract required from a payment/email/SMS provider."""
    success: bool
    reference: Optional[str] = None
    error: Optional[str] = None


class DispatchOutcome(BaseModel):
    channel: Channel
    status: str = Field(..., description="Channel status after the attempt")
    result: Optional[DispatchResult] = None
    rejected: Optional[str] = Field(
        default=None,
        description="Error code when the attempt was not recorded, e.g. IllegalStatusTransition",
    )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

class VerificationRequest(BaseModel):
    receipt_number: Optional[str] = Field(default=None, max_length=64)
    scanned_payload: Optional[str] = Field(default=None, max_length=MAX_PAYLOAD_LENGTH)


class VerificationResult(BaseModel):
    outcome: Literal["verified", "not_found", "malformed"]
    receipt_number: Optional[str] = None
    receipt: Optional[Receipt] = None
    error: Optional[str] = None
    mismatched_fields: list[str] = Field(
        default_factory=list,
        description="Scanned payload fields that disagree with the stored receipt",
    )
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def verified(self) -> bool:
        return self.outcome == "verified"


# ---------------------------------------------------------------------------
# API request / response envelopes
# ---------------------------------------------------------------------------

class IssueResponse(BaseModel):
    receipt: Receipt
    dispatch: list[DispatchOutcome] = Field(default_factory=list)


class RenderedReceipt(BaseModel):
    """Printable acknowledgment-receipt fields."""
    title: str = "ACKNOWLEDGMENT RECEIPT"
    receipt_number: str
    date: str
    received_from: str
    amount: str
    amount_in_words: str
    purpose: str
    organization: str
    issued_by: str
    verification_payload: str


class ChannelCounts(BaseModel):
    pending: int = 0
    success: int = 0
    failed: int = 0


class ReceiptStats(BaseModel):
    total_receipts: int = 0
    total_amount: Decimal = Decimal("0")
    receipts_this_month: int = 0
    amount_this_month: Decimal = Decimal("0")
    payment: ChannelCounts = Field(default_factory=ChannelCounts)
    email: ChannelCounts = Field(default_factory=ChannelCounts)
    sms: ChannelCounts = Field(default_factory=ChannelCounts)
