"""
Acknowledgment-receipt rendering and dashboard statistics.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from recetra.lifecycle.status import SUCCESS_STATE, STATUS_FIELD
from recetra.lifecycle.words import amount_in_words
from recetra.schemas import Channel, ChannelCounts, Receipt, ReceiptStats, RenderedReceipt

CAMPUS = "NU Dasma"


def format_peso(amount: Decimal) -> str:
    return f"₱{Decimal(amount):,.2f}"


def format_date(value: datetime) -> str:
    """``M/D/YY`` as printed on the paper receipt."""
    return f"{value.month}/{value.day}/{value.strftime('%y')}"


def organization_full_name(name: str) -> str:
    return f"{name} - {CAMPUS}"


def render_receipt(receipt: Receipt) -> RenderedReceipt:
    return RenderedReceipt(
        receipt_number=receipt.receipt_number,
        date=format_date(receipt.issued_at),
        received_from=receipt.payer,
        amount=format_peso(receipt.amount),
        amount_in_words=amount_in_words(receipt.amount),
        purpose=receipt.purpose,
        organization=organization_full_name(receipt.organization),
        issued_by=receipt.issued_by,
        verification_payload=receipt.verification_payload,
    )


def compute_stats(receipts: Iterable[Receipt], now: Optional[datetime] = None) -> ReceiptStats:
    now = now or datetime.now(timezone.utc)
    stats = ReceiptStats()
    counts = {channel: ChannelCounts() for channel in Channel}

    for receipt in receipts:
        stats.total_receipts += 1
        stats.total_amount += receipt.amount
        if (receipt.issued_at.year, receipt.issued_at.month) == (now.year, now.month):
            stats.receipts_this_month += 1
            stats.amount_this_month += receipt.amount

        for channel, field in STATUS_FIELD.items():
            status = getattr(receipt, field).value
            bucket = counts[channel]
            if status == SUCCESS_STATE[channel]:
                bucket.success += 1
            elif status == "failed":
                bucket.failed += 1
            else:
                bucket.pending += 1

    stats.payment = counts[Channel.PAYMENT]
    stats.email = counts[Channel.EMAIL]
    stats.sms = counts[Channel.SMS]
    return stats
