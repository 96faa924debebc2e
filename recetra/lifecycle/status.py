"""
Status tracker — one independent state machine per channel.

    pending ──► completed | sent   (success)
        └─────► failed             (failure)

Only ``pending -> terminal`` is legal.  Writes are compare-and-swap on
``pending``, so when two callbacks race on one channel the first terminal
write wins and the second is rejected.
"""
from __future__ import annotations

import logging

from recetra.lifecycle.errors import IllegalStatusTransition, ReceiptNotFound, StatusConflict
from recetra.lifecycle.store import validate_patch
from recetra.schemas import Channel, Receipt

logger = logging.getLogger(__name__)

PENDING = "pending"
FAILED = "failed"

STATUS_FIELD = {
    Channel.PAYMENT: "payment_status",
    Channel.EMAIL: "email_status",
    Channel.SMS: "sms_status",
}

SUCCESS_STATE = {
    Channel.PAYMENT: "completed",
    Channel.EMAIL: "sent",
    Channel.SMS: "sent",
}

CHANNEL_BY_FIELD = {field: channel for channel, field in STATUS_FIELD.items()}


def terminal_states(channel: Channel) -> frozenset[str]:
    return frozenset({SUCCESS_STATE[Channel(channel)], FAILED})


def is_terminal(channel: Channel, status: str) -> bool:
    return str(getattr(status, "value", status)) in terminal_states(channel)


def status_of(receipt: Receipt, channel: Channel) -> str:
    return getattr(receipt, STATUS_FIELD[Channel(channel)]).value


class StatusTracker:
    def __init__(self, store):
        self.store = store

    def _check(self, receipt: Receipt, channel: Channel, status: str) -> None:
        if status not in terminal_states(channel):
            allowed = ", ".join(sorted(terminal_states(channel)))
            raise IllegalStatusTransition(
                f"{channel.value} can only move to one of: {allowed} (got {status!r})"
            )
        current = status_of(receipt, channel)
        if current != PENDING:
            raise IllegalStatusTransition(
                f"{channel.value} status of {receipt.receipt_number} is already {current}"
            )

    def update(self, receipt_id: str, channel: Channel, status: str) -> Receipt:
        channel = Channel(channel)
        status = str(getattr(status, "value", status))
        receipt = self.store.find_by_id(receipt_id)
        if receipt is None:
            raise ReceiptNotFound(f"Receipt not found: {receipt_id}")
        self._check(receipt, channel, status)

        field = STATUS_FIELD[channel]
        try:
            updated = self.store.update(receipt_id, {field: status}, expected={field: PENDING})
        except StatusConflict as exc:
            logger.warning("Lost status race on %s/%s", receipt_id, channel.value)
            raise IllegalStatusTransition(
                f"{channel.value} status of {receipt.receipt_number} was already set"
            ) from exc
        logger.info("Receipt %s: %s -> %s", receipt.receipt_number, channel.value, status)
        return updated

    def record_success(self, receipt_id: str, channel: Channel) -> Receipt:
        return self.update(receipt_id, channel, SUCCESS_STATE[Channel(channel)])

    def record_failure(self, receipt_id: str, channel: Channel) -> Receipt:
        return self.update(receipt_id, channel, FAILED)

    def apply_patch(self, receipt_id: str, patch: dict) -> Receipt:
        """Apply a status patch such as ``{"email_status": "sent"}``.

        Every transition is checked first, then all fields are written in one
        compare-and-swap: either every channel moves or none does.
        """
        cleaned = validate_patch(patch)
        receipt = self.store.find_by_id(receipt_id)
        if receipt is None:
            raise ReceiptNotFound(f"Receipt not found: {receipt_id}")
        for field, status in cleaned.items():
            self._check(receipt, CHANNEL_BY_FIELD[field], status)
        if not cleaned:
            return receipt

        try:
            updated = self.store.update(
                receipt_id, cleaned, expected={field: PENDING for field in cleaned}
            )
        except StatusConflict as exc:
            logger.warning("Lost status race on %s (%s)", receipt_id, ", ".join(cleaned))
            raise IllegalStatusTransition(
                f"Status of {receipt.receipt_number} changed concurrently; nothing was written"
            ) from exc
        for field, status in cleaned.items():
            logger.info("Receipt %s: %s -> %s", receipt.receipt_number, CHANNEL_BY_FIELD[field].value, status)
        return updated
