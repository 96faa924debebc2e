"""
Verification engine — typed or scanned code → verified / not found.

Verification is a pure read: nothing here writes to the store.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from recetra.lifecycle.errors import MalformedPayload
from recetra.lifecycle.identity import decode_payload
from recetra.schemas import Receipt, VerificationResult

logger = logging.getLogger(__name__)


def _mismatches(receipt: Receipt, fields: dict) -> list[str]:
    """Names of scanned payload fields that disagree with the stored record."""
    mismatched: list[str] = []
    for name, scanned in sorted(fields.items()):
        stored = getattr(receipt, name)
        if name == "amount":
            try:
                same = Decimal(str(scanned)) == Decimal(str(stored))
            except InvalidOperation:
                same = False
        else:
            same = str(scanned) == str(stored)
        if not same:
            mismatched.append(name)
    return mismatched


class VerificationEngine:
    def __init__(self, store):
        self.store = store

    def verify(
        self,
        receipt_number: Optional[str] = None,
        scanned_payload: Optional[str] = None,
    ) -> VerificationResult:
        """Verify a receipt from exactly one of a typed number or a scanned payload."""
        if (receipt_number is None) == (scanned_payload is None):
            raise ValueError("Provide exactly one of receipt_number or scanned_payload")

        scanned_fields: dict = {}
        if scanned_payload is not None:
            try:
                decoded = decode_payload(scanned_payload)
            except MalformedPayload as exc:
                logger.warning("Malformed verification payload: %s", exc)
                return VerificationResult(outcome="malformed", error=str(exc))
            candidate = decoded.receipt_number
            scanned_fields = decoded.fields
        else:
            candidate = receipt_number.strip()

        receipt = self.store.find_by_number(candidate)
        if receipt is None:
            logger.warning("Verification failed, receipt not found: %s", candidate)
            return VerificationResult(outcome="not_found", receipt_number=candidate)

        mismatched = _mismatches(receipt, scanned_fields)
        if mismatched:
            logger.warning(
                "Receipt %s verified but payload disagrees on: %s",
                candidate, ", ".join(mismatched),
            )
        else:
            logger.info("Receipt verified: %s", candidate)
        return VerificationResult(
            outcome="verified",
            receipt_number=receipt.receipt_number,
            receipt=receipt,
            mismatched_fields=mismatched,
        )
