"""
Receipt identity — receipt numbers and verification (QR) payloads.

Receipt numbers look like ``OR-2026-000042``.  Uniqueness comes from
sequencing against the store plus the numbers this generator already handed
out, never from clock resolution.

The payload is canonical JSON carrying the receipt number and a few
descriptive fields, plus an unkeyed SHA-256 checksum.  The checksum catches
corrupted or truncated scans; it is not a signature and anyone can recompute
it for a fabricated receipt.
"""
from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from recetra.lifecycle.errors import MalformedPayload
from recetra.schemas import MAX_PAYLOAD_LENGTH, ReceiptCreate

logger = logging.getLogger(__name__)

RECEIPT_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Za-z]+)-(?P<year>\d{4})-(?P<sequence>\d+)$")
LEGACY_QR_SUFFIX = "-QR"
CHECKSUM_LENGTH = 16
DESCRIPTIVE_FIELDS = ("amount", "payer", "organization", "purpose")


@dataclass(frozen=True)
class MintedIdentity:
    receipt_number: str
    verification_payload: str
    issued_at: datetime


@dataclass(frozen=True)
class DecodedPayload:
    receipt_number: str
    fields: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Receipt numbers
# ---------------------------------------------------------------------------

def parse_receipt_number(number: str) -> Optional[tuple[str, int, int]]:
    """Return ``(prefix, year, sequence)`` or ``None`` if not well formed."""
    m = RECEIPT_NUMBER_RE.match(number.strip())
    if not m:
        return None
    return m.group("prefix"), int(m.group("year")), int(m.group("sequence"))


def format_receipt_number(prefix: str, year: int, sequence: int, width: int = 6) -> str:
    return f"{prefix}-{year:04d}-{sequence:0{width}d}"


# ---------------------------------------------------------------------------
# Payload codec
# ---------------------------------------------------------------------------

def _canonical(data: dict) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _checksum(data: dict) -> str:
    return hashlib.sha256(_canonical(data).encode("utf-8")).hexdigest()[:CHECKSUM_LENGTH]


def _format_amount(amount: Decimal | int | float) -> str:
    return str(Decimal(str(amount)).quantize(Decimal("0.01")))


def encode_payload(
    receipt_number: str,
    *,
    amount: Decimal | int | float,
    payer: str,
    organization: str,
    purpose: str,
    issued_at: datetime,
) -> str:
    data = {
        "receiptNumber": receipt_number,
        "amount": _format_amount(amount),
        "payer": payer,
        "organization": organization,
        "purpose": purpose,
        "timestamp": int(issued_at.timestamp() * 1000),
    }
    data["checksum"] = _checksum(data)
    return _canonical(data)


def _decode_json(text: str) -> DecodedPayload:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedPayload(f"Payload is not valid JSON: {exc.msg}") from exc
    except (ValueError, RecursionError) as exc:
        # oversized integer literals, runaway nesting
        raise MalformedPayload("Payload could not be decoded") from exc
    if not isinstance(data, dict):
        raise MalformedPayload("Payload JSON must be an object")

    number = data.get("receiptNumber")
    if not isinstance(number, str) or not RECEIPT_NUMBER_RE.match(number):
        raise MalformedPayload("Payload has no well-formed receiptNumber")

    if "checksum" in data:
        body = {k: v for k, v in data.items() if k != "checksum"}
        if data["checksum"] != _checksum(body):
            raise MalformedPayload("Payload checksum mismatch")

    fields = {k: data[k] for k in DESCRIPTIVE_FIELDS if k in data}
    return DecodedPayload(receipt_number=number, fields=fields)


def decode_payload(payload: str) -> DecodedPayload:
    """Recover the receipt number from a scanned payload.

    Accepts the JSON payload minted by this service, the legacy
    ``<receipt number>-QR`` form and a bare receipt number.
    """
    if not isinstance(payload, str) or not payload.strip():
        raise MalformedPayload("Empty verification payload")

    text = payload.strip()
    if len(text) > MAX_PAYLOAD_LENGTH:
        raise MalformedPayload(f"Payload longer than {MAX_PAYLOAD_LENGTH} characters")
    if text.startswith("{"):
        return _decode_json(text)

    candidate = text[: -len(LEGACY_QR_SUFFIX)] if text.endswith(LEGACY_QR_SUFFIX) else text
    if not RECEIPT_NUMBER_RE.match(candidate):
        raise MalformedPayload(f"Unrecognised verification payload: {text[:40]!r}")
    return DecodedPayload(receipt_number=candidate)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class ReceiptIdentityGenerator:
    """Mints receipt numbers and payloads against a receipt store."""

    def __init__(
        self,
        store,
        prefix: str = "OR",
        sequence_width: int = 6,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.prefix = prefix
        self.sequence_width = sequence_width
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._issued: dict[int, int] = {}
        self._lock = threading.Lock()

    def next_number(self, year: int) -> str:
        with self._lock:
            sequence = max(
                self.store.max_sequence(self.prefix, year),
                self._issued.get(year, 0),
            ) + 1
            self._issued[year] = sequence
        return format_receipt_number(self.prefix, year, sequence, self.sequence_width)

    def record_collision(self, receipt_number: str) -> None:
        """Advance past a number the store rejected as a duplicate."""
        parsed = parse_receipt_number(receipt_number)
        if parsed is None:
            return
        _, year, sequence = parsed
        with self._lock:
            self._issued[year] = max(self._issued.get(year, 0), sequence)
        logger.warning("Receipt number collision on %s", receipt_number)

    def mint(self, request: ReceiptCreate) -> MintedIdentity:
        issued_at = self._clock()
        number = self.next_number(issued_at.year)
        payload = encode_payload(
            number,
            amount=request.amount,
            payer=request.payer,
            organization=request.organization,
            purpose=request.purpose,
            issued_at=issued_at,
        )
        return MintedIdentity(receipt_number=number, verification_payload=payload, issued_at=issued_at)
