"""
Receipt store — insert, two lookup paths and status-only updates.

``InMemoryReceiptStore`` keeps an insertion-ordered list under a lock.
``SqlReceiptStore`` relies on the UNIQUE constraint for receipt numbers and
on conditional UPDATEs for status compare-and-swap.
"""
from __future__ import annotations

import logging
import threading
from datetime import timezone
from typing import Optional, Protocol

from sqlalchemy import update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recetra.lifecycle.errors import (
    DuplicateReceiptNumber,
    IllegalStatusTransition,
    ImmutableFieldViolation,
    ReceiptNotFound,
    StatusConflict,
)
from recetra.lifecycle.identity import parse_receipt_number
from recetra.models.receipt import ReceiptModel
from recetra.schemas import DeliveryStatus, PaymentStatus, Receipt

logger = logging.getLogger(__name__)

STATUS_FIELDS: dict[str, type] = {
    "payment_status": PaymentStatus,
    "email_status": DeliveryStatus,
    "sms_status": DeliveryStatus,
}


def _value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def validate_patch(patch: dict) -> dict[str, str]:
    """Reject non-status keys and unknown status values; normalise to plain strings."""
    illegal = sorted(set(patch) - set(STATUS_FIELDS))
    if illegal:
        raise ImmutableFieldViolation(f"Fields are immutable: {', '.join(illegal)}")
    cleaned: dict[str, str] = {}
    for name, status in patch.items():
        try:
            cleaned[name] = STATUS_FIELDS[name](_value(status)).value
        except ValueError:
            raise IllegalStatusTransition(f"Invalid value for {name}: {status!r}") from None
    return cleaned


class ReceiptStore(Protocol):
    def insert(self, receipt: Receipt) -> Receipt: ...

    def find_by_number(self, receipt_number: str) -> Optional[Receipt]: ...

    def find_by_id(self, receipt_id: str) -> Optional[Receipt]: ...

    def update(self, receipt_id: str, patch: dict, expected: Optional[dict] = None) -> Receipt: ...

    def list(self, organization: Optional[str] = None, issued_by: Optional[str] = None) -> list[Receipt]: ...

    def max_sequence(self, prefix: str, year: int) -> int: ...


def _max_sequence(numbers, prefix: str, year: int) -> int:
    best = 0
    for number in numbers:
        parsed = parse_receipt_number(number)
        if parsed and parsed[0] == prefix and parsed[1] == year:
            best = max(best, parsed[2])
    return best


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryReceiptStore:
    def __init__(self, receipts: Optional[list[Receipt]] = None):
        # dicts keep insertion order, which doubles as issuance order
        self._by_id: dict[str, Receipt] = {}
        self._id_by_number: dict[str, str] = {}
        self._lock = threading.Lock()
        for receipt in receipts or []:
            self.insert(receipt)

    def insert(self, receipt: Receipt) -> Receipt:
        with self._lock:
            if receipt.receipt_number in self._id_by_number:
                raise DuplicateReceiptNumber(f"Receipt number already issued: {receipt.receipt_number}")
            if receipt.id in self._by_id:
                raise DuplicateReceiptNumber(f"Receipt id already used: {receipt.id}")
            stored = receipt.model_copy(deep=True)
            self._by_id[stored.id] = stored
            self._id_by_number[stored.receipt_number] = stored.id
        return stored.model_copy(deep=True)

    def find_by_number(self, receipt_number: str) -> Optional[Receipt]:
        with self._lock:
            receipt_id = self._id_by_number.get(receipt_number.strip())
            if receipt_id is None:
                return None
            return self._by_id[receipt_id].model_copy(deep=True)

    def find_by_id(self, receipt_id: str) -> Optional[Receipt]:
        with self._lock:
            found = self._by_id.get(receipt_id.strip())
            return found.model_copy(deep=True) if found else None

    def update(self, receipt_id: str, patch: dict, expected: Optional[dict] = None) -> Receipt:
        cleaned = validate_patch(patch)
        guard = validate_patch(expected or {})
        receipt_id = receipt_id.strip()
        with self._lock:
            current = self._by_id.get(receipt_id)
            if current is None:
                raise ReceiptNotFound(f"Receipt not found: {receipt_id}")
            for name, value in guard.items():
                if _value(getattr(current, name)) != value:
                    raise StatusConflict(f"{name} is no longer {value}")
            updated = current.model_copy(update={n: STATUS_FIELDS[n](v) for n, v in cleaned.items()})
            self._by_id[receipt_id] = updated
        return updated.model_copy(deep=True)

    def list(self, organization: Optional[str] = None, issued_by: Optional[str] = None) -> list[Receipt]:
        with self._lock:
            rows = [
                r for r in reversed(list(self._by_id.values()))
                if (organization is None or r.organization == organization)
                and (issued_by is None or r.issued_by == issued_by)
            ]
            return [r.model_copy(deep=True) for r in rows]

    def max_sequence(self, prefix: str, year: int) -> int:
        with self._lock:
            return _max_sequence(self._id_by_number, prefix, year)


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------

def model_to_receipt(row: ReceiptModel) -> Receipt:
    receipt = Receipt.model_validate(row, from_attributes=True)
    if receipt.issued_at.tzinfo is None:
        # SQLite drops tzinfo; everything is written in UTC
        receipt = receipt.model_copy(update={"issued_at": receipt.issued_at.replace(tzinfo=timezone.utc)})
    return receipt


class SqlReceiptStore:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, receipt: Receipt) -> Receipt:
        data = receipt.model_dump()
        for name in STATUS_FIELDS:
            data[name] = _value(data[name])
        row = ReceiptModel(**data)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateReceiptNumber(f"Receipt number already issued: {receipt.receipt_number}") from exc
        self.db.refresh(row)
        return model_to_receipt(row)

    def find_by_number(self, receipt_number: str) -> Optional[Receipt]:
        row = (
            self.db.query(ReceiptModel)
            .filter(ReceiptModel.receipt_number == receipt_number.strip())
            .first()
        )
        return model_to_receipt(row) if row else None

    def find_by_id(self, receipt_id: str) -> Optional[Receipt]:
        row = self.db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id.strip()).first()
        return model_to_receipt(row) if row else None

    def update(self, receipt_id: str, patch: dict, expected: Optional[dict] = None) -> Receipt:
        cleaned = validate_patch(patch)
        guard = validate_patch(expected or {})
        receipt_id = receipt_id.strip()
        if not cleaned:
            found = self.find_by_id(receipt_id)
            if found is None:
                raise ReceiptNotFound(f"Receipt not found: {receipt_id}")
            return found

        stmt = sql_update(ReceiptModel).where(ReceiptModel.id == receipt_id)
        for name, value in guard.items():
            stmt = stmt.where(getattr(ReceiptModel, name) == value)
        result = self.db.execute(stmt.values(**cleaned))
        self.db.commit()

        if result.rowcount == 0:
            if self.find_by_id(receipt_id) is None:
                raise ReceiptNotFound(f"Receipt not found: {receipt_id}")
            raise StatusConflict(f"Status changed concurrently on {receipt_id}")

        self.db.expire_all()
        return self.find_by_id(receipt_id)

    def list(self, organization: Optional[str] = None, issued_by: Optional[str] = None) -> list[Receipt]:
        query = self.db.query(ReceiptModel)
        if organization:
            query = query.filter(ReceiptModel.organization == organization)
        if issued_by:
            query = query.filter(ReceiptModel.issued_by == issued_by)
        rows = query.order_by(ReceiptModel.issued_at.desc()).all()
        logger.info("Found %d receipts in database", len(rows))
        return [model_to_receipt(r) for r in rows]

    def max_sequence(self, prefix: str, year: int) -> int:
        rows = (
            self.db.query(ReceiptModel.receipt_number)
            .filter(ReceiptModel.receipt_number.like(f"{prefix}-{year:04d}-%"))
            .all()
        )
        return _max_sequence((r[0] for r in rows), prefix, year)
