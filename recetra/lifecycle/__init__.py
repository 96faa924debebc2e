"""
Receipt lifecycle core.

Orchestrates: mint identity → insert with all statuses pending → (dispatch
per channel → status tracker) → verification.
"""
import logging
import uuid
from decimal import Decimal

from recetra.lifecycle.errors import DuplicateReceiptNumber
from recetra.lifecycle.identity import ReceiptIdentityGenerator
from recetra.schemas import Receipt, ReceiptCreate

logger = logging.getLogger(__name__)


def issue_receipt(
    store,
    generator: ReceiptIdentityGenerator,
    request: ReceiptCreate,
    max_attempts: int = 5,
) -> Receipt:
    """Mint and store a new receipt.

    A number the store rejects as a duplicate is reported back to the
    generator and a fresh one is minted, up to ``max_attempts`` times.
    """
    for attempt in range(1, max_attempts + 1):
        identity = generator.mint(request)
        receipt = Receipt(
            id=str(uuid.uuid4()),
            receipt_number=identity.receipt_number,
            payer=request.payer,
            payer_email=request.payer_email,
            payer_phone=request.payer_phone,
            amount=request.amount.quantize(Decimal("0.01")),
            purpose=request.purpose,
            category=request.category,
            organization=request.organization,
            issued_by=request.issued_by,
            issued_at=identity.issued_at,
            template_id=request.template_id,
            payment_method=request.payment_method,
            verification_payload=identity.verification_payload,
        )
        try:
            stored = store.insert(receipt)
        except DuplicateReceiptNumber:
            generator.record_collision(identity.receipt_number)
            if attempt == max_attempts:
                raise
            continue
        logger.info("Issued receipt %s (attempt %d)", stored.receipt_number, attempt)
        return stored
    raise ValueError("max_attempts must be at least 1")
