"""
Startup data: reference tables and optional sample receipts.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from recetra.lifecycle.errors import DuplicateReceiptNumber
from recetra.lifecycle.store import SqlReceiptStore
from recetra.models.reference import CategoryModel, OrganizationModel, TemplateModel
from recetra.schemas import Receipt

logger = logging.getLogger(__name__)

ORGANIZATIONS = [
    ("1", "Computer Science Society", "CSS", "Official organization for Computer Science students"),
    ("2", "Student Council", "SC", "Student Council of NU Dasma"),
    ("3", "Engineering Society", "ES", "Engineering students organization"),
]

CATEGORIES = [
    ("1", "Membership Fee", "Annual membership fees"),
    ("2", "Event Registration", "Event registration fees"),
    ("3", "Donation", "Voluntary donations"),
    ("4", "Merchandise", "Organization merchandise sales"),
]

TEMPLATES = [
    ("1", "Standard Receipt", "Standard receipt template for general use", "Computer Science Society", "Standard"),
    ("2", "Event Receipt", "Specialized template for event registrations", "Student Council", "Event"),
    ("3", "Donation Receipt", "Template for donation receipts", "Engineering Society", "Donation"),
]

SAMPLE_RECEIPTS = [
    dict(
        id="1", receipt_number="OR-2024-001", payer="Juan Dela Cruz", amount=Decimal("500.00"),
        purpose="Annual Membership Fee", category="Membership Fee",
        organization="Computer Science Society", issued_by="John Encoder",
        issued_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc), template_id="1",
        verification_payload="OR-2024-001-QR",
        email_status="sent", sms_status="sent", payment_status="completed",
    ),
    dict(
        id="2", receipt_number="OR-2024-002", payer="Maria Santos", amount=Decimal("200.00"),
        purpose="Tech Conference Registration", category="Event Registration",
        organization="Student Council", issued_by="John Encoder",
        issued_at=datetime(2024, 1, 16, 14, 20, tzinfo=timezone.utc), template_id="2",
        verification_payload="OR-2024-002-QR",
        email_status="sent", sms_status="pending", payment_status="completed",
    ),
    dict(
        id="3", receipt_number="OR-2024-003", payer="Pedro Reyes", amount=Decimal("1000.00"),
        purpose="Charity Donation", category="Donation",
        organization="Engineering Society", issued_by="John Encoder",
        issued_at=datetime(2024, 1, 17, 9, 15, tzinfo=timezone.utc), template_id="3",
        verification_payload="OR-2024-003-QR",
        email_status="pending", sms_status="failed", payment_status="pending",
    ),
]


def seed_reference_data(db: Session) -> int:
    """Insert organizations, categories and templates that are missing."""
    created = 0
    for oid, name, code, description in ORGANIZATIONS:
        if db.get(OrganizationModel, oid) is None:
            db.add(OrganizationModel(id=oid, name=name, code=code, description=description, is_active=True))
            created += 1
    for cid, name, description in CATEGORIES:
        if db.get(CategoryModel, cid) is None:
            db.add(CategoryModel(id=cid, name=name, description=description, is_active=True))
            created += 1
    for tid, name, description, organization, template_type in TEMPLATES:
        if db.get(TemplateModel, tid) is None:
            db.add(TemplateModel(
                id=tid,
                name=name,
                description=description,
                organization=organization,
                template_type=template_type,
                is_active=True,
            ))
            created += 1
    db.commit()
    logger.info("Seeded %d reference rows", created)
    return created


def seed_sample_receipts(db: Session) -> int:
    """Historical receipts using the legacy ``<number>-QR`` payload."""
    store = SqlReceiptStore(db)
    created = 0
    for data in SAMPLE_RECEIPTS:
        try:
            store.insert(Receipt(**data))
        except DuplicateReceiptNumber:
            continue
        created += 1
    logger.info("Seeded %d sample receipts", created)
    return created
