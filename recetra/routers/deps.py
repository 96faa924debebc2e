"""
Shared FastAPI dependencies for the lifecycle components.
"""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from recetra.config import settings
from recetra.database import get_db
from recetra.lifecycle.dispatch import Gateway, NotificationDispatcher, build_gateways
from recetra.lifecycle.identity import ReceiptIdentityGenerator
from recetra.lifecycle.status import StatusTracker
from recetra.lifecycle.store import SqlReceiptStore
from recetra.lifecycle.verification import VerificationEngine
from recetra.schemas import Channel


def get_store(db: Session = Depends(get_db)) -> SqlReceiptStore:
    return SqlReceiptStore(db)


@lru_cache
def get_gateways() -> dict[Channel, Gateway]:
    """Process-wide mock providers; override in tests for deterministic outcomes."""
    return build_gateways(settings)


def get_generator(store: SqlReceiptStore = Depends(get_store)) -> ReceiptIdentityGenerator:
    return ReceiptIdentityGenerator(
        store,
        prefix=settings.RECEIPT_PREFIX,
        sequence_width=settings.RECEIPT_SEQUENCE_WIDTH,
    )


def get_tracker(store: SqlReceiptStore = Depends(get_store)) -> StatusTracker:
    return StatusTracker(store)


def get_dispatcher(
    tracker: StatusTracker = Depends(get_tracker),
    gateways: dict = Depends(get_gateways),
) -> NotificationDispatcher:
    return NotificationDispatcher(tracker, gateways, timeout=settings.DISPATCH_TIMEOUT_SECONDS)


def get_verifier(store: SqlReceiptStore = Depends(get_store)) -> VerificationEngine:
    return VerificationEngine(store)
