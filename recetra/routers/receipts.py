"""
Receipt lifecycle API endpoints.

POST  /api/receipts                              — issue a receipt (optionally notify)
GET   /api/receipts                              — list receipts, newest first
GET   /api/receipts/{id}                         — get one receipt
GET   /api/receipts/{id}/render                  — printable acknowledgment fields
POST  /api/receipts/{id}/dispatch                — dispatch every pending channel
POST  /api/receipts/{id}/dispatch/{channel}      — one dispatch attempt
PATCH /api/receipts/{id}/status                  — record a status directly
GET   /api/stats                                 — dashboard statistics

Handlers that await the dispatcher are ``async``; their store calls are short
local SQLite statements and run on the event loop between provider awaits.
Everything else is a plain ``def`` and runs in the threadpool.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from recetra.config import settings
from recetra.database import get_db
from recetra.lifecycle import issue_receipt
from recetra.lifecycle.dispatch import NotificationDispatcher
from recetra.lifecycle.identity import ReceiptIdentityGenerator
from recetra.lifecycle.render import compute_stats, render_receipt
from recetra.lifecycle.status import StatusTracker, status_of
from recetra.lifecycle.store import SqlReceiptStore
from recetra.routers.deps import get_dispatcher, get_generator, get_store, get_tracker
from recetra.routers.reference import check_references
from recetra.schemas import (
    Channel,
    DispatchOutcome,
    IssueResponse,
    Receipt,
    ReceiptCreate,
    ReceiptStats,
    RenderedReceipt,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_or_404(store: SqlReceiptStore, receipt_id: str) -> Receipt:
    receipt = store.find_by_id(receipt_id)
    if receipt is None:
        logger.warning("Receipt not found: %s", receipt_id)
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


# ── POST /api/receipts ───────────────────────────────────────────────────
@router.post("/receipts", response_model=IssueResponse, status_code=201)
async def create_receipt(
    req: ReceiptCreate,
    db: Session = Depends(get_db),
    store: SqlReceiptStore = Depends(get_store),
    generator: ReceiptIdentityGenerator = Depends(get_generator),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    logger.info("Issue: payer=%s  amount=%s  org=%s", req.payer, req.amount, req.organization)
    check_references(db, req)

    receipt = issue_receipt(store, generator, req, max_attempts=settings.MINT_MAX_ATTEMPTS)

    outcomes: list[DispatchOutcome] = []
    if req.notify:
        outcomes = await dispatcher.dispatch_all(receipt)
        receipt = store.find_by_id(receipt.id)
    return IssueResponse(receipt=receipt, dispatch=outcomes)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=List[Receipt])
def list_receipts(
    organization: Optional[str] = None,
    issued_by: Optional[str] = None,
    store: SqlReceiptStore = Depends(get_store),
):
    return store.list(organization=organization, issued_by=issued_by)


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=Receipt)
def get_receipt(receipt_id: str, store: SqlReceiptStore = Depends(get_store)):
    logger.info("Fetching receipt: %s", receipt_id)
    return _get_or_404(store, receipt_id)


# ── GET /api/receipts/{receipt_id}/render ────────────────────────────────
@router.get("/receipts/{receipt_id}/render", response_model=RenderedReceipt)
def get_rendered_receipt(receipt_id: str, store: SqlReceiptStore = Depends(get_store)):
    return render_receipt(_get_or_404(store, receipt_id))


# ── POST /api/receipts/{receipt_id}/dispatch ─────────────────────────────
@router.post("/receipts/{receipt_id}/dispatch", response_model=List[DispatchOutcome])
async def dispatch_pending(
    receipt_id: str,
    store: SqlReceiptStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    receipt = _get_or_404(store, receipt_id)
    pending = [c for c in Channel if status_of(receipt, c) == "pending"]
    logger.info("Dispatching %s for %s", [c.value for c in pending], receipt.receipt_number)
    return await dispatcher.dispatch_all(receipt, pending)


# ── POST /api/receipts/{receipt_id}/dispatch/{channel} ───────────────────
@router.post("/receipts/{receipt_id}/dispatch/{channel}", response_model=DispatchOutcome)
async def dispatch_channel(
    receipt_id: str,
    channel: Channel,
    store: SqlReceiptStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    receipt = _get_or_404(store, receipt_id)
    outcome = await dispatcher.dispatch(channel, receipt)
    if outcome.rejected:
        return JSONResponse(status_code=409, content=outcome.model_dump(mode="json"))
    return outcome


# ── PATCH /api/receipts/{receipt_id}/status ──────────────────────────────
@router.patch("/receipts/{receipt_id}/status", response_model=Receipt)
def patch_status(
    receipt_id: str,
    patch: Dict[str, str],
    tracker: StatusTracker = Depends(get_tracker),
):
    return tracker.apply_patch(receipt_id, patch)


# ── GET /api/stats ───────────────────────────────────────────────────────
@router.get("/stats", response_model=ReceiptStats)
def get_stats(organization: Optional[str] = None, store: SqlReceiptStore = Depends(get_store)):
    return compute_stats(store.list(organization=organization))
