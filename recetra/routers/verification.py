"""
Receipt verification endpoints.

POST /api/verify                    — typed receipt number or scanned QR payload
GET  /api/verify/{receipt_number}   — typed receipt number

Always 200; the outcome (verified | not_found | malformed) is in the body.
"""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from recetra.config import settings
from recetra.lifecycle.verification import VerificationEngine
from recetra.routers.deps import get_verifier
from recetra.schemas import VerificationRequest, VerificationResult

logger = logging.getLogger(__name__)
router = APIRouter()


def normalize_manual_entry(receipt_number: str) -> str:
    """Typed numbers are case-insensitive: ``or-2024-001`` → ``OR-2024-001``."""
    return receipt_number.strip().upper()


async def _simulated_round_trip() -> None:
    if settings.VERIFY_DELAY_SECONDS > 0:
        await asyncio.sleep(settings.VERIFY_DELAY_SECONDS)


# ── POST /api/verify ─────────────────────────────────────────────────────
@router.post("/verify", response_model=VerificationResult)
async def verify(req: VerificationRequest, verifier: VerificationEngine = Depends(get_verifier)):
    has_number = bool(req.receipt_number and req.receipt_number.strip())
    has_payload = req.scanned_payload is not None
    if has_number == has_payload:
        raise HTTPException(status_code=400, detail="Provide receipt_number or scanned_payload")

    await _simulated_round_trip()
    if has_number:
        logger.info("Verify (manual): %s", req.receipt_number)
        return verifier.verify(receipt_number=normalize_manual_entry(req.receipt_number))
    logger.info("Verify (scanned): len=%d", len(req.scanned_payload))
    return verifier.verify(scanned_payload=req.scanned_payload)


# ── GET /api/verify/{receipt_number} ─────────────────────────────────────
@router.get("/verify/{receipt_number}", response_model=VerificationResult)
async def verify_number(receipt_number: str, verifier: VerificationEngine = Depends(get_verifier)):
    await _simulated_round_trip()
    return verifier.verify(receipt_number=normalize_manual_entry(receipt_number))
