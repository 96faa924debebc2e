"""
Notification dispatch adapter.

Payment, email and SMS providers are reduced to one contract: an awaitable
``send(receipt)`` returning ``DispatchResult(success, reference, error)``.
The dispatcher feeds each result into the status tracker.  Provider errors,
exceptions and timeouts all end as a ``failed`` channel; nothing is retried
here and nothing raises past ``dispatch``.
"""
from __future__ import annotations

import asyncio
import logging
import random
import string
import time
from typing import Iterable, Mapping, Optional, Protocol

from recetra.lifecycle.errors import IllegalStatusTransition, ReceiptNotFound
from recetra.lifecycle.status import StatusTracker, is_terminal, status_of
from recetra.schemas import Channel, DispatchOutcome, DispatchResult, Receipt

logger = logging.getLogger(__name__)

_REF_ALPHABET = string.ascii_lowercase + string.digits


class Gateway(Protocol):
    async def send(self, receipt: Receipt) -> DispatchResult: ...


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------

class MockGateway:
    """Simulated provider with a fixed delay and a random success draw."""
    reference_prefix = "REF"
    failure_message = "Dispatch failed."

    def __init__(self, success_rate: float = 1.0, delay: float = 0.0, rng: Optional[random.Random] = None):
        self.success_rate = success_rate
        self.delay = delay
        self.rng = rng or random.Random()

    def _reference(self) -> str:
        suffix = "".join(self.rng.choices(_REF_ALPHABET, k=9))
        return f"{self.reference_prefix}-{int(time.time() * 1000)}-{suffix}"

    def precheck(self, receipt: Receipt) -> Optional[str]:
        return None

    async def send(self, receipt: Receipt) -> DispatchResult:
        problem = self.precheck(receipt)
        if problem:
            return DispatchResult(success=False, error=problem)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.rng.random() < self.success_rate:
            return DispatchResult(success=True, reference=self._reference())
        return DispatchResult(success=False, error=self.failure_message)


class MockPaymentGateway(MockGateway):
    reference_prefix = "TXN"
    failure_message = "Payment processing failed. Please try again."


class MockEmailGateway(MockGateway):
    reference_prefix = "MSG"
    failure_message = "Failed to send email. Please check email configuration."

    def precheck(self, receipt: Receipt) -> Optional[str]:
        if not receipt.payer_email:
            return "No email address on receipt"
        return None


class MockSmsGateway(MockGateway):
    reference_prefix = "SMS"
    failure_message = "Failed to send SMS. Please check phone number."

    def precheck(self, receipt: Receipt) -> Optional[str]:
        if not receipt.payer_phone:
            return "No phone number on receipt"
        return None


class ManualPaymentGateway(MockGateway):
    """Cash handed to the encoder; always captured."""
    reference_prefix = "MANUAL"


class PaymentMethodGateway:
    """Routes the payment channel by the receipt's payment method."""

    def __init__(self, gateways: Mapping[str, Gateway]):
        self.gateways = dict(gateways)

    async def send(self, receipt: Receipt) -> DispatchResult:
        gateway = self.gateways.get(receipt.payment_method)
        if gateway is None:
            return DispatchResult(success=False, error=f"Unsupported payment method: {receipt.payment_method}")
        return await gateway.send(receipt)


def build_gateways(settings, rng: Optional[random.Random] = None) -> dict[Channel, Gateway]:
    """Mock providers configured from application settings."""
    if rng is None:
        rng = random.Random(settings.MOCK_RANDOM_SEED)
    delay = settings.MOCK_DISPATCH_DELAY_SECONDS
    return {
        Channel.PAYMENT: PaymentMethodGateway({
            "Manual": ManualPaymentGateway(rng=rng),
            "Paymongo": MockPaymentGateway(settings.MOCK_PAYMENT_SUCCESS_RATE, delay, rng),
        }),
        Channel.EMAIL: MockEmailGateway(settings.MOCK_EMAIL_SUCCESS_RATE, delay, rng),
        Channel.SMS: MockSmsGateway(settings.MOCK_SMS_SUCCESS_RATE, delay, rng),
    }


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class NotificationDispatcher:
    def __init__(self, tracker: StatusTracker, gateways: Mapping[Channel, Gateway], timeout: float = 10.0):
        self.tracker = tracker
        self.gateways = dict(gateways)
        self.timeout = timeout

    async def _send(self, channel: Channel, receipt: Receipt) -> DispatchResult:
        gateway = self.gateways.get(channel)
        if gateway is None:
            return DispatchResult(success=False, error=f"No gateway configured for {channel.value}")
        try:
            return await asyncio.wait_for(gateway.send(receipt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Dispatch %s for %s timed out", channel.value, receipt.receipt_number)
            return DispatchResult(success=False, error=f"Timed out after {self.timeout:g}s")
        except Exception as exc:
            logger.exception("Dispatch %s for %s raised", channel.value, receipt.receipt_number)
            return DispatchResult(success=False, error=str(exc) or exc.__class__.__name__)

    async def dispatch(self, channel: Channel, receipt: Receipt) -> DispatchOutcome:
        """One dispatch attempt; its outcome is written once into the channel."""
        channel = Channel(channel)
        current = self.tracker.store.find_by_id(receipt.id)
        if current is None:
            return DispatchOutcome(channel=channel, status="unknown", rejected=ReceiptNotFound.code)

        status = status_of(current, channel)
        if is_terminal(channel, status):
            logger.warning(
                "Dispatch %s for %s rejected, already %s",
                channel.value, current.receipt_number, status,
            )
            return DispatchOutcome(channel=channel, status=status, rejected=IllegalStatusTransition.code)

        result = await self._send(channel, current)
        if result.success:
            logger.info("Dispatch %s for %s ok: %s", channel.value, current.receipt_number, result.reference)
        else:
            logger.warning("Dispatch %s for %s failed: %s", channel.value, current.receipt_number, result.error)

        try:
            if result.success:
                updated = self.tracker.record_success(current.id, channel)
            else:
                updated = self.tracker.record_failure(current.id, channel)
        except IllegalStatusTransition:
            latest = self.tracker.store.find_by_id(current.id)
            return DispatchOutcome(
                channel=channel,
                status=status_of(latest, channel),
                result=result,
                rejected=IllegalStatusTransition.code,
            )
        return DispatchOutcome(channel=channel, status=status_of(updated, channel), result=result)

    async def dispatch_all(
        self, receipt: Receipt, channels: Optional[Iterable[Channel]] = None
    ) -> list[DispatchOutcome]:
        """Dispatch several channels concurrently; no ordering between them."""
        targets = [Channel(c) for c in (channels if channels is not None else Channel)]
        return list(await asyncio.gather(*(self.dispatch(c, receipt) for c in targets)))
