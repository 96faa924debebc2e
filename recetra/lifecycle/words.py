"""
Amount-in-words formatter for printed receipts.

Whole pesos only: fractional centavos are dropped, not rounded.
"""
from __future__ import annotations

from decimal import Decimal

AMOUNT_TOO_LARGE = "Amount too large"
MAX_AMOUNT = 999_999

ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _below_thousand(n: int) -> str:
    if n < 10:
        return ONES[n]
    if n < 20:
        return TEENS[n - 10]
    if n < 100:
        return TENS[n // 10] + ("-" + ONES[n % 10] if n % 10 else "")
    hundreds, rest = divmod(n, 100)
    words = ONES[hundreds] + " Hundred"
    return words + (" " + _below_thousand(rest) if rest else "")


def to_words(amount: int) -> str:
    """Spell out a whole peso amount, e.g. ``1250 -> 'One Thousand Two Hundred Fifty'``.

    Raises ``ValueError`` for negative amounts and for amounts above 999,999.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError("Amount must not be negative")
    if amount > MAX_AMOUNT:
        raise ValueError(AMOUNT_TOO_LARGE)
    if amount == 0:
        return "Zero"

    thousands, rest = divmod(amount, 1000)
    parts: list[str] = []
    if thousands:
        parts.append(_below_thousand(thousands) + " Thousand")
    if rest:
        parts.append(_below_thousand(rest))
    return " ".join(parts)


def amount_in_words(amount: Decimal | int | float) -> str:
    """Receipt line such as ``'Five Hundred Pesos'``.

    Returns ``AMOUNT_TOO_LARGE`` instead of raising, since this only feeds
    display text.
    """
    whole = int(amount)
    try:
        return to_words(whole) + " Pesos"
    except ValueError:
        return AMOUNT_TOO_LARGE
