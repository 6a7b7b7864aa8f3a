"""
Monetary codec for CNAB amounts.

Amounts are written as zero-padded digit runs in cents. The sign travels
separately, either as a one-letter movement indicator (C/D) on detail
records or as a two-letter balance marker (CF, DP, ...) after a balance.
"""
import re
from decimal import Decimal
from typing import Optional, Tuple

CREDIT_MARKERS = frozenset({"C", "CF", "CP", "CI"})
DEBIT_MARKERS = frozenset({"D", "DF", "DP", "DI"})

_NON_DIGITS = re.compile(r"\D")
_CENTS = Decimal("100")


def is_debit_marker(marker: Optional[str]) -> bool:
    return bool(marker) and marker.upper() in DEBIT_MARKERS


def decode_amount(digits: str, marker: Optional[str] = None) -> Decimal:
    """
    Convert a cents digit run into a signed amount in major units.

    Non-digit characters are ignored; an empty run is zero. Only a debit
    marker makes the result negative.

    Example: decode_amount("0001050", "D") -> Decimal("-10.50")
    """
    cleaned = _NON_DIGITS.sub("", digits or "")
    if not cleaned:
        return Decimal("0.00")
    value = Decimal(int(cleaned)) / _CENTS
    if is_debit_marker(marker):
        return -value
    return value


def encode_amount(
    amount: Decimal,
    credit_marker: str = "C",
    debit_marker: str = "D",
) -> Tuple[str, str]:
    """
    Inverse of decode_amount: returns (digits, marker).

    Digits carry no leading zeros; zero encodes as "0" with the credit marker.
    """
    if credit_marker not in CREDIT_MARKERS:
        raise ValueError(f"Not a credit marker: {credit_marker!r}")
    if debit_marker not in DEBIT_MARKERS:
        raise ValueError(f"Not a debit marker: {debit_marker!r}")
    cents = (abs(amount) * _CENTS).to_integral_value()
    if cents != abs(amount) * _CENTS:
        raise ValueError(f"Amount has sub-cent precision: {amount}")
    marker = debit_marker if amount < 0 else credit_marker
    return str(int(cents)), marker
