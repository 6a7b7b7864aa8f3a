"""
Closing balance extraction.

The balance is a digit run immediately followed by a two-letter marker
(CF, DP, ...). Markers are tried in the layout's priority order; when none
matches, the layout's fixed last-resort windows are read unsigned.
"""
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional, Sequence

from .models import BalanceMarker, BankLayout, DecodeContext, DiagnosticCategory, FieldSpan, TrailerLine
from .money import decode_amount

logger = logging.getLogger(__name__)

# Widest amount field of any layout. Digits further left belong to the
# neighbouring field (the balance date in CNAB240 trailers).
AMOUNT_FIELD_WIDTH = 18


@dataclass(frozen=True)
class BalanceMatch:
    """Decoded balance with the marker or window it came from."""
    amount: Decimal
    marker: Optional[str] = None
    window: Optional[FieldSpan] = None

    @property
    def low_confidence(self) -> bool:
        return self.marker is None


@dataclass(frozen=True)
class RejectedRun:
    """Digits before a marker that hold more significant digits than the marker allows."""
    marker: BalanceMarker
    digits: str


@lru_cache(maxsize=None)
def _marker_pattern(token: str) -> re.Pattern:
    return re.compile(r"(\d+)%s" % re.escape(token))


def match_balance_marker(
    line: str,
    markers: Sequence[BalanceMarker],
    rejected: Optional[List[RejectedRun]] = None,
) -> Optional[BalanceMatch]:
    """
    First marker (in priority order) preceded by an acceptable digit run.

    The whole run before the marker is taken, capped at AMOUNT_FIELD_WIDTH.
    Runs shorter than the marker's min_digits are not balances. Runs whose
    significant digits exceed max_digits are skipped and, when `rejected`
    is given, appended to it so the caller can report them.
    """
    for marker in markers:
        for found in _marker_pattern(marker.token).finditer(line):
            digits = found.group(1)[-AMOUNT_FIELD_WIDTH:]
            if len(digits) < marker.min_digits:
                continue
            if len(digits.lstrip("0")) > marker.max_digits:
                if rejected is not None:
                    rejected.append(RejectedRun(marker, digits))
                continue
            return BalanceMatch(decode_amount(digits, marker.token), marker=marker.token)
    return None


def note_rejected_runs(
    ctx: DecodeContext,
    category: DiagnosticCategory,
    rejected: Sequence[RejectedRun],
    line_number: int,
) -> None:
    for run in rejected:
        ctx.note(
            category,
            f"Digits before marker {run.marker.token} have {len(run.digits.lstrip('0'))} significant "
            f"digits, more than the {run.marker.max_digits} allowed; ignored",
            line_number,
        )


def match_fallback_window(line: str, windows: Sequence[FieldSpan]) -> Optional[BalanceMatch]:
    """First window holding a positive integer. Never signed."""
    for window in windows:
        content = window.slice(line).strip()
        if content.isdigit() and int(content) > 0:
            return BalanceMatch(decode_amount(content), window=window)
    return None


def trailer_index(layout: BankLayout, line_count: int) -> Optional[int]:
    """0-based index of the trailer line, or None when the file is too short."""
    if layout.trailer_line == TrailerLine.LAST:
        return line_count - 1
    if layout.trailer_line == TrailerLine.SECOND_TO_LAST:
        return line_count - 2 if line_count >= 2 else None
    return 1 if line_count >= 2 else None


def decode_closing_balance(ctx: DecodeContext) -> Optional[BalanceMatch]:
    """
    Locate and decode the closing balance.

    Returns None (and records a diagnostic) when neither a marker nor a
    fallback window produced a value.
    """
    layout = ctx.layout
    index = trailer_index(layout, len(ctx.lines))
    if index is None:
        ctx.note(
            DiagnosticCategory.CLOSING_BALANCE,
            f"File has {len(ctx.lines)} line(s); no {layout.trailer_line.value} trailer line",
        )
        return None

    line = ctx.lines[index]
    line_number = index + 1

    rejected: List[RejectedRun] = []
    match = match_balance_marker(line, layout.balance_markers, rejected)
    note_rejected_runs(ctx, DiagnosticCategory.CLOSING_BALANCE, rejected, line_number)
    if match:
        logger.debug("Closing balance %s via marker %s on line %d", match.amount, match.marker, line_number)
        return match

    match = match_fallback_window(line, layout.fallback_windows)
    if match:
        logger.info(
            "Closing balance %s read from fixed window %d-%d on line %d (no marker matched)",
            match.amount, match.window.start, match.window.end, line_number,
        )
        ctx.note(
            DiagnosticCategory.CLOSING_BALANCE,
            f"No balance marker found; low-confidence value read from positions "
            f"{match.window.start}-{match.window.end} without sign detection",
            line_number,
        )
        return match

    tokens = ", ".join(m.token for m in layout.balance_markers)
    ctx.note(
        DiagnosticCategory.CLOSING_BALANCE,
        f"Closing balance not found (markers tried: {tokens})",
        line_number,
    )
    return None


def decode_credit_limit(ctx: DecodeContext) -> Optional[Decimal]:
    """Credit limit from the layout's trailer window, when it holds only digits."""
    layout = ctx.layout
    if layout.credit_limit is None:
        return None
    index = trailer_index(layout, len(ctx.lines))
    if index is None:
        return None
    line = ctx.lines[index]
    if not layout.credit_limit.fits(line):
        return None
    content = layout.credit_limit.slice(line)
    if not content.isdigit():
        return None
    return decode_amount(content)
