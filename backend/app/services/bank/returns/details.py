"""
Detail record classification.

Every interior line that satisfies the layout's detail selector becomes a
DetailEntry, except zero-amount lines (skipped silently) and lines too
short to hold the detail fields (skipped with a diagnostic).
"""
import logging
from typing import List, Optional, Tuple

from .models import DecodeContext, DetailEntry, DetailLayout, DiagnosticCategory, EntryClassification
from .money import decode_amount, is_debit_marker
from .temporal import parse_date
from .trailer import trailer_index

logger = logging.getLogger(__name__)

FEE_KEYWORDS: Tuple[str, ...] = (
    "TARIFA",
    "TAR ",
    "TAXA",
    "CESTA",
    "IOF",
    "ENCARGO",
    "MANUTENCAO",
)


def is_fee(description: str) -> bool:
    upper = description.upper()
    return any(keyword in upper for keyword in FEE_KEYWORDS)


def classify(description: str, indicator: str) -> EntryClassification:
    """Fee keywords win over the movement indicator."""
    if is_fee(description):
        return EntryClassification.FEE
    if is_debit_marker(indicator):
        return EntryClassification.DEBIT
    return EntryClassification.CREDIT


def decode_detail_line(detail: DetailLayout, line: str, line_number: int) -> Optional[DetailEntry]:
    """Decode one qualifying line. Returns None for zero-amount records."""
    digits = detail.amount.slice(line)
    if not digits.strip("0 "):
        return None

    indicator = line[detail.indicator_at].strip()
    amount = decode_amount(digits, indicator)
    description = detail.description.slice(line).strip()

    occurrence_date = None
    if detail.occurrence_date is not None:
        field = detail.occurrence_date
        occurrence_date = parse_date(field.span.slice(line), field.pattern)

    return DetailEntry(
        line_number=line_number,
        amount=amount,
        classification=classify(description, indicator),
        description=description,
        occurrence_code=detail.occurrence_code.slice(line).strip(),
        occurrence_date=occurrence_date,
    )


def classify_details(ctx: DecodeContext) -> List[DetailEntry]:
    """Walk the lines between the header and the trailer."""
    detail = ctx.layout.detail
    skip = {0}
    index = trailer_index(ctx.layout, len(ctx.lines))
    if index is not None:
        skip.add(index)

    entries = []
    for position, line in enumerate(ctx.lines):
        if position in skip or not detail.matches_record_type(line):
            continue
        line_number = position + 1
        if detail.too_short_for_segment(line):
            ctx.note(
                DiagnosticCategory.DETAIL,
                f"Detail record has {len(line)} characters, too short to hold its segment code; skipped",
                line_number,
            )
            continue
        if not detail.matches(line):
            continue
        if len(line) < detail.min_length:
            ctx.note(
                DiagnosticCategory.DETAIL,
                f"Detail record has {len(line)} characters, expected at least {detail.min_length}; skipped",
                line_number,
            )
            continue
        entry = decode_detail_line(detail, line, line_number)
        if entry is not None:
            entries.append(entry)

    logger.debug("Classified %d detail entries", len(entries))
    return entries
