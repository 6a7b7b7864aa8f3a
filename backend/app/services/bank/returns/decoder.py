"""
Statement assembler.

decode_return_file is a pure function: text in, ParsedStatement out.
Each call builds its own DecodeContext, so concurrent calls on separate
threads never see each other's state.
"""
import logging
from decimal import Decimal
from typing import List, Sequence

from app.services.logging import return_file_logger

from .detection import detect_bank
from .details import classify_details
from .header import decode_header
from .models import (
    BankIdentity,
    DecodeContext,
    DiagnosticCategory,
    EmptyFileError,
    ParsedStatement,
)
from .temporal import TemporalSources, extract_generation_timestamp
from .trailer import decode_closing_balance, decode_credit_limit, trailer_index

logger = logging.getLogger(__name__)


def split_lines(content: str) -> List[str]:
    """
    Split file content into non-blank lines.

    Only the line terminator is removed; leading spaces are positional
    and must be kept.
    """
    if content.startswith("\ufeff"):
        content = content[1:]
    lines = []
    for raw in content.split("\n"):
        line = raw.rstrip("\r")
        if line.strip():
            lines.append(line)
    return lines


def _temporal_sources(ctx: DecodeContext) -> TemporalSources:
    layout = ctx.layout
    extra = []
    if layout.scan_trailer_for_date:
        index = trailer_index(layout, len(ctx.lines))
        if index is not None and index > 0:
            extra.append(ctx.lines[index])
    if len(ctx.lines) > 1 and layout.is_batch_header(ctx.lines[1]):
        extra.append(ctx.lines[1])
    return TemporalSources(header=ctx.lines[0], extra_lines=tuple(extra))


def decode_lines(lines: Sequence[str]) -> ParsedStatement:
    """
    Decode already-split, non-blank lines.

    Raises:
        EmptyFileError: no lines
        UnknownBankError: no layout for the first line
    """
    if not lines:
        raise EmptyFileError()

    layout = detect_bank(lines)
    ctx = DecodeContext(lines=tuple(lines), layout=layout)

    header = decode_header(ctx)

    timestamp = extract_generation_timestamp(layout, _temporal_sources(ctx))
    if timestamp.generation_date is None:
        ctx.note(DiagnosticCategory.TIMESTAMP, "Generation date not found", 1)
    if timestamp.generation_time is None:
        ctx.note(DiagnosticCategory.TIMESTAMP, "Generation time not found", 1)

    closing = decode_closing_balance(ctx)
    closing_balance = closing.amount if closing else Decimal("0.00")

    credit_limit = decode_credit_limit(ctx)
    available_balance = closing_balance + credit_limit if credit_limit is not None else None

    details = classify_details(ctx)

    return_file_logger.timestamp_provenance(
        bank_code=layout.bank_code,
        date_source=timestamp.date_source,
        time_source=timestamp.time_source,
    )

    return ParsedStatement(
        bank=BankIdentity(layout.bank_code, layout.display_name, layout.layout_tag),
        agency=header.agency,
        account=header.account,
        company_name=header.company_name,
        destination_bank_name=header.destination_bank_name,
        generation_date=timestamp.generation_date,
        generation_time=timestamp.generation_time,
        opening_balance=header.opening_balance,
        opening_balance_date=header.opening_balance_date,
        closing_balance=closing_balance,
        credit_limit=credit_limit,
        available_balance=available_balance,
        details=tuple(details),
        diagnostics=tuple(ctx.diagnostics),
        line_count=len(ctx.lines),
    )


def decode_return_file(content: str) -> ParsedStatement:
    """Decode the full text of a bank return file."""
    return decode_lines(split_lines(content))
