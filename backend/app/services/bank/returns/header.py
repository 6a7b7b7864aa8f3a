"""
Header decoding: account identity, company and destination bank names,
and the opening balance carried by the batch header.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from .models import DecodeContext, DiagnosticCategory
from .temporal import parse_date
from .trailer import RejectedRun, match_balance_marker, note_rejected_runs

logger = logging.getLogger(__name__)

# Bank names that appear in the header's bank-name block
KNOWN_BANK_NAMES: Tuple[str, ...] = (
    "BANCO DO BRASIL",
    "ITAU UNIBANCO",
    "BANCO ITAU",
    "BRADESCO",
    "SANTANDER",
    "SICREDI",
    "UNIBANCO",
    "CAIXA ECONOMICA FEDERAL",
    "CAIXA",
    "UNICRED",
)

COMPANY_NAME_WINDOW = 40

_LEADING_NON_LETTERS = re.compile(r"^[^A-Za-zÀ-ÿ]+")


@dataclass(frozen=True)
class HeaderFields:
    agency: Optional[str] = None
    account: Optional[str] = None
    company_name: Optional[str] = None
    destination_bank_name: Optional[str] = None
    opening_balance: Optional[Decimal] = None
    opening_balance_date: Optional[date] = None


def find_bank_anchor(line: str) -> Optional[Tuple[int, str]]:
    """Leftmost known bank name in the line; longer name wins a tie."""
    best = None
    upper = line.upper()
    for name in KNOWN_BANK_NAMES:
        position = upper.find(name)
        if position < 0:
            continue
        if best is None or position < best[0] or (position == best[0] and len(name) > len(best[1])):
            best = (position, name)
    return best


def extract_names(line: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Return (company_name, destination_bank_name).

    The company name is taken from the characters just before the bank
    name. Both are None when no known bank name is present.
    """
    anchor = find_bank_anchor(line)
    if anchor is None:
        return None, None
    position, bank_name = anchor
    preceding = line[max(0, position - COMPANY_NAME_WINDOW):position]
    company = _LEADING_NON_LETTERS.sub("", preceding).strip()
    return company or None, bank_name


def decode_header(ctx: DecodeContext) -> HeaderFields:
    layout = ctx.layout
    header = ctx.lines[0]
    agency = account = None

    if layout.agency is not None and layout.account is not None:
        if len(header) >= layout.min_header_length:
            agency = layout.agency.slice(header).strip() or None
            account = layout.account.slice(header).strip() or None
            if agency is None or account is None:
                ctx.note(DiagnosticCategory.HEADER, "Agency or account field is blank", 1)
        else:
            ctx.note(
                DiagnosticCategory.HEADER,
                f"Header has {len(header)} characters, expected at least "
                f"{layout.min_header_length}; agency and account not read",
                1,
            )

    company_name, destination_bank_name = extract_names(header)
    if destination_bank_name is None:
        ctx.note(DiagnosticCategory.HEADER, "No known bank name in header; company name not read", 1)

    opening_balance, opening_balance_date = _decode_opening_balance(ctx)

    logger.debug(
        "Header: agency=%s account=%s company=%s bank=%s",
        agency, account, company_name, destination_bank_name,
    )
    return HeaderFields(
        agency=agency,
        account=account,
        company_name=company_name,
        destination_bank_name=destination_bank_name,
        opening_balance=opening_balance,
        opening_balance_date=opening_balance_date,
    )


def _decode_opening_balance(ctx: DecodeContext) -> Tuple[Optional[Decimal], Optional[date]]:
    layout = ctx.layout
    if len(ctx.lines) < 2 or not layout.is_batch_header(ctx.lines[1]):
        return None, None

    batch_header = ctx.lines[1]
    opening_date = None
    if layout.opening_balance_date is not None:
        field = layout.opening_balance_date
        opening_date = parse_date(field.span.slice(batch_header), field.pattern)

    rejected: List[RejectedRun] = []
    match = match_balance_marker(batch_header, layout.balance_markers, rejected)
    note_rejected_runs(ctx, DiagnosticCategory.OPENING_BALANCE, rejected, 2)
    if match is None:
        ctx.note(DiagnosticCategory.OPENING_BALANCE, "Opening balance marker not found in batch header", 2)
        return None, opening_date
    return match.amount, opening_date
