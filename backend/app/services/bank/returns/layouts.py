"""
Layout registry.

One BankLayout row per supported bank. Adding a bank means adding a row
here; the decoding engine has no per-bank code paths.
"""
from typing import Dict, Tuple

from .models import (
    BalanceMarker,
    BankLayout,
    DateField,
    DetailLayout,
    FieldSpan,
    RecordKind,
    TimeField,
    TrailerLine,
)


def _markers(*tokens: str, min_digits: int = 1, max_digits: int = 12) -> Tuple[BalanceMarker, ...]:
    return tuple(BalanceMarker(t, min_digits, max_digits) for t in tokens)


# FEBRABAN CNAB240 "extrato para conciliacao" positions
CNAB240_DETAIL = DetailLayout(
    record_type_at=7,
    record_type="3",
    segment_at=13,
    segment="E",
    occurrence_date=DateField(FieldSpan(136, 144)),
    amount=FieldSpan(144, 162),
    indicator_at=162,
    occurrence_code=FieldSpan(163, 166),
    description=FieldSpan(170, 195),
    min_length=195,
)

CNAB400_DETAIL = DetailLayout(
    record_type_at=7,
    record_type="1",
    indicator_at=8,
    occurrence_date=DateField(FieldSpan(9, 17)),
    occurrence_code=FieldSpan(17, 19),
    description=FieldSpan(19, 69),
    amount=FieldSpan(69, 87),
    min_length=87,
)

_CNAB240_COMMON = dict(
    record_kind=RecordKind.FIXED_WIDTH_240,
    min_header_length=240,
    trailer_line=TrailerLine.SECOND_TO_LAST,
    detail=CNAB240_DETAIL,
    header_date=DateField(FieldSpan(143, 151)),
    header_time=TimeField(FieldSpan(151, 157)),
    batch_header_record_type="1",
    opening_balance_date=DateField(FieldSpan(142, 150)),
    credit_limit=FieldSpan(106, 124),
    scan_trailer_for_date=True,
)

_CNAB400_COMMON = dict(
    record_kind=RecordKind.FIXED_WIDTH_400,
    min_header_length=400,
    trailer_line=TrailerLine.LAST,
    detail=CNAB400_DETAIL,
    alt_header_date=DateField(FieldSpan(94, 100), pattern="DDMMYY"),
    alt_header_time=TimeField(FieldSpan(100, 106)),
    fallback_windows=(FieldSpan(119, 134),),
)

# Agency/account positions used by the cooperative and state banks' exports
_SHORT_AGENCY = dict(agency=FieldSpan(18, 22), account=FieldSpan(23, 32))
_WIDE_WINDOWS = (FieldSpan(150, 156), FieldSpan(140, 146), FieldSpan(130, 136))

_LAYOUTS: Tuple[BankLayout, ...] = (
    BankLayout(
        bank_code="001",
        display_name="BANCO DO BRASIL S.A.",
        layout_tag="CNAB240_BB",
        balance_markers=_markers("CF", "CP", "DF", "DP"),
        fallback_windows=_WIDE_WINDOWS,
        **_SHORT_AGENCY,
        **_CNAB240_COMMON,
    ),
    BankLayout(
        bank_code="341",
        display_name="BANCO ITAU S/A",
        layout_tag="CNAB240_ITAU",
        agency=FieldSpan(52, 57),
        account=FieldSpan(58, 70),
        balance_markers=_markers("DP", "DF", "CP", "CF"),
        **_CNAB240_COMMON,
    ),
    BankLayout(
        bank_code="237",
        display_name="BRADESCO S.A.",
        layout_tag="CNAB400_BRADESCO",
        balance_markers=_markers("CF", "DF", "CP", "DP"),
        **_CNAB400_COMMON,
    ),
    BankLayout(
        bank_code="033",
        display_name="BANCO SANTANDER",
        layout_tag="CNAB400_SANTANDER",
        balance_markers=_markers("CP", "CF", "DP", "DF", min_digits=4, max_digits=8),
        **_CNAB400_COMMON,
    ),
    BankLayout(
        bank_code="748",
        display_name="SICREDI",
        layout_tag="CNAB240_SICREDI",
        balance_markers=_markers("CP", "CF", "DP", "DF"),
        fallback_windows=(FieldSpan(150, 154), FieldSpan(140, 144), FieldSpan(130, 134)),
        **_SHORT_AGENCY,
        **_CNAB240_COMMON,
    ),
    BankLayout(
        bank_code="409",
        display_name="UNIBANCO",
        layout_tag="CNAB400_UNIBANCO",
        balance_markers=_markers("CF", "DF", "CP", "DP"),
        **_CNAB400_COMMON,
    ),
    BankLayout(
        bank_code="104",
        display_name="CAIXA ECONOMICA FEDERAL",
        layout_tag="CNAB240_CAIXA",
        balance_markers=_markers("CF", "CP", "DF", "DP"),
        fallback_windows=_WIDE_WINDOWS,
        **_SHORT_AGENCY,
        **_CNAB240_COMMON,
    ),
    BankLayout(
        bank_code="136",
        display_name="UNICRED DO BRASIL",
        layout_tag="CNAB240_UNICRED",
        balance_markers=_markers("DF", "DP", "CF", "CP"),
        fallback_windows=_WIDE_WINDOWS,
        **_SHORT_AGENCY,
        **_CNAB240_COMMON,
    ),
)

GENERIC_LAYOUT = BankLayout(
    bank_code="000",
    display_name="BANCO GENERICO",
    layout_tag="CNAB400_GENERICO",
    balance_markers=_markers("CF", "DF", "CP", "DP"),
    **_CNAB400_COMMON,
)

# Lines at least this long are treated as generic CNAB400 when no code matches
GENERIC_MIN_LENGTH = 400

_BY_CODE: Dict[str, BankLayout] = {layout.bank_code: layout for layout in _LAYOUTS}


def registered_layouts() -> Tuple[BankLayout, ...]:
    """All registered layouts in detection order."""
    return _LAYOUTS


def get_layout(bank_code: str) -> BankLayout:
    """Return the layout registered for a bank code. Raises KeyError if unknown."""
    return _BY_CODE[bank_code]
