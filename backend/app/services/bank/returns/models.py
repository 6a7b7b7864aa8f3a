"""
Data model for CNAB bank return files.

Layouts describe where each bank puts its fields; ParsedStatement is the
immutable result of decoding one file. Both are plain frozen dataclasses so
a decode call never shares mutable state with another one.
"""
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class RecordKind(str, Enum):
    """Physical record width of a layout."""
    FIXED_WIDTH_240 = "FixedWidth240"
    FIXED_WIDTH_400 = "FixedWidth400"


class TrailerLine(str, Enum):
    """Which line of the file carries the closing balance."""
    SECOND_TO_LAST = "second_to_last"
    LAST = "last"
    SECOND_LINE = "second_line"


class EntryClassification(str, Enum):
    """Classification of an itemized movement."""
    DEBIT = "debit"
    CREDIT = "credit"
    FEE = "fee"


class DiagnosticCategory(str, Enum):
    """Area of the file a diagnostic refers to."""
    HEADER = "header"
    TIMESTAMP = "timestamp"
    OPENING_BALANCE = "opening_balance"
    CLOSING_BALANCE = "closing_balance"
    DETAIL = "detail"


@dataclass(frozen=True)
class FieldSpan:
    """Half-open character range [start, end) inside a fixed-width line."""
    start: int
    end: int

    def slice(self, line: str) -> str:
        return line[self.start:self.end]

    def fits(self, line: str) -> bool:
        """True when the line is long enough to hold the whole field."""
        return len(line) >= self.end


@dataclass(frozen=True)
class DateField:
    """A positional date, either DDMMYYYY or DDMMYY."""
    span: FieldSpan
    pattern: str = "DDMMYYYY"


@dataclass(frozen=True)
class TimeField:
    """A positional HHMMSS time."""
    span: FieldSpan


@dataclass(frozen=True)
class BalanceMarker:
    """
    Two-letter suffix that follows a balance digit run.

    The digit run must be between min_digits and max_digits long.
    """
    token: str
    min_digits: int = 1
    max_digits: int = 12


@dataclass(frozen=True)
class DetailLayout:
    """Positions of a detail (movement) record and the selector that recognizes it."""
    record_type_at: int
    record_type: str
    amount: FieldSpan
    indicator_at: int
    occurrence_code: FieldSpan
    description: FieldSpan
    min_length: int
    occurrence_date: Optional[DateField] = None
    segment_at: Optional[int] = None
    segment: Optional[str] = None

    def matches_record_type(self, line: str) -> bool:
        return len(line) > self.record_type_at and line[self.record_type_at] == self.record_type

    def too_short_for_segment(self, line: str) -> bool:
        """Record type matches but the line ends before the segment letter."""
        return self.segment_at is not None and len(line) <= self.segment_at

    def matches(self, line: str) -> bool:
        """Detail segment selector: record type (and segment letter, when declared)."""
        if not self.matches_record_type(line):
            return False
        if self.segment_at is None:
            return True
        return len(line) > self.segment_at and line[self.segment_at] == self.segment


@dataclass(frozen=True)
class BankLayout:
    """Everything the decoding engine needs to know about one bank's return file."""
    bank_code: str
    display_name: str
    layout_tag: str
    record_kind: RecordKind
    min_header_length: int
    trailer_line: TrailerLine
    balance_markers: Tuple[BalanceMarker, ...]
    detail: DetailLayout
    agency: Optional[FieldSpan] = None
    account: Optional[FieldSpan] = None
    header_date: Optional[DateField] = None
    header_time: Optional[TimeField] = None
    alt_header_date: Optional[DateField] = None
    alt_header_time: Optional[TimeField] = None
    fallback_windows: Tuple[FieldSpan, ...] = ()
    batch_header_record_type: Optional[str] = None
    opening_balance_date: Optional[DateField] = None
    credit_limit: Optional[FieldSpan] = None
    scan_trailer_for_date: bool = False

    def __post_init__(self):
        if len(self.bank_code) != 3:
            raise ValueError(f"Bank code must have 3 characters: {self.bank_code!r}")
        if not self.balance_markers:
            raise ValueError(f"Layout {self.layout_tag} declares no balance markers")

    def is_batch_header(self, line: str) -> bool:
        if self.batch_header_record_type is None:
            return False
        at = self.detail.record_type_at
        return len(line) > at and line[at] == self.batch_header_record_type


@dataclass(frozen=True)
class BankIdentity:
    code: str
    name: str
    layout_tag: str


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal note about a field that could not be confidently extracted."""
    category: DiagnosticCategory
    message: str
    line_number: Optional[int] = None


@dataclass(frozen=True)
class DetailEntry:
    """One itemized movement. line_number is 1-based over the non-blank lines."""
    line_number: int
    amount: Decimal
    classification: EntryClassification
    description: str
    occurrence_code: str
    occurrence_date: Optional[date] = None


@dataclass(frozen=True)
class ParsedStatement:
    """Immutable result of decoding one bank return file."""
    bank: BankIdentity
    closing_balance: Decimal
    line_count: int
    agency: Optional[str] = None
    account: Optional[str] = None
    company_name: Optional[str] = None
    destination_bank_name: Optional[str] = None
    generation_date: Optional[date] = None
    generation_time: Optional[time] = None
    opening_balance: Optional[Decimal] = None
    opening_balance_date: Optional[date] = None
    credit_limit: Optional[Decimal] = None
    available_balance: Optional[Decimal] = None
    details: Tuple[DetailEntry, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def operation_sign(self) -> Optional[str]:
        """'credit' for a positive closing balance, 'debit' for a negative one."""
        if self.closing_balance > 0:
            return "credit"
        if self.closing_balance < 0:
            return "debit"
        return None

    @property
    def debits(self) -> Tuple[DetailEntry, ...]:
        return tuple(e for e in self.details if e.classification == EntryClassification.DEBIT)

    @property
    def credits(self) -> Tuple[DetailEntry, ...]:
        return tuple(e for e in self.details if e.classification == EntryClassification.CREDIT)

    @property
    def fees(self) -> Tuple[DetailEntry, ...]:
        return tuple(e for e in self.details if e.classification == EntryClassification.FEE)


class ReturnFileError(ValueError):
    """Fatal condition: the file cannot produce any usable statement."""


class EmptyFileError(ReturnFileError):
    def __init__(self):
        super().__init__("Return file is empty or contains only blank lines")


class UnknownBankError(ReturnFileError):
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Bank not recognized for prefix {prefix!r}")


@dataclass
class DecodeContext:
    """
    Scratch state for a single decode call.

    Created by the assembler, passed to each stage, and dropped when the
    call returns. Never stored on a long-lived object.
    """
    lines: Tuple[str, ...]
    layout: BankLayout
    diagnostics: list = field(default_factory=list)

    def note(self, category: DiagnosticCategory, message: str, line_number: Optional[int] = None):
        self.diagnostics.append(Diagnostic(category, message, line_number))
