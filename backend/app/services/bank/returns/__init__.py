"""Bank return file (CNAB) decoding."""
from .decoder import decode_lines, decode_return_file, split_lines
from .detection import detect_bank
from .layouts import GENERIC_LAYOUT, get_layout, registered_layouts
from .models import (
    BankIdentity,
    BankLayout,
    DetailEntry,
    Diagnostic,
    DiagnosticCategory,
    EmptyFileError,
    EntryClassification,
    ParsedStatement,
    RecordKind,
    ReturnFileError,
    UnknownBankError,
)
from .money import decode_amount, encode_amount
from .parser import BankReturnParser

__all__ = [
    "BankIdentity",
    "BankLayout",
    "BankReturnParser",
    "DetailEntry",
    "Diagnostic",
    "DiagnosticCategory",
    "EmptyFileError",
    "EntryClassification",
    "GENERIC_LAYOUT",
    "ParsedStatement",
    "RecordKind",
    "ReturnFileError",
    "UnknownBankError",
    "decode_amount",
    "decode_lines",
    "decode_return_file",
    "detect_bank",
    "encode_amount",
    "get_layout",
    "registered_layouts",
    "split_lines",
]
