"""
CNAB Return File Parser

Byte-level entry point for bank return files (".RET" exports). Handles
encoding and format detection, then delegates to the pure decoder.
"""
import logging
from typing import Optional

from app.services.logging import return_file_logger

from .decoder import decode_return_file, split_lines
from .layouts import GENERIC_MIN_LENGTH, registered_layouts
from .models import ParsedStatement, ReturnFileError

logger = logging.getLogger(__name__)


def decode_bytes(file_bytes: bytes) -> str:
    """Decode file content as UTF-8, falling back to Latin-1."""
    try:
        return file_bytes.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Return file is not UTF-8, decoding as latin-1")
        return file_bytes.decode("latin-1")


class BankReturnParser:
    """
    Parser for fixed-width CNAB bank return files.

    Stateless: one instance can parse any number of files, from any
    number of threads.
    """

    def can_parse(self, file_bytes: bytes, filename: Optional[str] = None) -> bool:
        """Check if the first line starts with a known bank code or is CNAB400-sized."""
        lines = split_lines(decode_bytes(file_bytes))
        if not lines:
            return False
        first_line = lines[0]
        if any(first_line.startswith(layout.bank_code) for layout in registered_layouts()):
            return True
        return len(first_line) >= GENERIC_MIN_LENGTH

    def parse(self, file_bytes: bytes, filename: Optional[str] = None) -> ParsedStatement:
        """
        Parse a return file into a statement.

        Raises:
            EmptyFileError, UnknownBankError: the file cannot be decoded at all
        """
        return_file_logger.return_file_received(filename=filename, file_size=len(file_bytes))
        try:
            statement = decode_return_file(decode_bytes(file_bytes))
        except ReturnFileError as e:
            return_file_logger.return_file_rejected(filename=filename, reason=str(e))
            raise

        return_file_logger.return_file_decoded(
            filename=filename,
            bank_code=statement.bank.code,
            line_count=statement.line_count,
            entry_count=len(statement.details),
            diagnostic_count=len(statement.diagnostics),
        )
        return statement

    def get_format_name(self) -> str:
        return "CNAB (retorno bancario)"
