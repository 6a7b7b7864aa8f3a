"""Bank detection from the first line of a return file."""
import logging
from typing import Sequence

from .layouts import GENERIC_LAYOUT, GENERIC_MIN_LENGTH, registered_layouts
from .models import BankLayout, EmptyFileError, UnknownBankError

logger = logging.getLogger(__name__)


def detect_bank(lines: Sequence[str]) -> BankLayout:
    """
    Pick the layout for a file.

    The first three characters of line 1 are compared against every
    registered bank code in registry order. Unmatched lines of at least
    400 characters fall back to the generic CNAB400 layout.

    Raises:
        EmptyFileError: no lines at all
        UnknownBankError: no code matched and the line is too short for the generic layout
    """
    if not lines:
        raise EmptyFileError()

    first_line = lines[0]
    prefix = first_line[:3]

    for layout in registered_layouts():
        if prefix == layout.bank_code:
            logger.debug("Detected bank %s (%s)", layout.bank_code, layout.layout_tag)
            return layout

    if len(first_line) >= GENERIC_MIN_LENGTH:
        logger.info("No bank code matched prefix %r, using generic CNAB400 layout", prefix)
        return GENERIC_LAYOUT

    raise UnknownBankError(prefix)
