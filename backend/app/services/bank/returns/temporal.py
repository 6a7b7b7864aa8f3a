"""
Generation date/time recovery.

Strategies are tried in order and the first one that yields a valid value
wins, so a value read from a fixed offset always beats one found by the
free scan. Fixed-offset strategies only read the header line; the free
scan also reads the trailer and batch-header lines, for the date only,
for layouts that carry the generation date there.

Dates are validated against the real calendar (2000-2100). An implausible
date is never returned.
"""
import calendar
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, time
from typing import Iterator, Optional, Sequence, Tuple

from .models import BankLayout, DateField, TimeField

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100

_EIGHT_DIGITS = re.compile(r"\d{8}")
_SIX_DIGITS = re.compile(r"\d{6}")


def parse_date(text: str, pattern: str = "DDMMYYYY") -> Optional[date]:
    """Validate and convert a DDMMYYYY, DDMMYY or YYYYMMDD string."""
    if len(text) != len(pattern) or not text.isdigit():
        return None

    if pattern == "DDMMYYYY":
        day, month, year = int(text[0:2]), int(text[2:4]), int(text[4:8])
    elif pattern == "DDMMYY":
        day, month, year = int(text[0:2]), int(text[2:4]), 2000 + int(text[4:6])
    elif pattern == "YYYYMMDD":
        year, month, day = int(text[0:4]), int(text[4:6]), int(text[6:8])
    else:
        raise ValueError(f"Unsupported date pattern: {pattern}")

    if not MIN_YEAR <= year <= MAX_YEAR or not 1 <= month <= 12:
        return None
    if not 1 <= day <= calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


def parse_time(text: str) -> Optional[time]:
    """Validate and convert an HHMMSS string."""
    if len(text) != 6 or not text.isdigit():
        return None
    hour, minute, second = int(text[0:2]), int(text[2:4]), int(text[4:6])
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


@dataclass(frozen=True)
class TemporalSources:
    """Lines a layout allows the extractor to read, header first."""
    header: str
    extra_lines: Tuple[str, ...] = ()

    @property
    def all_lines(self) -> Tuple[str, ...]:
        return (self.header,) + self.extra_lines


@dataclass(frozen=True)
class GenerationTimestamp:
    """Recovered date/time plus the name of the strategy that produced each."""
    generation_date: Optional[date] = None
    generation_time: Optional[time] = None
    date_source: Optional[str] = None
    time_source: Optional[str] = None


class TemporalStrategy(ABC):
    """One way of locating the generation date and time."""

    name: str = ""

    @abstractmethod
    def find_date(self, layout: BankLayout, sources: TemporalSources) -> Optional[date]:
        pass

    @abstractmethod
    def find_time(self, layout: BankLayout, sources: TemporalSources) -> Optional[time]:
        pass


class _FixedOffsetStrategy(TemporalStrategy):
    """Reads the date/time fields the layout declares on the header line."""

    date_attr = ""
    time_attr = ""

    def find_date(self, layout: BankLayout, sources: TemporalSources) -> Optional[date]:
        field: Optional[DateField] = getattr(layout, self.date_attr)
        if field is None or not field.span.fits(sources.header):
            return None
        return parse_date(field.span.slice(sources.header), field.pattern)

    def find_time(self, layout: BankLayout, sources: TemporalSources) -> Optional[time]:
        field: Optional[TimeField] = getattr(layout, self.time_attr)
        if field is None or not field.span.fits(sources.header):
            return None
        return parse_time(field.span.slice(sources.header))


class CanonicalOffsetStrategy(_FixedOffsetStrategy):
    """FEBRABAN positions right after the company and bank name block."""
    name = "canonical_offset"
    date_attr = "header_date"
    time_attr = "header_time"


class BankOffsetStrategy(_FixedOffsetStrategy):
    """Bank-specific positions for layouts that deviate from FEBRABAN."""
    name = "bank_offset"
    date_attr = "alt_header_date"
    time_attr = "alt_header_time"


def _runs_from_end(pattern: re.Pattern, line: str) -> Iterator[str]:
    # Generation stamps sit near the end of the record, so scan backwards
    runs = pattern.findall(line)
    for run in reversed(runs):
        if run.strip("0"):
            yield run


class FreeScanStrategy(TemporalStrategy):
    """
    Last resort: look for any digit run that validates as a date or time.

    Each line is scanned for DDMMYYYY first and then, only if nothing
    validated, for YYYYMMDD. The time is only looked for on the header:
    the other lines carry amounts whose digits read as plausible times.
    """
    name = "free_scan"

    def find_date(self, layout: BankLayout, sources: TemporalSources) -> Optional[date]:
        for line in sources.all_lines:
            for pattern in ("DDMMYYYY", "YYYYMMDD"):
                for run in _runs_from_end(_EIGHT_DIGITS, line):
                    found = parse_date(run, pattern)
                    if found is not None:
                        return found
        return None

    def find_time(self, layout: BankLayout, sources: TemporalSources) -> Optional[time]:
        for run in _runs_from_end(_SIX_DIGITS, sources.header):
            found = parse_time(run)
            if found is not None:
                return found
        return None


DEFAULT_STRATEGIES: Tuple[TemporalStrategy, ...] = (
    CanonicalOffsetStrategy(),
    BankOffsetStrategy(),
    FreeScanStrategy(),
)


def extract_generation_timestamp(
    layout: BankLayout,
    sources: TemporalSources,
    strategies: Sequence[TemporalStrategy] = DEFAULT_STRATEGIES,
) -> GenerationTimestamp:
    """Run the strategies in order for the date and, independently, for the time."""
    found_date, date_source = None, None
    for strategy in strategies:
        found_date = strategy.find_date(layout, sources)
        if found_date is not None:
            date_source = strategy.name
            break

    found_time, time_source = None, None
    for strategy in strategies:
        found_time = strategy.find_time(layout, sources)
        if found_time is not None:
            time_source = strategy.name
            break

    logger.debug(
        "Generation timestamp: date=%s (%s) time=%s (%s)",
        found_date, date_source, found_time, time_source,
    )
    return GenerationTimestamp(
        generation_date=found_date,
        generation_time=found_time,
        date_source=date_source,
        time_source=time_source,
    )
