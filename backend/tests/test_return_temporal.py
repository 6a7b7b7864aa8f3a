"""
Unit Tests for Generation Timestamp Recovery

Tests cover:
- Calendar validation of dates and times
- Strategy order (canonical > bank offset > free scan)
- Free scan direction and YYYYMMDD retry
- Trailer and batch-header lines as extra sources
"""
from datetime import date, time

from app.services.bank.returns import GENERIC_LAYOUT, get_layout
from app.services.bank.returns.temporal import (
    DEFAULT_STRATEGIES,
    BankOffsetStrategy,
    CanonicalOffsetStrategy,
    FreeScanStrategy,
    TemporalSources,
    extract_generation_timestamp,
    parse_date,
    parse_time,
)
from tests.conftest import fixed_width


class TestParseDate:
    """Tests for parse_date."""

    def test_valid_ddmmyyyy(self):
        assert parse_date("11082025") == date(2025, 8, 11)

    def test_invalid_day_and_month(self):
        """'32132025' must never become a date."""
        assert parse_date("32132025") is None

    def test_day_beyond_month_length(self):
        assert parse_date("31042025") is None
        assert parse_date("29022025") is None
        assert parse_date("29022024") == date(2024, 2, 29)

    def test_year_range(self):
        assert parse_date("01011999") is None
        assert parse_date("01012101") is None
        assert parse_date("01012100") == date(2100, 1, 1)

    def test_ddmmyy(self):
        assert parse_date("130825", "DDMMYY") == date(2025, 8, 13)

    def test_yyyymmdd(self):
        assert parse_date("20250811", "YYYYMMDD") == date(2025, 8, 11)

    def test_non_digits_and_wrong_length(self):
        assert parse_date("1108202A") is None
        assert parse_date("110825") is None
        assert parse_date("        ") is None


class TestParseTime:
    """Tests for parse_time."""

    def test_valid(self):
        assert parse_time("143015") == time(14, 30, 15)
        assert parse_time("000000") == time(0, 0, 0)

    def test_out_of_range(self):
        assert parse_time("240000") is None
        assert parse_time("126000") is None
        assert parse_time("120060") is None

    def test_wrong_shape(self):
        assert parse_time("1430") is None
        assert parse_time("14:30:") is None


class TestStrategyOrder:
    """Tests for extract_generation_timestamp."""

    def test_default_strategy_order(self):
        assert [s.name for s in DEFAULT_STRATEGIES] == ["canonical_offset", "bank_offset", "free_scan"]

    def test_canonical_offsets(self, cnab240):
        header = cnab240.header(generated="11082025", at_time="143015")
        result = extract_generation_timestamp(get_layout("341"), TemporalSources(header))
        assert result.generation_date == date(2025, 8, 11)
        assert result.generation_time == time(14, 30, 15)
        assert result.date_source == "canonical_offset"
        assert result.time_source == "canonical_offset"

    def test_canonical_wins_over_free_scan_in_trailer(self, cnab240):
        """A fixed-offset value is preferred even if another line holds a different date."""
        header = cnab240.header(generated="11082025")
        trailer = cnab240.batch_trailer(balance_date="12082025")
        result = extract_generation_timestamp(get_layout("341"), TemporalSources(header, (trailer,)))
        assert result.generation_date == date(2025, 8, 11)

    def test_invalid_canonical_date_falls_through_to_free_scan(self, cnab240):
        header = cnab240.header(generated="32132025", at_time="")
        trailer = cnab240.batch_trailer(balance_date="12082025")
        result = extract_generation_timestamp(get_layout("341"), TemporalSources(header, (trailer,)))
        assert result.generation_date == date(2025, 8, 12)
        assert result.date_source == "free_scan"

    def test_bank_offset_for_cnab400(self, cnab400):
        header = cnab400.header(generated="130825", at_time="091500")
        result = extract_generation_timestamp(get_layout("237"), TemporalSources(header))
        assert result.generation_date == date(2025, 8, 13)
        assert result.generation_time == time(9, 15, 0)
        assert result.date_source == "bank_offset"

    def test_nothing_found(self):
        header = fixed_width({0: "341", 72: "ACME"}, 240)
        result = extract_generation_timestamp(get_layout("341"), TemporalSources(header))
        assert result.generation_date is None
        assert result.generation_time is None
        assert result.date_source is None

    def test_custom_strategy_list(self, cnab240):
        """Strategies are a plain, replaceable sequence."""
        header = cnab240.header(generated="11082025")
        result = extract_generation_timestamp(
            get_layout("341"), TemporalSources(header), strategies=(BankOffsetStrategy(),)
        )
        assert result.generation_date is None


class TestFreeScan:
    """Tests for FreeScanStrategy."""

    def test_scans_from_end_of_line(self):
        line = fixed_width({10: "01022025", 200: "15032025"}, 240)
        found = FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(line))
        assert found == date(2025, 3, 15)

    def test_skips_invalid_runs(self):
        line = fixed_width({10: "11082025", 200: "32132025"}, 240)
        found = FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(line))
        assert found == date(2025, 8, 11)

    def test_only_invalid_date_yields_nothing(self):
        line = fixed_width({100: "32132025"}, 240)
        assert FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(line)) is None

    def test_retries_as_yyyymmdd(self):
        line = fixed_width({50: "20250811"}, 240)
        found = FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(line))
        assert found == date(2025, 8, 11)

    def test_header_is_scanned_before_extra_lines(self):
        header = fixed_width({50: "01072025"}, 240)
        trailer = fixed_width({50: "02072025"}, 240)
        found = FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(header, (trailer,)))
        assert found == date(2025, 7, 1)

    def test_extra_line_used_when_header_has_no_date(self):
        header = fixed_width({0: "341"}, 240)
        trailer = fixed_width({142: "11082025"}, 240)
        found = FreeScanStrategy().find_date(GENERIC_LAYOUT, TemporalSources(header, (trailer,)))
        assert found == date(2025, 8, 11)

    def test_time_ignores_zero_filled_runs(self):
        line = fixed_width({10: "101500", 100: "000000"}, 240)
        found = FreeScanStrategy().find_time(GENERIC_LAYOUT, TemporalSources(line))
        assert found == time(10, 15, 0)

    def test_fixed_offset_strategies_ignore_short_header(self):
        header = "341" + " " * 100
        layout = get_layout("341")
        assert CanonicalOffsetStrategy().find_date(layout, TemporalSources(header)) is None
        assert CanonicalOffsetStrategy().find_time(layout, TemporalSources(header)) is None

    def test_time_is_not_read_from_extra_lines(self):
        """Amount digits on trailer lines must never become a generation time."""
        header = fixed_width({0: "341"}, 240)
        trailer = fixed_width({142: "11082025", 150: "000000000000012345"}, 240)
        sources = TemporalSources(header, (trailer,))
        assert FreeScanStrategy().find_time(GENERIC_LAYOUT, sources) is None
        assert FreeScanStrategy().find_date(GENERIC_LAYOUT, sources) == date(2025, 8, 11)
