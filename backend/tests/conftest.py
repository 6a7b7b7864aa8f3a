"""
Pytest configuration and fixtures for backend tests.

Provides builders for synthetic fixed-width CNAB240 and CNAB400 return
files, and an HTTP test client whose upload directory points at a
temporary path.
"""
from decimal import Decimal
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.services.bank.returns import get_layout


def fixed_width(fields: Dict[int, str], length: int) -> str:
    """Build a line of `length` spaces with each text placed at its offset."""
    chars = [" "] * length
    for offset, text in fields.items():
        chars[offset:offset + len(text)] = list(text)
    return "".join(chars)


def cents(amount: str, width: int = 18) -> str:
    """Decimal string -> zero-padded cents digit run, e.g. '123.45' -> '000...12345'."""
    return str(int(Decimal(amount) * 100)).zfill(width)


class Cnab240Builder:
    """Lines of a FEBRABAN CNAB240 statement export."""

    def header(
        self,
        bank_code: str = "341",
        agency: str = "01234",
        account: str = "000000098765",
        company: str = "ACME COMERCIO LTDA",
        bank_name: str = "BANCO ITAU SA",
        generated: str = "11082025",
        at_time: str = "143015",
        length: int = 240,
    ) -> str:
        layout = get_layout(bank_code)
        fields = {0: bank_code, 3: "0000", 7: "0", 72: company.ljust(30), 102: bank_name.ljust(30), 142: "2"}
        if layout.agency is not None:
            fields[layout.agency.start] = agency[: layout.agency.end - layout.agency.start]
            fields[layout.account.start] = account[: layout.account.end - layout.account.start]
        if generated:
            fields[143] = generated
        if at_time:
            fields[151] = at_time
        return fixed_width(fields, length)[:length]

    def batch_header(
        self,
        bank_code: str = "341",
        balance: str = "1000.00",
        marker: str = "CF",
        balance_date: str = "10082025",
    ) -> str:
        return fixed_width(
            {0: bank_code, 3: "0001", 7: "1", 8: "E", 142: balance_date, 150: cents(balance), 168: marker},
            240,
        )

    def detail(
        self,
        bank_code: str = "341",
        amount: str = "10.00",
        indicator: str = "C",
        description: str = "PIX RECEBIDO",
        entry_date: str = "11082025",
        category: str = "101",
        sequence: int = 1,
        digits: Optional[str] = None,
    ) -> str:
        amount_digits = digits.zfill(18) if digits is not None else cents(amount)
        return fixed_width(
            {
                0: bank_code,
                3: "0001",
                7: "3",
                8: str(sequence).zfill(5),
                13: "E",
                136: entry_date,
                144: amount_digits,
                162: indicator,
                163: category,
                166: "0001",
                170: description.ljust(25)[:25],
            },
            240,
        )

    def batch_trailer(
        self,
        bank_code: str = "341",
        balance: str = "123.45",
        marker: Optional[str] = "CF",
        balance_date: str = "11082025",
        credit_limit: Optional[str] = None,
        digits: Optional[str] = None,
    ) -> str:
        fields = {0: bank_code, 3: "0001", 7: "5", 142: balance_date}
        fields[150] = digits.zfill(18) if digits is not None else cents(balance)
        if marker:
            fields[168] = marker
        if credit_limit is not None:
            fields[106] = cents(credit_limit)
        return fixed_width(fields, 240)

    def file_trailer(self, bank_code: str = "341") -> str:
        return fixed_width({0: bank_code, 3: "9999", 7: "9", 17: "000001"}, 240)

    def statement(self, bank_code: str = "341", details=(), **trailer_options) -> str:
        """A complete, well-formed file: header, batch header, details, trailers."""
        lines = [self.header(bank_code=bank_code), self.batch_header(bank_code=bank_code)]
        lines.extend(details)
        lines.append(self.batch_trailer(bank_code=bank_code, **trailer_options))
        lines.append(self.file_trailer(bank_code=bank_code))
        return "\n".join(lines) + "\n"


class Cnab400Builder:
    """Lines of a 400-position export (Bradesco, Santander, Unibanco, generic)."""

    def header(
        self,
        bank_code: str = "237",
        company: str = "ACME COMERCIO LTDA",
        bank_name: str = "BRADESCO",
        generated: str = "130825",
        at_time: str = "091500",
    ) -> str:
        return fixed_width(
            {0: bank_code, 7: "0", 46: company.ljust(30), 79: bank_name.ljust(15)[:15], 94: generated, 100: at_time},
            400,
        )

    def detail(
        self,
        bank_code: str = "237",
        amount: str = "10.00",
        indicator: str = "D",
        description: str = "PAGAMENTO FORNECEDOR",
        entry_date: str = "12082025",
        code: str = "02",
    ) -> str:
        return fixed_width(
            {0: bank_code, 7: "1", 8: indicator, 9: entry_date, 17: code, 19: description.ljust(50), 69: cents(amount)},
            400,
        )

    def trailer(self, bank_code: str = "237", balance: str = "250.00", marker: Optional[str] = None) -> str:
        fields = {0: bank_code, 7: "9", 119: cents(balance, 15)}
        if marker:
            fields[134] = marker
        return fixed_width(fields, 400)


@pytest.fixture
def cnab240() -> Cnab240Builder:
    return Cnab240Builder()


@pytest.fixture
def cnab400() -> Cnab400Builder:
    return Cnab400Builder()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point the staging directory at a temporary path."""
    staging = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(staging))
    return staging


@pytest.fixture
def client(upload_dir):
    """Create a test client for the FastAPI app."""
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
