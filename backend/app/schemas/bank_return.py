"""
Bank Return Schemas

Pydantic schemas for:
- Decoded return file responses
- Registered bank layouts
"""
from datetime import date, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.services.bank.returns import BankLayout, DetailEntry, ParsedStatement


def format_brl(amount: Optional[Decimal]) -> Optional[str]:
    """Format an amount as Brazilian reais, e.g. Decimal('-1234.5') -> 'R$ -1.234,50'."""
    if amount is None:
        return None
    return f"R$ {amount:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


class BankInfo(BaseModel):
    """Detected bank and layout."""
    code: str = Field(..., description="3-digit bank code (000 for the generic layout)")
    name: str
    layout: str = Field(..., description="Layout tag, e.g. CNAB240_ITAU")


class DetailEntryResponse(BaseModel):
    """One itemized movement."""
    line_number: int
    amount: Decimal
    amount_formatted: str
    classification: str = Field(..., description="debit, credit or fee")
    description: str
    occurrence_code: str
    occurrence_date: Optional[date] = None

    @classmethod
    def from_entry(cls, entry: DetailEntry) -> "DetailEntryResponse":
        return cls(
            line_number=entry.line_number,
            amount=entry.amount,
            amount_formatted=format_brl(entry.amount),
            classification=entry.classification.value,
            description=entry.description,
            occurrence_code=entry.occurrence_code,
            occurrence_date=entry.occurrence_date,
        )


class DiagnosticResponse(BaseModel):
    category: str
    message: str
    line_number: Optional[int] = None


class BankReturnResponse(BaseModel):
    """Response after decoding a bank return file."""
    filename: Optional[str] = None
    bank: BankInfo
    agency: Optional[str] = None
    account: Optional[str] = None
    company_name: Optional[str] = None
    destination_bank_name: Optional[str] = None
    generation_date: Optional[date] = None
    generation_time: Optional[time] = None
    opening_balance: Optional[Decimal] = None
    opening_balance_formatted: Optional[str] = None
    opening_balance_date: Optional[date] = None
    closing_balance: Decimal
    closing_balance_formatted: str
    credit_limit: Optional[Decimal] = None
    credit_limit_formatted: Optional[str] = None
    available_balance: Optional[Decimal] = None
    available_balance_formatted: Optional[str] = None
    operation_sign: Optional[str] = Field(None, description="credit, debit, or null for a zero balance")
    debits: List[DetailEntryResponse] = Field(default_factory=list)
    credits: List[DetailEntryResponse] = Field(default_factory=list)
    fees: List[DetailEntryResponse] = Field(default_factory=list)
    diagnostics: List[DiagnosticResponse] = Field(default_factory=list)
    line_count: int

    @classmethod
    def from_statement(cls, statement: ParsedStatement, filename: Optional[str] = None) -> "BankReturnResponse":
        return cls(
            filename=filename,
            bank=BankInfo(
                code=statement.bank.code,
                name=statement.bank.name,
                layout=statement.bank.layout_tag,
            ),
            agency=statement.agency,
            account=statement.account,
            company_name=statement.company_name,
            destination_bank_name=statement.destination_bank_name,
            generation_date=statement.generation_date,
            generation_time=statement.generation_time,
            opening_balance=statement.opening_balance,
            opening_balance_formatted=format_brl(statement.opening_balance),
            opening_balance_date=statement.opening_balance_date,
            closing_balance=statement.closing_balance,
            closing_balance_formatted=format_brl(statement.closing_balance),
            credit_limit=statement.credit_limit,
            credit_limit_formatted=format_brl(statement.credit_limit),
            available_balance=statement.available_balance,
            available_balance_formatted=format_brl(statement.available_balance),
            operation_sign=statement.operation_sign,
            debits=[DetailEntryResponse.from_entry(e) for e in statement.debits],
            credits=[DetailEntryResponse.from_entry(e) for e in statement.credits],
            fees=[DetailEntryResponse.from_entry(e) for e in statement.fees],
            diagnostics=[
                DiagnosticResponse(
                    category=d.category.value,
                    message=d.message,
                    line_number=d.line_number,
                )
                for d in statement.diagnostics
            ],
            line_count=statement.line_count,
        )


class BankLayoutResponse(BaseModel):
    """A bank the decoder knows how to read."""
    code: str
    name: str
    layout: str
    record_kind: str

    @classmethod
    def from_layout(cls, layout: BankLayout) -> "BankLayoutResponse":
        return cls(
            code=layout.bank_code,
            name=layout.display_name,
            layout=layout.layout_tag,
            record_kind=layout.record_kind.value,
        )
