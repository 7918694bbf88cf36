"""
Core Ledger Models for FlatMoney

These models define the strict schemas for the monthly ledger of a
short-term rental flat. They are designed to:
1. Keep every money amount as a fixed-point Decimal (never a float or a
   formatted string)
2. Serialize to the same camelCase JSON shape used by storage and backups
3. Reject malformed records loudly instead of guessing

DESIGN DECISION: Records are frozen. An edit is a full replacement that
keeps the original id and created_at, never an in-place field assignment.
"""

import time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Iterable
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    ValidationInfo,
    model_validator,
)
from pydantic.alias_generators import to_camel


# Amounts are bounded to 15 significant digits: anything larger cannot
# survive a JSON number (IEEE-754 double) round trip exactly.
MAX_AMOUNT_DIGITS = 15
MAX_AMOUNT = Decimal("9999999999999.99")
CENT = Decimal("0.01")
MAX_DESCRIPTION_LENGTH = 200

# Validation context for data that was already stored or exported: every
# field must be present, so a load never invents an id or a timestamp.
STORED_CONTEXT = {"stored": True}


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class MonthLabel(str, Enum):
    """
    Calendar months, in calendar order.

    The values are the labels stored in the ledger, so they must never
    be translated or reordered.
    """
    JANUARY = "Janeiro"
    FEBRUARY = "Fevereiro"
    MARCH = "Março"
    APRIL = "Abril"
    MAY = "Maio"
    JUNE = "Junho"
    JULY = "Julho"
    AUGUST = "Agosto"
    SEPTEMBER = "Setembro"
    OCTOBER = "Outubro"
    NOVEMBER = "Novembro"
    DECEMBER = "Dezembro"

    @property
    def number(self) -> int:
        """1-based calendar position (Janeiro = 1)."""
        return list(MonthLabel).index(self) + 1

    @classmethod
    def from_number(cls, month: int) -> "MonthLabel":
        """Label for a 1-based month number."""
        if not 1 <= month <= 12:
            raise ValueError(f"Month number out of range: {month}")
        return list(cls)[month - 1]


# =============================================================================
# MONEY TYPE
# =============================================================================

def _coerce_money(value: Any) -> Any:
    """Turn JSON numbers into exact Decimals before validation."""
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, not a boolean")
    if isinstance(value, float):
        # repr() gives the shortest string that round-trips the double
        return Decimal(repr(value))
    if isinstance(value, int):
        return Decimal(value)
    return value


def _money_to_json(value: Decimal) -> float:
    return float(value)


Money = Annotated[
    Decimal,
    BeforeValidator(_coerce_money),
    Field(ge=0, max_digits=MAX_AMOUNT_DIGITS, decimal_places=2),
    PlainSerializer(_money_to_json, return_type=float, when_used="json"),
]


def new_id() -> str:
    """Opaque unique identifier for records and expense items."""
    return str(uuid4())


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _require_stored_fields(data: Any, info: ValidationInfo, fields: tuple[str, ...]) -> Any:
    """Reject stored data that relies on construction defaults."""
    if not (info.context or {}).get("stored") or not isinstance(data, dict):
        return data
    missing = [
        to_camel(name) for name in fields
        if name not in data and to_camel(name) not in data
    ]
    if missing:
        raise ValueError(f"Missing stored fields: {', '.join(missing)}")
    return data


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class ExpenseItem(BaseModel):
    """
    A single expense of the month (cleaning, electricity, condo fee...).

    Description emptiness is checked at submit time by the validator, so
    a stored item is accepted as long as it has the right shape.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique expense identifier"
    )
    description: str = Field(
        ...,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="What the money was spent on"
    )
    amount: Money = Field(
        ...,
        description="Amount spent"
    )

    @model_validator(mode="before")
    @classmethod
    def _stored_fields_present(cls, data: Any, info: ValidationInfo) -> Any:
        return _require_stored_fields(data, info, ("id", "description", "amount"))


class MonthRecord(BaseModel):
    """
    One month of revenue, expenses and split parameters.

    CRITICAL: partners_count is at least 1 by construction, so the
    summary engine can always divide by it.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    # Identity
    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique record identifier (primary key in the ledger)"
    )
    created_at: int = Field(
        default_factory=now_millis,
        ge=0,
        description="Creation time in epoch milliseconds"
    )

    # Period
    month: MonthLabel
    year: int = Field(
        ...,
        ge=1,
        le=9999,
    )

    # Money
    revenue: Money = Field(
        ...,
        description="Gross amount received"
    )
    expenses: list[ExpenseItem] = Field(default_factory=list)

    # Split parameters
    admin_fee_percent: int = Field(
        default=35,
        ge=0,
        le=100,
        description="Percentage of revenue retained as administration fee"
    )
    partners_count: int = Field(
        default=2,
        ge=1,
        description="Number of partners splitting the net profit"
    )

    @model_validator(mode="before")
    @classmethod
    def _stored_fields_present(cls, data: Any, info: ValidationInfo) -> Any:
        return _require_stored_fields(data, info, (
            "id", "created_at", "month", "year", "revenue",
            "expenses", "admin_fee_percent", "partners_count",
        ))

    @property
    def label(self) -> str:
        """Display label such as 'Março/2024'."""
        return f"{self.month.value}/{self.year}"

    def to_storage_dict(self) -> dict:
        """Convert to the camelCase JSON-ready shape used on disk."""
        return self.model_dump(mode="json", by_alias=True)


# The ledger is a plain ordered list of records, keyed by id.
Ledger = list[MonthRecord]

LedgerAdapter: TypeAdapter[list[MonthRecord]] = TypeAdapter(list[MonthRecord])


def chronological(records: Iterable[MonthRecord]) -> Ledger:
    """Default ordering: year, then calendar month, then creation time."""
    return sorted(
        records,
        key=lambda r: (r.year, r.month.number, r.created_at),
    )


def duplicate_ids(records: Iterable[MonthRecord]) -> list[str]:
    """Ids that appear more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for record in records:
        if record.id in seen and record.id not in duplicates:
            duplicates.append(record.id)
        seen.add(record.id)
    return duplicates
