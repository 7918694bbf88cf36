"""
Data Models Package

This package contains all Pydantic models used by the FlatMoney ledger.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    CENT,
    MAX_AMOUNT,
    MAX_DESCRIPTION_LENGTH,
    STORED_CONTEXT,
    ExpenseItem,
    Ledger,
    LedgerAdapter,
    MonthLabel,
    MonthRecord,
    chronological,
    duplicate_ids,
    new_id,
    now_millis,
)
from src.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "CENT",
    "MAX_AMOUNT",
    "MAX_DESCRIPTION_LENGTH",
    "STORED_CONTEXT",
    "ExpenseItem",
    "Ledger",
    "LedgerAdapter",
    "MonthLabel",
    "MonthRecord",
    "chronological",
    "duplicate_ids",
    "new_id",
    "now_millis",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
