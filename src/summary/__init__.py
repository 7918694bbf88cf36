"""Summary engine package."""

from src.summary.engine import (
    DerivedSummary,
    LedgerTotals,
    round_cents,
    summarize,
    summarize_ledger,
)

__all__ = [
    "DerivedSummary",
    "LedgerTotals",
    "round_cents",
    "summarize",
    "summarize_ledger",
]
