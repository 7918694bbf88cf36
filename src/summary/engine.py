"""
Summary Engine

Pure computation of the financial breakdown of a month:

    admin fee   = round(revenue * admin_fee_percent / 100)
    net profit  = revenue - sum(expenses) - admin fee
    per partner = net profit / partners_count

All arithmetic is Decimal, rounded ROUND_HALF_UP to cents at the same
points every time, so the displayed totals always add up. The per-partner
share is the one exception: it is kept unrounded so that it multiplies
back to the net profit for any number of partners, and its rounded
cents value is carried next to it for display and payout.

A negative net profit is a valid month (expenses ate the revenue), not
an error. The per-partner share is negative too, never clamped to zero.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from src.models.ledger import CENT, MonthRecord


def round_cents(value: Decimal) -> Decimal:
    """Round to two decimals, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class DerivedSummary(BaseModel):
    """Financial breakdown of one month. Never stored."""
    model_config = ConfigDict(frozen=True)

    total_revenue: Decimal
    total_expenses: Decimal
    admin_fee_amount: Decimal
    net_profit: Decimal
    # Exact share (context precision); per_partner_amount * partners == net_profit
    per_partner_amount: Decimal
    # Share rounded to cents, as paid out and displayed
    per_partner_cents: Decimal
    # Cents left over when paying each partner per_partner_cents
    split_remainder: Decimal
    partners_count: int
    admin_fee_percent: int


class LedgerTotals(BaseModel):
    """Aggregate of several months, as shown on the dashboard."""
    model_config = ConfigDict(frozen=True)

    record_count: int
    total_revenue: Decimal
    total_expenses: Decimal
    total_admin_fees: Decimal
    total_net_profit: Decimal


def summarize(record: MonthRecord) -> DerivedSummary:
    """
    Compute the derived summary of a month record.

    Total over every valid record: partners_count >= 1 is guaranteed by
    the model, so the division cannot fail.
    """
    revenue = round_cents(record.revenue)
    total_expenses = round_cents(
        sum((expense.amount for expense in record.expenses), Decimal("0"))
    )
    admin_fee = round_cents(revenue * record.admin_fee_percent / Decimal(100))
    net_profit = revenue - total_expenses - admin_fee
    per_partner = net_profit / record.partners_count
    per_partner_cents = round_cents(per_partner)

    return DerivedSummary(
        total_revenue=revenue,
        total_expenses=total_expenses,
        admin_fee_amount=admin_fee,
        net_profit=net_profit,
        per_partner_amount=per_partner,
        per_partner_cents=per_partner_cents,
        split_remainder=net_profit - per_partner_cents * record.partners_count,
        partners_count=record.partners_count,
        admin_fee_percent=record.admin_fee_percent,
    )


def summarize_ledger(
    records: Iterable[MonthRecord],
    year: Optional[int] = None,
) -> LedgerTotals:
    """
    Add up the summaries of many months.

    Args:
        records: Month records to aggregate
        year: If given, only months of that year are counted
    """
    count = 0
    revenue = expenses = fees = net = Decimal("0.00")

    for record in records:
        if year is not None and record.year != year:
            continue
        summary = summarize(record)
        count += 1
        revenue += summary.total_revenue
        expenses += summary.total_expenses
        fees += summary.admin_fee_amount
        net += summary.net_profit

    return LedgerTotals(
        record_count=count,
        total_revenue=revenue,
        total_expenses=expenses,
        total_admin_fees=fees,
        total_net_profit=net,
    )
