"""Recurring expense detection."""
from dataclasses import replace
from datetime import date, timedelta
from typing import List, Set

from dateutil.relativedelta import relativedelta

from .models import RecurringExpense, Transaction, is_essential_category
from .timeline import group_by_merchant, mean

MAX_SPREAD_RATIO = 0.2
OPTIMIZE_MIN_AMOUNT = 50

# Upper bound in days for each bucket, checked in ascending order
INTERVAL_BUCKETS = (
    (7, "weekly"),
    (14, "biweekly"),
    (31, "monthly"),
    (92, "quarterly"),
    (365, "annual"),
)
FALLBACK_FREQUENCY = "monthly"

PERIODS = {
    "weekly": timedelta(days=7),
    "biweekly": timedelta(days=14),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "annual": relativedelta(years=1),
}


def classify_interval(mean_gap_days: float) -> str:
    """Map a mean gap in days to a recurrence frequency."""
    for limit, frequency in INTERVAL_BUCKETS:
        if mean_gap_days <= limit:
            return frequency
    return FALLBACK_FREQUENCY


def next_due_date(last_date: date, frequency: str) -> date:
    """Add one period to ``last_date`` (month ends are clamped)."""
    return last_date + PERIODS[frequency]


def has_stable_amounts(amounts: List[float]) -> bool:
    """True when the amount spread is under 20% of the mean."""
    if len(amounts) < 2:
        return False
    return max(amounts) - min(amounts) < MAX_SPREAD_RATIO * mean(amounts)


def _recurring_groups(transactions: List[Transaction]):
    for name, group in group_by_merchant(transactions).items():
        if has_stable_amounts([txn.amount for txn in group]):
            yield name, group


def detect_recurring(transactions: List[Transaction]) -> List[RecurringExpense]:
    """
    Find same-merchant transaction sets with stable amounts.

    Args:
        transactions: Transactions to scan

    Returns:
        RecurringExpense list in first-seen merchant order
    """
    recurring = []

    for name, group in _recurring_groups(transactions):
        dates = sorted(txn.date for txn in group)
        gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
        frequency = classify_interval(mean(gaps))

        amount = mean([txn.amount for txn in group])
        category = group[0].category
        essential = is_essential_category(category)

        recurring.append(RecurringExpense(
            name=name,
            category=category,
            amount=amount,
            frequency=frequency,
            next_due_date=next_due_date(dates[-1], frequency),
            is_essential=essential,
            can_optimize=amount > OPTIMIZE_MIN_AMOUNT and not essential
        ))

    return recurring


def recurring_merchant_keys(transactions: List[Transaction]) -> Set[str]:
    """Merchant keys of every qualifying recurring group."""
    return {name for name, _ in _recurring_groups(transactions)}


def mark_recurring(transactions: List[Transaction]) -> List[Transaction]:
    """Return copies of the transactions with ``is_recurring`` set."""
    keys = recurring_merchant_keys(transactions)
    return [replace(txn, is_recurring=txn.merchant_key in keys) for txn in transactions]
