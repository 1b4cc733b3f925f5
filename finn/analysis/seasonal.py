"""Seasonal pattern and spending trend analysis."""
from typing import Dict, List, Tuple

from .models import SeasonalPattern, Transaction
from .categories import category_totals
from .timeline import mean

# Fixed English names keep period labels independent of the process locale
MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

SEASONAL_THRESHOLD = 1.2
TREND_MIN_TRANSACTIONS = 30
TREND_UP = 1.1
TREND_DOWN = 0.9


def monthly_totals(transactions: List[Transaction]) -> Dict[Tuple[int, int], float]:
    """Total spend per (year, month), in chronological order."""
    totals: Dict[Tuple[int, int], float] = {}
    for txn in transactions:
        key = (txn.date.year, txn.date.month)
        totals[key] = totals.get(key, 0.0) + txn.amount
    return dict(sorted(totals.items()))


def _categories_by_spend(transactions: List[Transaction]) -> List[str]:
    totals = category_totals(transactions)
    return [name for name, _ in sorted(totals.items(), key=lambda item: item[1], reverse=True)]


def detect_seasonal_patterns(transactions: List[Transaction]) -> List[SeasonalPattern]:
    """
    Flag calendar months whose spend exceeds 120% of the mean monthly total.

    Args:
        transactions: Transactions to bucket

    Returns:
        SeasonalPattern list in chronological order
    """
    totals = monthly_totals(transactions)
    if not totals:
        return []

    average = mean(list(totals.values()))
    patterns = []

    for (year, month), amount in totals.items():
        if amount <= average * SEASONAL_THRESHOLD:
            continue
        in_month = [txn for txn in transactions if (txn.date.year, txn.date.month) == (year, month)]
        patterns.append(SeasonalPattern(
            period=f"{MONTH_NAMES[month - 1]} {year}",
            year=year,
            month=month,
            average_spend=amount,
            variance=amount - average,
            categories=_categories_by_spend(in_month)
        ))

    return patterns


def spending_trend(transactions: List[Transaction], min_transactions: int = TREND_MIN_TRANSACTIONS) -> str:
    """
    Compare the mean amount of the first and last thirds of the timeline.

    Returns:
        ``"increasing"``, ``"decreasing"`` or ``"stable"`` (also for short histories)
    """
    if len(transactions) < min_transactions:
        return "stable"

    ordered = sorted(transactions, key=lambda txn: txn.date)
    third = len(ordered) // 3
    if third == 0:
        return "stable"

    first_avg = mean([txn.amount for txn in ordered[:third]])
    last_avg = mean([txn.amount for txn in ordered[-third:]])

    if last_avg > first_avg * TREND_UP:
        return "increasing"
    if last_avg < first_avg * TREND_DOWN:
        return "decreasing"
    return "stable"
