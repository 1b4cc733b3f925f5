"""Merchant aggregation."""
from typing import List

from .models import MerchantPattern, Transaction
from .seasonal import spending_trend
from .timeline import group_by_merchant

TOP_MERCHANT_LIMIT = 10


def classify_visit_frequency(transaction_count: int) -> str:
    """Map an absolute visit count to a frequency class."""
    if transaction_count >= 20:
        return "daily"
    if transaction_count >= 4:
        return "weekly"
    return "monthly"


def aggregate_merchants(transactions: List[Transaction]) -> List[MerchantPattern]:
    """
    Summarize spending per merchant.

    Args:
        transactions: Transactions to aggregate

    Returns:
        MerchantPattern list sorted by total spent, highest first
    """
    patterns = []

    for name, group in group_by_merchant(transactions).items():
        total = sum(txn.amount for txn in group)
        count = len(group)
        patterns.append(MerchantPattern(
            name=name,
            category=group[0].category,
            average_amount=total / count,
            frequency=classify_visit_frequency(count),
            total_spent=total,
            transaction_count=count,
            last_visit=max(txn.date for txn in group),
            trend=spending_trend(group)
        ))

    patterns.sort(key=lambda p: p.total_spent, reverse=True)
    return patterns


def top_merchants(transactions: List[Transaction], limit: int = TOP_MERCHANT_LIMIT) -> List[MerchantPattern]:
    """The ``limit`` merchants with the highest total spend."""
    return aggregate_merchants(transactions)[:limit]
