"""Outlier and data-gap detection."""
import statistics
from typing import List

from .models import DataAnomaly, Transaction

OUTLIER_SIGMAS = 3
MAX_GAP_DAYS = 14


def detect_outliers(transactions: List[Transaction]) -> List[DataAnomaly]:
    """Flag amounts above mean + 3 population standard deviations."""
    if not transactions:
        return []

    amounts = [txn.amount for txn in transactions]
    average = statistics.fmean(amounts)
    threshold = average + OUTLIER_SIGMAS * statistics.pstdev(amounts, average)

    return [
        DataAnomaly(
            date=txn.date,
            type="unusual-spending",
            description=f"Unusually high expense: {txn.description}",
            amount=txn.amount
        )
        for txn in transactions
        if txn.amount > threshold
    ]


def detect_gaps(transactions: List[Transaction], max_gap_days: int = MAX_GAP_DAYS) -> List[DataAnomaly]:
    """Flag stretches longer than ``max_gap_days`` without any transaction."""
    dates = sorted(txn.date for txn in transactions)
    anomalies = []

    for earlier, later in zip(dates, dates[1:]):
        gap = (later - earlier).days
        if gap > max_gap_days:
            anomalies.append(DataAnomaly(
                date=earlier,
                type="missing-data",
                description=f"Data gap of {gap} days"
            ))

    return anomalies


def detect_anomalies(transactions: List[Transaction]) -> List[DataAnomaly]:
    """
    Run all anomaly checks.

    Args:
        transactions: Transactions to inspect

    Returns:
        Unusual-spending anomalies followed by missing-data anomalies
    """
    return detect_outliers(transactions) + detect_gaps(transactions)
