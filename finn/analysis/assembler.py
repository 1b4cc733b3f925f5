"""Metadata assembly: runs every analysis pass and builds ExpenseMetadata."""
import concurrent.futures
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from .anomalies import detect_anomalies
from .categories import category_totals
from .lifestyle import infer_insights, infer_lifestyle
from .merchants import TOP_MERCHANT_LIMIT, top_merchants
from .models import AnalysisResult, ExpenseInsights, ExpenseMetadata, Transaction
from .recurrence import detect_recurring, mark_recurring
from .seasonal import detect_seasonal_patterns, spending_trend
from .timeline import month_span
from finn.utils.exceptions import NoValidTransactionsError
from finn.utils.logger import get_logger

logger = get_logger()


class ExpenseAnalyzer:
    """Combines the independent analysis passes into one summary."""

    def __init__(self, max_workers: int = 1, top_merchant_limit: int = TOP_MERCHANT_LIMIT):
        """
        Initialize analyzer.

        Args:
            max_workers: Thread pool size for the independent passes (1 runs inline)
            top_merchant_limit: Number of merchants kept in the summary
        """
        self.max_workers = max_workers
        self.top_merchant_limit = top_merchant_limit

    def analyze(self, transactions: List[Transaction]) -> AnalysisResult:
        """
        Analyze a transaction list.

        Args:
            transactions: Normalized transactions

        Returns:
            AnalysisResult with recurring-annotated transactions and metadata

        Raises:
            NoValidTransactionsError: If the list is empty
        """
        if not transactions:
            raise NoValidTransactionsError("Cannot analyze an empty transaction list")

        passes: Dict[str, Callable] = {
            "merchants": lambda: top_merchants(transactions, self.top_merchant_limit),
            "recurring": lambda: detect_recurring(transactions),
            "annotated": lambda: mark_recurring(transactions),
            "seasonal": lambda: detect_seasonal_patterns(transactions),
            "trend": lambda: spending_trend(transactions),
            "anomalies": lambda: detect_anomalies(transactions),
        }
        outputs = self._run_passes(passes)

        insights = infer_insights(transactions, outputs["recurring"])
        metadata = self._assemble(transactions, outputs, insights)

        logger.info(
            f"Analyzed {metadata.transaction_count} transactions: "
            f"total {metadata.total_expenses:.2f}, "
            f"{len(metadata.recurring_expenses)} recurring, "
            f"{len(metadata.anomalies)} anomalies"
        )

        return AnalysisResult(transactions=outputs["annotated"], metadata=metadata)

    def refine(self, result: AnalysisResult, insights: ExpenseInsights) -> AnalysisResult:
        """
        Replace the insights block and recompute the lifestyle profile from it.

        Args:
            result: A previous analysis
            insights: Insights from another source (e.g. the LLM)

        Returns:
            New AnalysisResult; the input is not modified
        """
        lifestyle = infer_lifestyle(result.transactions, insights)
        metadata = replace(result.metadata, insights=insights, lifestyle=lifestyle)
        return AnalysisResult(transactions=result.transactions, metadata=metadata)

    def _run_passes(self, passes: Dict[str, Callable]) -> Dict[str, object]:
        """Run passes inline or fanned out on a thread pool."""
        if self.max_workers <= 1:
            return {name: func() for name, func in passes.items()}

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {name: executor.submit(func) for name, func in passes.items()}
            return {name: future.result() for name, future in futures.items()}

    @staticmethod
    def _assemble(
        transactions: List[Transaction],
        outputs: Dict[str, object],
        insights: ExpenseInsights
    ) -> ExpenseMetadata:
        total = sum(txn.amount for txn in transactions)
        span = month_span(transactions)
        dates = [txn.date for txn in transactions]
        anomalies = outputs["anomalies"]

        return ExpenseMetadata(
            total_expenses=total,
            transaction_count=len(transactions),
            period_start=min(dates),
            period_end=max(dates),
            month_span=span,
            category_breakdown=category_totals(transactions),
            top_merchants=outputs["merchants"],
            recurring_expenses=outputs["recurring"],
            average_monthly_spend=total / span,
            seasonal_patterns=outputs["seasonal"],
            spending_trend=outputs["trend"],
            anomalies=anomalies,
            missing_data=[a.description for a in anomalies if a.type == "missing-data"],
            insights=insights,
            lifestyle=infer_lifestyle(transactions, insights)
        )


def analyze_transactions(transactions: List[Transaction], max_workers: Optional[int] = None) -> AnalysisResult:
    """Analyze with a default ExpenseAnalyzer."""
    return ExpenseAnalyzer(max_workers=max_workers or 1).analyze(transactions)
