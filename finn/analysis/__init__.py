"""Heuristic expense analysis."""
from .models import (
    Transaction,
    MerchantPattern,
    RecurringExpense,
    SeasonalPattern,
    DataAnomaly,
    ExpenseInsights,
    LifestyleProfile,
    ExpenseMetadata,
    AnalysisResult,
    CATEGORIES,
    ESSENTIAL_CATEGORIES,
)
from .normalizer import parse_transactions
from .categories import KeywordClassifier, classify
from .assembler import ExpenseAnalyzer, analyze_transactions

__all__ = [
    "Transaction",
    "MerchantPattern",
    "RecurringExpense",
    "SeasonalPattern",
    "DataAnomaly",
    "ExpenseInsights",
    "LifestyleProfile",
    "ExpenseMetadata",
    "AnalysisResult",
    "CATEGORIES",
    "ESSENTIAL_CATEGORIES",
    "parse_transactions",
    "KeywordClassifier",
    "classify",
    "ExpenseAnalyzer",
    "analyze_transactions",
]
