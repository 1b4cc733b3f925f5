"""Shared helpers over transaction lists."""
import functools
import re
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from .models import Transaction

DAYS_PER_MONTH = 30

# ASCII keywords this short only match at the start of a word ("rent" vs "parent")
SHORT_KEYWORD_LENGTH = 4


def month_span(transactions: List[Transaction]) -> float:
    """
    Observed date range in months, floored at one month.

    Args:
        transactions: Transactions to measure

    Returns:
        ``max(days / 30, 1)``; 1.0 for an empty list
    """
    if not transactions:
        return 1.0

    dates = [txn.date for txn in transactions]
    days = (max(dates) - min(dates)).days
    return max(days / DAYS_PER_MONTH, 1.0)


def group_by_merchant(transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
    """Group transactions by merchant key, keeping first-seen order."""
    groups: Dict[str, List[Transaction]] = OrderedDict()
    for txn in transactions:
        groups.setdefault(txn.merchant_key, []).append(txn)
    return groups


def mean(values: List[float]) -> float:
    """Arithmetic mean, 0.0 for no values."""
    return sum(values) / len(values) if values else 0.0


def contains_any(text: str, keywords) -> bool:
    """Case-insensitive match against a keyword list (see ``keyword_pattern``)."""
    pattern = keyword_pattern(tuple(keywords))
    return bool(pattern and pattern.search((text or "").lower()))


@functools.lru_cache(maxsize=None)
def keyword_pattern(keywords: Tuple[str, ...]) -> Optional[re.Pattern]:
    """
    Compile a keyword list into one pattern over lowercased text.

    Keywords match as substrings, except short ASCII words, which must start
    a word. Returns None for an empty list.
    """
    parts = []
    for keyword in keywords:
        escaped = re.escape(keyword.lower())
        if keyword.isascii() and keyword.isalpha() and len(keyword) <= SHORT_KEYWORD_LENGTH:
            escaped = r"\b" + escaped
        parts.append(escaped)
    return re.compile("|".join(parts)) if parts else None
