"""Keyword-table category classifier.

Deterministic fallback for when LLM categorization is unavailable or returns
an unusable label. The table lives in ``resources/categories.json`` as an
ordered list of ``{"name", "keywords"}`` entries; the first category with a
matching keyword wins.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import CATEGORIES, DEFAULT_CATEGORY
from .timeline import contains_any
from finn.utils.exceptions import ConfigError
from finn.utils.logger import get_logger

logger = get_logger()

DEFAULT_CATEGORIES_PATH = Path(__file__).resolve().parent.parent / "resources" / "categories.json"


class KeywordClassifier:
    """Assigns categories by keyword match against per-category keyword lists."""

    def __init__(self, categories_path: Optional[Path] = None):
        """
        Initialize classifier.

        Args:
            categories_path: Path to categories.json (defaults to the bundled table)
        """
        self.categories_path = categories_path or DEFAULT_CATEGORIES_PATH
        self.table = self._load_table(self.categories_path)

    def classify(self, description: str) -> str:
        """
        Classify a transaction description.

        Args:
            description: Raw transaction description

        Returns:
            Category name, ``"Other"`` when no keyword matches
        """
        for name, keywords in self.table:
            if contains_any(description, keywords):
                return name
        return DEFAULT_CATEGORY

    @property
    def category_names(self) -> List[str]:
        """All category names in priority order, ending with the default."""
        return [name for name, _ in self.table] + [DEFAULT_CATEGORY]

    @staticmethod
    def _load_table(categories_path: Path) -> List[Tuple[str, Tuple[str, ...]]]:
        """Load and validate the keyword table."""
        try:
            with open(categories_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load categories: {e}")

        table = []
        for entry in data.get("categories", []):
            name = entry["name"]
            if name not in CATEGORIES:
                raise ConfigError(f"Unknown category in keyword table: {name}")
            keywords = tuple(k.lower() for k in entry.get("keywords", []) if k)
            table.append((name, keywords))

        logger.debug(f"Loaded {len(table)} keyword categories from {categories_path.name}")
        return table


_default_classifier: Optional[KeywordClassifier] = None


def get_classifier() -> KeywordClassifier:
    """Get or create the shared classifier."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = KeywordClassifier()
    return _default_classifier


def classify(description: str) -> str:
    """Classify a description with the bundled keyword table."""
    return get_classifier().classify(description)


def category_totals(transactions) -> Dict[str, float]:
    """Cumulative amount per category, in first-seen order."""
    totals: Dict[str, float] = {}
    for txn in transactions:
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount
    return totals
