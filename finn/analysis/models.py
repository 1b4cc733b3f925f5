"""Data models for expense analysis."""
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date
from typing import Any, Dict, List, Optional


CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Housing",
    "Shopping",
    "Bills & Utilities",
    "Entertainment",
    "Healthcare",
    "Education",
    "Other",
)

DEFAULT_CATEGORY = "Other"

# Insurance is not a classifier label but LLM categorization may produce it
ESSENTIAL_CATEGORIES = frozenset({
    "Housing",
    "Bills & Utilities",
    "Healthcare",
    "Insurance",
    "Transportation",
})

RECURRENCE_FREQUENCIES = ("weekly", "biweekly", "monthly", "quarterly", "annual")

ANOMALY_TYPES = ("unusual-spending", "missing-data", "duplicate", "category-shift", "income-change")


def is_essential_category(category: str) -> bool:
    """Return True for non-discretionary categories."""
    return category in ESSENTIAL_CATEGORIES


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _serialize(value: Any) -> Any:
    """Convert dataclasses, dates and containers into JSON-ready values."""
    if is_dataclass(value):
        return {_camel(f.name): _serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


class Serializable:
    """Mixin giving dataclasses a camelCase ``to_dict``."""

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass
class Transaction(Serializable):
    """Transaction data."""
    date: date
    description: str
    amount: float  # always non-negative
    category: str = DEFAULT_CATEGORY
    merchant_name: Optional[str] = None
    is_recurring: bool = False

    @property
    def merchant_key(self) -> str:
        """Merchant name when known, raw description otherwise."""
        return self.merchant_name or self.description


@dataclass
class MerchantPattern(Serializable):
    """Spending summary for one merchant."""
    name: str
    category: str
    average_amount: float
    frequency: str  # daily | weekly | monthly
    total_spent: float
    transaction_count: int
    last_visit: date
    trend: str  # increasing | stable | decreasing


@dataclass
class RecurringExpense(Serializable):
    """A repeating bill or subscription."""
    name: str
    category: str
    amount: float
    frequency: str
    next_due_date: date
    is_essential: bool
    can_optimize: bool


@dataclass
class SeasonalPattern(Serializable):
    """A calendar month with above-average spending."""
    period: str
    year: int
    month: int
    average_spend: float
    variance: float
    categories: List[str] = field(default_factory=list)


@dataclass
class DataAnomaly(Serializable):
    """An outlier transaction or a gap in the data."""
    date: date
    type: str
    description: str
    amount: Optional[float] = None
    resolved: bool = False


@dataclass
class ExpenseInsights(Serializable):
    """Insights block consumed by budget generation."""
    dining_out_frequency: str = "occasionally"
    has_kids: bool = False
    has_debt: bool = False
    estimated_income: float = 0.0
    savings_rate: float = 20.0
    lifestyle: str = "moderate"
    transport_mode: str = "mixed"
    location: Optional[str] = None
    subscription_count: int = 0
    emergency_fund_months: float = 0.0


@dataclass
class LifestyleProfile(Serializable):
    """Lifestyle signals inferred from transactions."""
    has_kids: bool
    has_pets: bool
    has_vehicle: bool
    vehicle_type: Optional[str]
    home_ownership: str
    transport_mode: str
    travel_frequency: str
    health_spending: str
    fitness_spending: float
    shopping_behavior: str
    spending_personality: str
    impulse_spending_score: float
    life_stage: str


@dataclass
class ExpenseMetadata(Serializable):
    """Summary of one analysis run."""
    total_expenses: float
    transaction_count: int
    period_start: date
    period_end: date
    month_span: float
    category_breakdown: Dict[str, float]
    top_merchants: List[MerchantPattern]
    recurring_expenses: List[RecurringExpense]
    average_monthly_spend: float
    seasonal_patterns: List[SeasonalPattern]
    spending_trend: str
    anomalies: List[DataAnomaly]
    missing_data: List[str]
    insights: ExpenseInsights
    lifestyle: LifestyleProfile


@dataclass
class AnalysisResult(Serializable):
    """Annotated transactions plus their metadata."""
    transactions: List[Transaction]
    metadata: ExpenseMetadata
