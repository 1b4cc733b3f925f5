"""Lifestyle and insight inference.

Every signal here is a keyword or counting heuristic over the transaction
list. They stand in for the LLM assessment when it is unavailable and seed
the lifestyle profile when it is.
"""
from collections import Counter
from typing import Dict, List, Optional

from .models import (
    ExpenseInsights,
    LifestyleProfile,
    RecurringExpense,
    Transaction,
    is_essential_category,
)
from .timeline import contains_any, month_span

KIDS_KEYWORDS = ("school", "daycare", "kids", "childcare", "kindergarten",
                 "学校", "学费", "托儿所", "幼儿园", "儿童", "宝宝")
PET_KEYWORDS = ("pet", "vet", "宠物")
PET_MERCHANTS = ("petco", "petsmart")
FUEL_KEYWORDS = ("gas", "fuel", "加油")
FITNESS_KEYWORDS = ("gym", "fitness", "yoga", "健身", "瑜伽")
TRAVEL_KEYWORDS = ("hotel", "flight", "airbnb", "lodging", "酒店", "机票")
DEBT_KEYWORDS = ("loan", "credit card payment", "installment", "贷款", "信用卡还款", "分期")
PUBLIC_TRANSIT_KEYWORDS = ("subway", "metro", "bus fare", "bus ticket", "transit", "地铁", "公交")
CAR_KEYWORDS = ("gas", "fuel", "parking", "toll", "加油", "停车")
RENT_KEYWORDS = ("rent", "房租")
MORTGAGE_KEYWORDS = ("mortgage", "home loan", "房贷")

CITIES: Dict[str, str] = {
    "beijing": "Beijing", "北京": "Beijing",
    "shanghai": "Shanghai", "上海": "Shanghai",
    "shenzhen": "Shenzhen", "深圳": "Shenzhen",
    "guangzhou": "Guangzhou", "广州": "Guangzhou",
    "hangzhou": "Hangzhou", "杭州": "Hangzhou",
    "chengdu": "Chengdu", "成都": "Chengdu",
    "new york": "New York", "san francisco": "San Francisco",
    "los angeles": "Los Angeles", "seattle": "Seattle",
    "london": "London", "singapore": "Singapore",
}

IMPULSE_MAX_AMOUNT = 100
IMPULSE_DAILY_COUNT = 3
INCOME_MULTIPLIERS = {"frugal": 2.0, "luxury": 1.3}
DEFAULT_INCOME_MULTIPLIER = 1.6
SUBSCRIPTION_FREQUENCIES = ("weekly", "biweekly", "monthly")


def _matching(transactions: List[Transaction], keywords) -> List[Transaction]:
    return [txn for txn in transactions if contains_any(txn.description, keywords)]


def average_monthly_spend(transactions: List[Transaction]) -> float:
    """Total spend divided by the month span."""
    return sum(txn.amount for txn in transactions) / month_span(transactions)


def detect_kids(transactions: List[Transaction]) -> bool:
    return bool(_matching(transactions, KIDS_KEYWORDS))


def detect_pets(transactions: List[Transaction]) -> bool:
    return any(
        contains_any(txn.description, PET_KEYWORDS) or contains_any(txn.merchant_name, PET_MERCHANTS)
        for txn in transactions
    )


def detect_vehicle(transactions: List[Transaction]) -> bool:
    fuel = [
        txn for txn in _matching(transactions, FUEL_KEYWORDS)
        if txn.category == "Transportation"
    ]
    return len(fuel) > 2


def detect_debt(transactions: List[Transaction]) -> bool:
    return bool(_matching(transactions, DEBT_KEYWORDS))


def health_spending_level(transactions: List[Transaction]) -> str:
    count = sum(1 for txn in transactions if txn.category == "Healthcare")
    if count == 0:
        return "minimal"
    if count < 5:
        return "regular"
    return "high"


def fitness_spending(transactions: List[Transaction]) -> float:
    """Monthly spend on gym, fitness and yoga."""
    return sum(txn.amount for txn in _matching(transactions, FITNESS_KEYWORDS)) / month_span(transactions)


def travel_frequency(transactions: List[Transaction]) -> str:
    count = len(_matching(transactions, TRAVEL_KEYWORDS))
    if count == 0:
        return "never"
    if count < 2:
        return "rarely"
    if count < 5:
        return "occasionally"
    return "frequently"


def spending_personality(monthly_spend: float, income: float) -> str:
    ratio = monthly_spend / max(income, 1)
    if ratio < 0.6:
        return "frugal"
    if ratio < 0.8:
        return "balanced"
    if ratio < 0.95:
        return "generous"
    return "impulsive"


def impulse_spending_score(transactions: List[Transaction]) -> float:
    """
    Share of active days with more than three small discretionary purchases.

    Returns:
        Score between 0 and 100
    """
    per_day = Counter()
    active_days = set()

    for txn in transactions:
        active_days.add(txn.date)
        if not is_essential_category(txn.category) and txn.amount < IMPULSE_MAX_AMOUNT:
            per_day[txn.date] += 1

    if not active_days:
        return 0.0

    impulse_days = sum(1 for count in per_day.values() if count > IMPULSE_DAILY_COUNT)
    return min(impulse_days / len(active_days) * 100, 100.0)


def infer_life_stage(monthly_spend: float, has_kids: bool, has_debt: bool) -> str:
    """
    Guess the life stage from spend level and household signals.

    The low-spend branches are checked before ``has_kids``, so a low-spending
    family is reported as student or early-career.
    """
    if monthly_spend < 2000 and has_debt:
        return "student"
    if monthly_spend < 4000 and not has_kids:
        return "early-career"
    if has_kids:
        return "family"
    if monthly_spend > 6000:
        return "mid-career"
    return "early-career"


def home_ownership(transactions: List[Transaction]) -> str:
    if _matching(transactions, MORTGAGE_KEYWORDS):
        return "own"
    has_rent = any(
        contains_any(txn.description, RENT_KEYWORDS)
        or (txn.category == "Housing" and 500 < txn.amount < 5000)
        for txn in transactions
    )
    return "rent" if has_rent else "other"


def shopping_behavior(transactions: List[Transaction]) -> str:
    shopping = [txn.amount for txn in transactions if txn.category == "Shopping"]
    if len(shopping) < 5:
        return "necessity"
    average = sum(shopping) / len(shopping)
    if average < 50:
        return "occasional"
    if average < 200:
        return "frequent"
    return "luxury"


def dining_out_frequency(transactions: List[Transaction]) -> str:
    per_month = sum(1 for txn in transactions if txn.category == "Food & Dining") / month_span(transactions)
    if per_month < 5:
        return "rarely"
    if per_month < 15:
        return "occasionally"
    if per_month < 30:
        return "frequently"
    return "very_frequently"


def transport_mode(transactions: List[Transaction]) -> str:
    uses_public = bool(_matching(transactions, PUBLIC_TRANSIT_KEYWORDS))
    uses_car = bool(_matching(transactions, CAR_KEYWORDS))
    if uses_car and not uses_public:
        return "car"
    if uses_public and not uses_car:
        return "public"
    return "mixed"


def lifestyle_class(monthly_spend: float) -> str:
    if monthly_spend < 3000:
        return "frugal"
    if monthly_spend < 6000:
        return "moderate"
    return "comfortable"


def estimate_income(monthly_spend: float, lifestyle: str) -> float:
    return monthly_spend * INCOME_MULTIPLIERS.get(lifestyle, DEFAULT_INCOME_MULTIPLIER)


def guess_location(transactions: List[Transaction]) -> Optional[str]:
    """Most frequently mentioned known city, if any."""
    hits = Counter()
    for txn in transactions:
        text = f"{txn.description} {txn.merchant_name or ''}".lower()
        for keyword, city in CITIES.items():
            if keyword in text:
                hits[city] += 1
    if not hits:
        return None
    return hits.most_common(1)[0][0]


def count_subscriptions(recurring: List[RecurringExpense]) -> int:
    return sum(
        1 for item in recurring
        if not item.is_essential and item.frequency in SUBSCRIPTION_FREQUENCIES
    )


def infer_insights(
    transactions: List[Transaction],
    recurring: Optional[List[RecurringExpense]] = None
) -> ExpenseInsights:
    """
    Build the insights block from transaction heuristics.

    Args:
        transactions: Analyzed transactions
        recurring: Detected recurring expenses, for the subscription count

    Returns:
        ExpenseInsights
    """
    monthly = average_monthly_spend(transactions)
    lifestyle = lifestyle_class(monthly)

    return ExpenseInsights(
        dining_out_frequency=dining_out_frequency(transactions),
        has_kids=detect_kids(transactions),
        has_debt=detect_debt(transactions),
        estimated_income=estimate_income(monthly, lifestyle),
        savings_rate=35.0 if lifestyle == "frugal" else 20.0,
        lifestyle=lifestyle,
        transport_mode=transport_mode(transactions),
        location=guess_location(transactions),
        subscription_count=count_subscriptions(recurring or []),
        emergency_fund_months=0.0
    )


def infer_lifestyle(transactions: List[Transaction], insights: ExpenseInsights) -> LifestyleProfile:
    """
    Derive the lifestyle profile.

    Args:
        transactions: Analyzed transactions
        insights: Insights block (heuristic or LLM-refined)

    Returns:
        LifestyleProfile
    """
    monthly = average_monthly_spend(transactions)
    has_kids = insights.has_kids or detect_kids(transactions)
    has_vehicle = detect_vehicle(transactions)

    return LifestyleProfile(
        has_kids=has_kids,
        has_pets=detect_pets(transactions),
        has_vehicle=has_vehicle,
        vehicle_type="standard" if has_vehicle else None,
        home_ownership=home_ownership(transactions),
        transport_mode=insights.transport_mode,
        travel_frequency=travel_frequency(transactions),
        health_spending=health_spending_level(transactions),
        fitness_spending=fitness_spending(transactions),
        shopping_behavior=shopping_behavior(transactions),
        spending_personality=spending_personality(monthly, insights.estimated_income),
        impulse_spending_score=impulse_spending_score(transactions),
        life_stage=infer_life_stage(monthly, has_kids, insights.has_debt)
    )
