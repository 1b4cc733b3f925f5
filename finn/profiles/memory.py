"""User memory profile built from an analysis result."""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from finn.analysis.models import AnalysisResult, ExpenseMetadata, Transaction

# Monthly estimates used when a category is absent from the data
CATEGORY_DEFAULT_SHARES = {
    "housing": ("Housing", 0.3),
    "food": ("Food & Dining", 0.15),
    "transportation": ("Transportation", 0.15),
    "entertainment": ("Entertainment", 0.05),
    "healthcare": ("Healthcare", 0.05),
    "insurance": ("Insurance", 0.05),
    "utilities": ("Bills & Utilities", 0.1),
    "shopping": ("Shopping", 0.1),
    "education": ("Education", 0.0),
    "other": ("Other", 0.05),
}

FALLBACK_INCOME_MULTIPLIER = 1.4


def completeness_score(transactions: List[Transaction], metadata: ExpenseMetadata) -> float:
    """Score 0-100 for how much the data supports the profile."""
    score = 100.0

    if not metadata.insights.location:
        score -= 5
    if len(transactions) < 50:
        score -= 20
    if len(transactions) < 100:
        score -= 10

    categories = {txn.category for txn in transactions}
    if "Housing" not in categories:
        score -= 10
    if "Food & Dining" not in categories:
        score -= 10

    if transactions:
        missing_merchants = sum(1 for txn in transactions if not txn.merchant_name)
        score -= missing_merchants / len(transactions) * 20

    return max(score, 0.0)


def confidence_level(transaction_count: int) -> str:
    if transaction_count > 100:
        return "high"
    if transaction_count > 50:
        return "medium"
    return "low"


def savings_consistency(savings_rate: float) -> str:
    if savings_rate > 20:
        return "consistent"
    if savings_rate > 10:
        return "irregular"
    return "none"


def monthly_category_breakdown(metadata: ExpenseMetadata, has_kids: bool) -> Dict[str, float]:
    """Per-category monthly averages, estimated from spend where a category is missing."""
    monthly = metadata.average_monthly_spend
    breakdown = {}
    for key, (category, share) in CATEGORY_DEFAULT_SHARES.items():
        total = metadata.category_breakdown.get(category)
        breakdown[key] = total / metadata.month_span if total else monthly * share
    if has_kids:
        breakdown["childcare"] = monthly * 0.1
    if metadata.insights.has_debt:
        breakdown["debtPayments"] = monthly * 0.15
    return breakdown


def suggest_goals(metadata: ExpenseMetadata, now: datetime) -> List[Dict[str, Any]]:
    """Emergency fund, debt and savings goals the data calls for."""
    insights = metadata.insights
    monthly = metadata.average_monthly_spend
    base_id = str(int(now.timestamp() * 1000))
    goals = []

    if insights.emergency_fund_months < 3:
        goals.append({
            "id": f"{base_id}-1",
            "type": "emergency",
            "description": "Build 3-month emergency fund",
            "targetAmount": monthly * 3,
            "targetDate": (now + timedelta(days=180)).date().isoformat(),
            "currentProgress": insights.emergency_fund_months * monthly,
            "priority": "critical",
            "isAchievable": True,
            "requiredMonthlySaving": monthly * 0.5,
        })

    if insights.has_debt:
        goals.append({
            "id": f"{base_id}-2",
            "type": "debt",
            "description": "Reduce high-interest debt",
            "targetAmount": insights.estimated_income * 0.5,
            "targetDate": (now + timedelta(days=365)).date().isoformat(),
            "currentProgress": 0,
            "priority": "high",
            "isAchievable": True,
            "requiredMonthlySaving": insights.estimated_income * 0.1,
        })

    if insights.savings_rate < 20:
        goals.append({
            "id": f"{base_id}-3",
            "type": "savings",
            "description": "Increase savings rate to 20%",
            "targetAmount": insights.estimated_income * 0.2 * 12,
            "targetDate": (now + timedelta(days=365)).date().isoformat(),
            "currentProgress": insights.savings_rate * insights.estimated_income * 0.01 * 12,
            "priority": "medium",
            "isAchievable": True,
            "requiredMonthlySaving": insights.estimated_income * 0.2,
        })

    return goals


def build_memory_profile(
    result: AnalysisResult,
    profile_id: str,
    existing: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Build the JSON-ready memory profile for one analysis.

    Args:
        result: Analysis result
        profile_id: Profile identifier
        existing: Previously stored profile, for identity and interaction history
        now: Timestamp of this update

    Returns:
        Profile dictionary
    """
    now = now or datetime.now()
    existing = existing or {}
    metadata = result.metadata
    insights = metadata.insights
    lifestyle = metadata.lifestyle
    transactions = result.transactions

    income = insights.estimated_income or metadata.average_monthly_spend * FALLBACK_INCOME_MULTIPLIER
    previous_identity = existing.get("identity", {})
    previous_context = existing.get("aiContext", {})

    return {
        "identity": {
            "userId": profile_id,
            "name": previous_identity.get("name"),
            "location": insights.location or previous_identity.get("location"),
            "familySize": 3 if lifestyle.has_kids else 1,
            "dependents": 1 if lifestyle.has_kids else 0,
            "lifeStage": lifestyle.life_stage,
        },
        "financial": {
            "monthlyIncome": income,
            "incomeSource": "salary",
            "incomeStability": "stable",
            "totalDebt": income * 3 if insights.has_debt else 0,
            "emergencyFundMonths": insights.emergency_fund_months,
        },
        "spending": {
            "averageMonthlySpend": metadata.average_monthly_spend,
            "spendingTrend": metadata.spending_trend,
            "categoryBreakdown": monthly_category_breakdown(metadata, lifestyle.has_kids),
            "topMerchants": [m.to_dict() for m in metadata.top_merchants],
            "recurringExpenses": [r.to_dict() for r in metadata.recurring_expenses],
            "seasonalPatterns": [s.to_dict() for s in metadata.seasonal_patterns],
        },
        "behavior": {
            "spendingPersonality": lifestyle.spending_personality,
            "diningOutFrequency": insights.dining_out_frequency,
            "shoppingBehavior": lifestyle.shopping_behavior,
            "subscriptionCount": insights.subscription_count,
            "impulseSpendingScore": lifestyle.impulse_spending_score,
            "savingsConsistency": savings_consistency(insights.savings_rate),
        },
        "lifestyle": lifestyle.to_dict(),
        "goals": {
            "primaryGoals": suggest_goals(metadata, now),
            "savingsTargetMonthly": income * 0.2,
            "savingsTargetPercentage": 20,
            "riskTolerance": "moderate",
        },
        "aiContext": {
            "firstInteractionDate": previous_context.get("firstInteractionDate", now.isoformat()),
            "lastUpdateDate": now.isoformat(),
            "totalInteractions": previous_context.get("totalInteractions", 0) + 1,
        },
        "dataQuality": {
            "completenessScore": completeness_score(transactions, metadata),
            "lastDataUpload": now.isoformat(),
            "dataTimeSpan": metadata.month_span,
            "missingDataPoints": list(metadata.missing_data),
            "confidenceLevel": confidence_level(len(transactions)),
            "anomalies": [a.to_dict() for a in metadata.anomalies],
        },
        "metadata": metadata.to_dict(),
    }
