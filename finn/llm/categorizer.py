"""LLM-assisted categorization and insight assessment."""
import json
import re
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .results import Ok, ParseError
from .vendor_cache import VendorCache
from finn.analysis.categories import KeywordClassifier, get_classifier
from finn.analysis.models import CATEGORIES, ExpenseInsights, ExpenseMetadata, Transaction
from finn.utils.exceptions import LLMError, NetworkError
from finn.utils.logger import get_logger

logger = get_logger()

MAX_PROMPT_TRANSACTIONS = 300
SAMPLE_TRANSACTIONS = 50


class CategorizedTransaction(BaseModel):
    """Pydantic schema for one categorized record."""
    index: int = Field(description="Index of the input transaction")
    category: str = Field(description="Category name")
    merchantName: Optional[str] = Field(default=None, description="Clean merchant name")


class CategorizationResponse(BaseModel):
    """Pydantic schema for the categorization response."""
    transactions: List[CategorizedTransaction]


class InsightsResponse(BaseModel):
    """Pydantic schema for the insights response; absent fields keep heuristic values."""
    diningOutFrequency: Optional[str] = None
    hasKids: Optional[bool] = None
    hasDebt: Optional[bool] = None
    estimatedIncome: Optional[float] = None
    savingsRate: Optional[float] = None
    lifestyle: Optional[str] = None
    transportMode: Optional[str] = None
    location: Optional[str] = None
    subscriptionCount: Optional[int] = None
    emergencyFundMonths: Optional[float] = None


INSIGHT_FIELDS = {
    "diningOutFrequency": "dining_out_frequency",
    "hasKids": "has_kids",
    "hasDebt": "has_debt",
    "estimatedIncome": "estimated_income",
    "savingsRate": "savings_rate",
    "lifestyle": "lifestyle",
    "transportMode": "transport_mode",
    "location": "location",
    "subscriptionCount": "subscription_count",
    "emergencyFundMonths": "emergency_fund_months",
}


def clean_response_text(response_text: str) -> str:
    """Strip markdown fences, smart quotes and trailing commas around a JSON payload."""
    cleaned = response_text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned
        if cleaned.startswith("json"):
            cleaned = cleaned[4:].strip()

    cleaned = cleaned.replace("“", '"').replace("”", '"')
    cleaned = re.sub(r",\s*([\]}])", r"\1", cleaned)

    # Models sometimes wrap the JSON in prose
    json_match = re.search(r"\{.*\}|\[.*\]", cleaned, re.DOTALL)
    if json_match:
        cleaned = json_match.group(0)

    return cleaned


class LLMCategorizer:
    """Refines heuristic results with Gemini, falling back per record."""

    def __init__(self, client, vendor_cache: Optional[VendorCache] = None,
                 classifier: Optional[KeywordClassifier] = None, json_mode: bool = True):
        """
        Initialize categorizer.

        Args:
            client: Object with ``generate(prompt, json_mode=True) -> str``
            vendor_cache: Learned merchant categories (optional)
            classifier: Keyword fallback classifier
            json_mode: Request JSON-typed responses from the model
        """
        self.client = client
        self.vendor_cache = vendor_cache
        self.classifier = classifier or get_classifier()
        self.json_mode = json_mode

    def categorize(self, transactions: List[Transaction], profile_id: str) -> Union[Ok, ParseError]:
        """
        Categorize transactions with the LLM.

        Args:
            transactions: Normalized transactions
            profile_id: Profile whose vendor cache is consulted and updated

        Returns:
            Ok with recategorized copies of the transactions, or ParseError
        """
        batch = transactions[:MAX_PROMPT_TRANSACTIONS]
        prompt = self._build_categorization_prompt(batch)

        raw = self._call(prompt)
        if isinstance(raw, ParseError):
            return raw

        try:
            data = json.loads(clean_response_text(raw), strict=False)
            if isinstance(data, list):
                data = {"transactions": data}
            validated = CategorizationResponse(**data)
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Categorization response unusable, using keyword fallback: {e}")
            logger.debug(f"Response text: {raw[:500]}")
            return ParseError(raw_text=raw, reason=f"Invalid categorization response: {e}")

        suggestions = {item.index: item for item in validated.transactions}
        result = [
            self._apply(txn, suggestions.get(index), profile_id)
            for index, txn in enumerate(transactions)
        ]

        logger.info(f"LLM categorized {len(suggestions)} of {len(transactions)} transactions")
        return Ok(result)

    def assess_insights(self, metadata: ExpenseMetadata,
                        transactions: Optional[List[Transaction]] = None) -> Union[Ok, ParseError]:
        """
        Ask the LLM for the insights block.

        Args:
            metadata: Heuristic metadata used as context and as default values
            transactions: Optional sample for context

        Returns:
            Ok with ExpenseInsights, or ParseError
        """
        prompt = self._build_insights_prompt(metadata, transactions or [])

        raw = self._call(prompt)
        if isinstance(raw, ParseError):
            return raw

        try:
            data = json.loads(clean_response_text(raw), strict=False)
            validated = InsightsResponse(**data)
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Insights response unusable, keeping heuristic insights: {e}")
            return ParseError(raw_text=raw, reason=f"Invalid insights response: {e}")

        updates = {
            INSIGHT_FIELDS[key]: value
            for key, value in validated.model_dump().items()
            if value is not None
        }
        return Ok(replace(metadata.insights, **updates))

    def _call(self, prompt: str) -> Union[str, ParseError]:
        try:
            return self.client.generate(prompt, json_mode=self.json_mode)
        except (LLMError, NetworkError) as e:
            logger.warning(f"LLM call failed: {e}")
            return ParseError(raw_text="", reason=str(e))

    def _apply(self, txn: Transaction, suggestion: Optional[CategorizedTransaction],
               profile_id: str) -> Transaction:
        """Pick the category for one record: LLM, then cache, then keywords."""
        merchant = txn.merchant_name
        if suggestion is not None and suggestion.merchantName:
            merchant = suggestion.merchantName.strip() or merchant

        key = merchant or txn.description

        if suggestion is not None and suggestion.category in CATEGORIES:
            if self.vendor_cache:
                self.vendor_cache.add_mapping(profile_id, key, suggestion.category)
            return replace(txn, category=suggestion.category, merchant_name=merchant)

        if suggestion is not None:
            logger.debug(f"Invalid category '{suggestion.category}' for '{txn.description}'")

        category = None
        if self.vendor_cache:
            category = self.vendor_cache.lookup(profile_id, key)
        if category is None:
            category = self.classifier.classify(txn.description)

        return replace(txn, category=category, merchant_name=merchant)

    @staticmethod
    def _build_categorization_prompt(transactions: List[Transaction]) -> str:
        records = [
            {
                "index": index,
                "date": txn.date.isoformat(),
                "description": txn.description,
                "amount": txn.amount,
            }
            for index, txn in enumerate(transactions)
        ]
        return f"""You are a financial categorization expert for Chinese and international transactions.

Transactions to categorize:
{json.dumps(records, ensure_ascii=False, indent=2)}

For each transaction:
1. Assign the BEST category based on the description
2. Extract a clean merchant name (remove payment method info)

Categories (use EXACTLY these names):
{json.dumps(list(CATEGORIES), ensure_ascii=False, indent=2)}

Return ONLY a valid JSON object in this format:
{{
  "transactions": [
    {{"index": 0, "category": "...", "merchantName": "..."}}
  ]
}}

Do not include any explanations or markdown formatting, just the JSON object."""

    @staticmethod
    def _build_insights_prompt(metadata: ExpenseMetadata, transactions: List[Transaction]) -> str:
        sample = [
            {"category": txn.category, "merchant": txn.merchant_key, "amount": txn.amount}
            for txn in transactions[:SAMPLE_TRANSACTIONS]
        ]
        context: Dict[str, Any] = {
            "averageMonthlySpend": round(metadata.average_monthly_spend, 2),
            "categoryBreakdown": {k: round(v, 2) for k, v in metadata.category_breakdown.items()},
            "recurringExpenses": [item.to_dict() for item in metadata.recurring_expenses],
            "heuristicInsights": metadata.insights.to_dict(),
        }
        return f"""You are a financial analyst. Based on these spending patterns, assess lifestyle and financial health.

Spending summary:
{json.dumps(context, ensure_ascii=False, indent=2)}

Sample transactions:
{json.dumps(sample, ensure_ascii=False, indent=2)}

Determine:
1. diningOutFrequency: rarely (< 5 per month) | occasionally (5-15) | frequently (15-30) | very_frequently (> 30)
2. hasKids: school, childcare or kids items present
3. hasDebt: loan payments, credit card repayments or installments present
4. transportMode: public | car | mixed
5. subscriptionCount: number of recurring subscription services
6. lifestyle: frugal | moderate | comfortable | luxury
7. estimatedIncome: monthly income estimate
8. savingsRate: 0-100 percentage
9. emergencyFundMonths: 0-6 typically
10. location: city name if detectable from merchants

Return ONLY a valid JSON object:
{{
  "diningOutFrequency": "...",
  "hasKids": false,
  "hasDebt": false,
  "transportMode": "...",
  "subscriptionCount": 0,
  "lifestyle": "...",
  "estimatedIncome": 0,
  "savingsRate": 0,
  "emergencyFundMonths": 0,
  "location": null
}}"""
