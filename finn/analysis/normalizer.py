"""Record normalizer: raw delimited text to typed transactions."""
import math
import re
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from .models import Transaction
from .categories import classify
from finn.utils.exceptions import NoValidTransactionsError
from finn.utils.logger import get_logger

logger = get_logger()

HEADER_TOKENS = ("date", "amount", "description")
DEFAULT_DESCRIPTION = "Transaction"

FIELD_SPLIT = re.compile(r"[,\t]")
SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")
CURRENCY_CHARS = re.compile(r"[$¥,]")
DATE_SHAPE = re.compile(r"\d{1,4}[-/]\d{1,2}[-/]\d{1,4}")

# ISO first, then month-first (US exports), then day-first
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%m/%d/%y",
    "%d/%m/%y",
    "%m-%d-%y",
    "%d-%m-%y",
)


def has_header(first_line: str) -> bool:
    """Return True if the line names a header column and carries no amount."""
    lowered = first_line.lower()
    if not any(token in lowered for token in HEADER_TOKENS):
        return False
    return all(parse_amount(part) is None for part in split_fields(first_line))


def split_fields(line: str) -> List[str]:
    """Split a line on comma/tab, trimming whitespace and one surrounding quote."""
    return [SURROUNDING_QUOTES.sub("", part.strip()) for part in FIELD_SPLIT.split(line)]


def parse_amount(token: str) -> Optional[float]:
    """
    Parse a money token.

    Args:
        token: Field text, possibly with ``$``, ``¥`` or thousands separators

    Returns:
        The signed value, or None when the token is not a finite non-zero number
    """
    cleaned = CURRENCY_CHARS.sub("", token).strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value) or value == 0:
        return None
    return value


def is_numeric(token: str) -> bool:
    """True if the token parses as a number after currency cleanup."""
    cleaned = CURRENCY_CHARS.sub("", token).strip()
    try:
        float(cleaned)
    except ValueError:
        return False
    return True


def parse_date(text: str) -> Optional[date]:
    """Parse a date-shaped string, trying the known formats in order."""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_line(line: str) -> Optional[Tuple[float, Optional[str], Optional[str]]]:
    """
    Extract ``(amount, date_text, description)`` from one line.

    The last numeric field is the amount, the last date-shaped field is the
    date, and the first remaining field longer than three characters is the
    description.

    Returns:
        None when the line has fewer than two fields or no valid amount
    """
    parts = split_fields(line)
    if len(parts) < 2:
        return None

    amount = None
    date_text = None
    description = None

    for part in parts:
        value = parse_amount(part)
        if value is not None:
            amount = abs(value)

        match = DATE_SHAPE.search(part)
        if match:
            date_text = match.group(0)
            continue

        if description is None and not is_numeric(part) and len(part) > 3:
            description = part

    if amount is None:
        return None
    return amount, date_text, description


def parse_transactions(
    text: str,
    today: Optional[date] = None,
    classifier: Optional[Callable[[str], str]] = None
) -> List[Transaction]:
    """
    Parse raw file text into transactions.

    Args:
        text: Comma- or tab-delimited content, optional header row
        today: Date used for rows whose date is missing or unparseable
        classifier: Description -> category function (keyword table by default)

    Returns:
        List of Transaction objects in file order

    Raises:
        NoValidTransactionsError: If no line yields a valid amount
    """
    today = today or date.today()
    classifier = classifier or classify

    lines = [line for line in text.splitlines() if line.strip()]
    if lines and has_header(lines[0]):
        lines = lines[1:]

    transactions = []
    skipped = 0
    defaulted_dates = 0

    for line in lines:
        parsed = parse_line(line)
        if parsed is None:
            skipped += 1
            logger.debug(f"Skipping line without amount: {line[:80]!r}")
            continue

        amount, date_text, description = parsed
        txn_date = parse_date(date_text) if date_text else None
        if txn_date is None:
            txn_date = today
            defaulted_dates += 1

        description = description or DEFAULT_DESCRIPTION
        transactions.append(Transaction(
            date=txn_date,
            description=description,
            amount=amount,
            category=classifier(description)
        ))

    if not transactions:
        raise NoValidTransactionsError("No valid transactions found")

    logger.info(
        f"Parsed {len(transactions)} transactions "
        f"({skipped} lines skipped, {defaulted_dates} dates defaulted)"
    )
    return transactions
