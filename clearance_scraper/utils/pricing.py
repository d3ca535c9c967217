"""
Price and discount normalization.

Storefront price text is free-form and locale-ambiguous ("$1,234.56",
"1 234,56 $", "Was $40 Now $20"). These helpers turn it into floats and
integer discount percentages without any locale configuration.
"""
import math
import re
from typing import List, Optional

_NON_NUMERIC = re.compile(r"[^0-9.,]")
_PRICE_TOKEN = re.compile(r"\d+(?:[.,]\d+)*")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_COMMA_THOUSANDS = re.compile(r"\d{1,3}(?:,\d{3})+")


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Parse a single price string into a float.

    When both "." and "," appear, the rightmost one is the decimal point and
    the other is dropped as a thousands separator. A lone "," is a decimal
    comma ("19,99") unless every comma is followed by exactly three digits
    ("1,234" or "1,234,567"), which reads as thousands grouping.

    Returns None for empty or unparseable input.
    """
    if not text:
        return None

    cleaned = _NON_NUMERIC.sub("", str(text))
    if not cleaned:
        return None

    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(".") > cleaned.rfind(","):
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        if _COMMA_THOUSANDS.fullmatch(cleaned):
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".", 1)

    # Lenient prefix parse: "1.234.56" reads as 1.234
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None

    value = float(match.group())
    return value if math.isfinite(value) else None


def extract_prices_from_text(text: Optional[str]) -> List[float]:
    """Find every number in ``text`` and parse each one, in order of appearance."""
    if not text:
        return []
    prices = []
    for token in _PRICE_TOKEN.findall(str(text)):
        value = parse_price(token)
        if value is not None:
            prices.append(value)
    return prices


def compute_discount_pct(regular: Optional[float], sale: Optional[float]) -> Optional[int]:
    """
    Compute the whole-number discount of ``sale`` relative to ``regular``.

    None when a price is missing or non-positive, or when the sale price is
    not below the regular price. Rounds half up.
    """
    if regular is None or sale is None:
        return None
    if regular <= 0 or sale <= 0:
        return None
    if sale >= regular:
        return None
    return int(math.floor(100 * (regular - sale) / regular + 0.5))


def meets_discount_threshold(discount_pct: Optional[int], threshold: int = 50) -> bool:
    """Inclusive discount filter: a missing discount never qualifies."""
    return discount_pct is not None and discount_pct >= threshold
