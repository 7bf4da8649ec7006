"""
Deterministic (regex-based) parsers for operator input.

Covers the free-text shapes the order flow needs to interpret without any
catalog access:
- product lists ("10 bolsa 8x12 negra", "camiseta x5", "vaso")
- the idle-state heuristic that tells product text apart from a client name
- quantities and special prices typed in reply to a prompt
"""

import re
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Product List Parsing
# =============================================================================

# "10 bolsa negra", "10x bolsa negra", "10 x bolsa negra"
LEADING_QUANTITY_PATTERN = re.compile(r"^(\d+)\s*[xX]?\s+(.+)$")

# "camiseta x5", "camiseta X 5"
TRAILING_QUANTITY_PATTERN = re.compile(r"^(.+?)\s*[xX]\s*(\d+)$")


@dataclass(frozen=True)
class ParsedLine:
    """One quantity + description pair extracted from a product list."""
    quantity: int
    description: str


def parse_lines(text: str) -> list[ParsedLine]:
    """
    Split a free-text product list into quantity/description pairs.

    Each non-blank line is matched first as "<qty> [x] <description>", then as
    "<description> x <qty>", and otherwise taken whole with quantity 1.

    Examples:
        "10 bolsa 8x12 negra" -> ParsedLine(10, "bolsa 8x12 negra")
        "camiseta x5"         -> ParsedLine(5, "camiseta")
        "vaso"                -> ParsedLine(1, "vaso")
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    parsed = []
    for line in lines:
        if not line:
            continue
        match = LEADING_QUANTITY_PATTERN.match(line)
        if match:
            parsed.append(ParsedLine(int(match.group(1)), match.group(2).strip()))
            continue
        match = TRAILING_QUANTITY_PATTERN.match(line)
        if match:
            parsed.append(ParsedLine(int(match.group(2)), match.group(1).strip()))
            continue
        parsed.append(ParsedLine(1, line))
    return parsed


# =============================================================================
# Product vs Client Heuristic
# =============================================================================

DIMENSION_PATTERN = re.compile(r"\d+\s*[xX]\s*\d+")
QUANTITY_PREFIX_PATTERN = re.compile(r"^\d+\s+\S")
SIZE_CODE_PATTERN = re.compile(r"\bT\s*\d+", re.IGNORECASE)
COMPACT_CODE_PATTERN = re.compile(r"\b\d{3,4}\b")
LONG_NUMBER_PATTERN = re.compile(r"\b\d{5,}\b")

# Nouns and colors that only show up in product descriptions
PRODUCT_WORDS = (
    "bolsa", "negra", "negro", "blanca", "blanco", "rollo", "camiseta",
    "vaso", "hermetica", "opaca", "fina", "marcada", "basurera",
)
PRODUCT_WORD_PATTERN = re.compile(
    r"\b(" + "|".join(PRODUCT_WORDS) + r")\b", re.IGNORECASE
)


def looks_like_product(text: str) -> bool:
    """
    Decide whether idle-state text reads as a product rather than a client.

    True when the text has a dimension ("8x12"), starts with a quantity
    ("10 bolsa"), has a size code ("T40", "T 15"), has a bare 3-4 digit run
    with no 5+ digit run ("812" but not a phone number), or names a typical
    product word. Short ambiguous strings can misfire (a client whose name
    contains "T1" reads as a product); callers fall back to a client search
    when the product search comes back empty.
    """
    upper = (text or "").upper().strip()
    if DIMENSION_PATTERN.search(upper):
        return True
    if QUANTITY_PREFIX_PATTERN.search(upper):
        return True
    if SIZE_CODE_PATTERN.search(upper):
        return True
    if COMPACT_CODE_PATTERN.search(upper) and not LONG_NUMBER_PATTERN.search(upper):
        return True
    if PRODUCT_WORD_PATTERN.search(upper):
        return True
    return False


# =============================================================================
# Numeric Replies
# =============================================================================

LEADING_INTEGER_PATTERN = re.compile(r"^\s*(\d+)")
PRICE_PATTERN = re.compile(r"^\d+(?:\.\d+)?$|^\.\d+$")


def parse_quantity(text: str) -> Optional[int]:
    """
    Parse a positive quantity from a reply.

    Accepts a leading integer followed by anything ("12", "12 piezas").
    Returns None for zero, negatives and non-numeric text.
    """
    match = LEADING_INTEGER_PATTERN.match(text or "")
    if not match:
        return None
    quantity = int(match.group(1))
    return quantity if quantity >= 1 else None


def parse_price(text: str) -> Optional[float]:
    """
    Parse a positive unit price from a reply.

    Dollar signs, thousands separators and surrounding spaces are ignored
    ("$1,250.50" -> 1250.5). Returns None for zero, negatives and
    non-numeric text.
    """
    cleaned = re.sub(r"[,$\s]", "", text or "")
    if not PRICE_PATTERN.match(cleaned):
        return None
    price = float(cleaned)
    return price if price > 0 else None
