"""
Text Normalization for Product Matching.

Pure functions that turn raw product text into a canonical comparable form
and expand Spanish words into their gender/number siblings.

Product descriptions in the catalog are written in uppercase with free
spacing ("BOLSA 8 X 12 NEGRA", "CAMISETA T-40"), while operators type
lowercase, accented or compact forms ("bolsa 812 negra", "t40 blanca").
Everything compared by the matcher goes through normalize() first.
"""

import re
import unicodedata

# Punctuation replaced by spaces; hyphen and slash are kept because they
# separate size codes ("T-40", "8/12")
PUNCTUATION_PATTERN = re.compile(r"[.,;:!?()\[\]{}]")

WHITESPACE_PATTERN = re.compile(r"\s+")

# Compact dimension code: 1-2 digits followed by exactly 2 digits, as a whole word
COMPACT_DIMENSION_PATTERN = re.compile(r"\b(\d{1,2})(\d{2})\b")

# Inclusive bounds for each side of an expanded dimension
DIMENSION_MIN = 4
DIMENSION_MAX = 50

# Separators tolerated between a letter and a digit ("T 40", "T-40", "T/40")
FLEXIBLE_SEPARATOR = r"[\s\-/]?"


def strip_accents(text: str) -> str:
    """Remove combining diacritical marks ("CAMIÓN" -> "CAMION", "Ñ" -> "N")."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not "\u0300" <= ch <= "\u036f")


def _expand_dimension(match: re.Match) -> str:
    first = int(match.group(1))
    second = int(match.group(2))
    if (
        DIMENSION_MIN <= first <= DIMENSION_MAX
        and DIMENSION_MIN <= second <= DIMENSION_MAX
        and second > first
    ):
        return f"{first}X{second}"
    return match.group(0)


def expand_compact_dimensions(text: str) -> str:
    """
    Rewrite compact size codes as explicit dimensions.

    "812" -> "8X12", "1216" -> "12X16". Runs that do not read as a plausible
    increasing pair inside [4, 50] are left alone ("9999", "203", "1208").
    """
    return COMPACT_DIMENSION_PATTERN.sub(_expand_dimension, text)


def normalize(text: str) -> str:
    """
    Convert raw text into its canonical comparable form.

    Uppercases, strips accents, replaces punctuation with spaces, collapses
    whitespace and expands compact dimension codes. The result is stable:
    normalize(normalize(s)) == normalize(s).

    Args:
        text: Raw user or catalog text.

    Returns:
        Canonical uppercase string.
    """
    if not text:
        return ""
    result = strip_accents(text.upper())
    result = PUNCTUATION_PATTERN.sub(" ", result)
    result = WHITESPACE_PATTERN.sub(" ", result).strip()
    return expand_compact_dimensions(result)


def tokenize(text: str) -> list[str]:
    """Normalize text and split it on whitespace."""
    return [token for token in normalize(text).split(" ") if token]


def gender_number_variants(word: str) -> list[str]:
    """
    Generate the Spanish gender/number siblings of a token.

    The original word always comes first, followed by the masculine/feminine
    swap and the singular/plural swap, without duplicates:

        "BLANCA" -> ["BLANCA", "BLANCO", "BLANCAS"]
        "NEGROS" -> ["NEGROS", "NEGRAS", "NEGRO"]

    Words ending in "IA" keep their gender ("GARANTIA" never becomes
    "GARANTIO") and double-S endings are never singularized.

    Args:
        word: An already normalized (uppercase) token.

    Returns:
        Ordered list of distinct variants, the original first.
    """
    variants = [word]

    def add(candidate: str) -> None:
        if candidate and candidate not in variants:
            variants.append(candidate)

    if word.endswith("A") and not word.endswith("IA"):
        add(word[:-1] + "O")
    if word.endswith("O"):
        add(word[:-1] + "A")
    if word.endswith("AS"):
        add(word[:-2] + "OS")
    if word.endswith("OS"):
        add(word[:-2] + "AS")

    if word.endswith("S") and len(word) > 2 and not word.endswith("SS"):
        add(word[:-1])
    if not word.endswith("S"):
        add(word + "S")

    return variants


def _flexible_pattern(needle: str) -> str:
    parts = []
    for index, char in enumerate(needle):
        if index > 0:
            prev = needle[index - 1]
            letter_to_digit = prev.isalpha() and char.isdigit()
            digit_to_letter = prev.isdigit() and char.isalpha()
            if letter_to_digit or digit_to_letter:
                parts.append(FLEXIBLE_SEPARATOR)
        parts.append(re.escape(char))
    return "".join(parts)


def flexible_contains(haystack: str, needle: str) -> bool:
    """
    Check whether needle occurs in haystack, tolerating separators.

    An optional space, hyphen or slash is allowed at every letter/digit
    transition inside needle, so "T40" matches "T 40", "T-40" and "T/40",
    and "8X12" matches "8 X 12". Separators typed in needle itself are literal:
    "T-40" does not match "T40".
    Comparison is case-insensitive.
    """
    if not needle or not haystack:
        return False
    hay = haystack.upper()
    pin = needle.upper()
    if pin in hay:
        return True
    return re.search(_flexible_pattern(pin), hay) is not None
