"""
Parsers Package.

This package contains the pure text functions used by the order flow.

Exports:
- Normalization: canonical text form, gender/number variants, flexible containment
- Deterministic Parsers: product list lines, product-vs-client heuristic,
  quantity and price replies
"""

from .normalization import (
    normalize,
    tokenize,
    strip_accents,
    expand_compact_dimensions,
    gender_number_variants,
    flexible_contains,
)

from .deterministic import (
    ParsedLine,
    parse_lines,
    looks_like_product,
    parse_quantity,
    parse_price,
    PRODUCT_WORDS,
)

__all__ = [
    "normalize",
    "tokenize",
    "strip_accents",
    "expand_compact_dimensions",
    "gender_number_variants",
    "flexible_contains",
    "ParsedLine",
    "parse_lines",
    "looks_like_product",
    "parse_quantity",
    "parse_price",
    "PRODUCT_WORDS",
]
