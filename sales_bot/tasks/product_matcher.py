"""
Product Matching Engine for Order Lines.

Turns a loosely written product description ("10 bolsa 812 negra",
"t40 blanca", "rollo opa") into a ranked list of catalog candidates.

Search runs in two phases:
1. Score every product in the in-memory snapshot. If anything survives,
   return the best MATCH_RESULT_LIMIT.
2. Otherwise fall back to the catalog's substring search, one query per
   token variant, merge the rows by code and rank them with the same scorer.

Scoring rules (0 means rejected):
- Each query token is expanded into its gender/number variants.
- A token is found if a variant is flexibly contained in the normalized
  description (worth 3 points per character) or, for variants of three or
  more characters, is a prefix of a description word (2 per character).
- Coverage is found / total tokens. Single-token queries need full coverage,
  longer ones need half.
- Score = points x coverage, plus a pack-size nudge toward x10 packs when the
  query does not name a pack size itself.
"""

import logging
import re
from typing import TYPE_CHECKING, Iterable, Optional

from ..config import FALLBACK_VARIANTS_PER_TOKEN, MATCH_RESULT_LIMIT
from .collaborators import CatalogQuery, ProductRow
from .models import CatalogMatch
from .parsers import flexible_contains, gender_number_variants, normalize, tokenize

if TYPE_CHECKING:
    from ..catalog_cache import CatalogCache

logger = logging.getLogger(__name__)

# Description words are split on spaces, hyphens and slashes for prefix checks
DESCRIPTION_WORD_SPLIT = re.compile(r"[\s\-/]+")

# Minimum variant length for prefix matching ("OPA" -> "OPACO")
MIN_PREFIX_LENGTH = 3

FLEXIBLE_WEIGHT = 3
PREFIX_WEIGHT = 2

# A query token like "50" or "X100" already names a pack size
PACK_SIZE_TOKEN = re.compile(r"^X?(\d+)$")
MIN_PACK_SIZE = 10

PACK_BONUSES = (
    (re.compile(r"\bX\s*10\b"), 5),
    (re.compile(r"\bX\s*50\b"), -2),
    (re.compile(r"\bX\s*100\b"), -3),
)


def _query_names_pack_size(tokens: Iterable[str]) -> bool:
    for token in tokens:
        match = PACK_SIZE_TOKEN.match(token)
        if match and int(match.group(1)) >= MIN_PACK_SIZE:
            return True
    return False


def _pack_size_bonus(description: str) -> int:
    upper = description.upper()
    for pattern, bonus in PACK_BONUSES:
        if pattern.search(upper):
            return bonus
    return 0


def score_description(description: str, query_tokens: list[str]) -> float:
    """
    Score a catalog description against normalized query tokens.

    Args:
        description: Raw catalog description.
        query_tokens: Tokens produced by tokenize() on the operator's text.

    Returns:
        0 when coverage is insufficient, otherwise a positive score.
    """
    if not query_tokens:
        return 0
    normalized = normalize(description)
    words = [w for w in DESCRIPTION_WORD_SPLIT.split(normalized) if w]

    found = 0
    points = 0
    for token in query_tokens:
        if not token:
            continue
        token_points = 0
        for variant in gender_number_variants(token):
            if flexible_contains(normalized, variant):
                token_points = len(variant) * FLEXIBLE_WEIGHT
                break
            if len(variant) >= MIN_PREFIX_LENGTH and any(w.startswith(variant) for w in words):
                token_points = len(variant) * PREFIX_WEIGHT
                break
        if token_points:
            found += 1
            points += token_points

    coverage = found / len(query_tokens)
    min_coverage = 1.0 if len(query_tokens) == 1 else 0.5
    if coverage < min_coverage:
        return 0

    score = points * coverage
    if not _query_names_pack_size(query_tokens):
        score += _pack_size_bonus(description)
    return score


def _rank(rows: Iterable[ProductRow], tokens: list[str], limit: int) -> list[CatalogMatch]:
    scored = []
    for row in rows:
        score = score_description(row.description, tokens)
        if score > 0:
            scored.append(CatalogMatch(
                code=row.code,
                description=row.description,
                price=row.price,
                stock=row.stock,
                score=score,
            ))
    # sorted() is stable, so ties keep catalog order
    scored.sort(key=lambda m: m.score, reverse=True)
    return scored[:limit]


class ProductMatcher:
    """
    Resolves free-text product descriptions against the catalog.

    Provides snapshot scoring with a substring-search fallback. Collaborator
    failures degrade to an empty result instead of propagating.
    """

    def __init__(
        self,
        cache: "CatalogCache",
        catalog: Optional[CatalogQuery] = None,
        limit: int = MATCH_RESULT_LIMIT,
    ):
        """
        Initialize the product matcher.

        Args:
            cache: In-memory catalog snapshot scored on every search.
            catalog: Substring search used when the snapshot has no hits.
            limit: Maximum number of candidates returned.
        """
        self.cache = cache
        self.catalog = catalog
        self.limit = limit

    async def search(self, text: str) -> list[CatalogMatch]:
        """Return up to `limit` candidates for text, best first."""
        tokens = tokenize(text)
        if not tokens:
            return []

        results = _rank(self.cache.products, tokens, self.limit)
        if results:
            logger.debug("Snapshot search %r: %d candidates", tokens, len(results))
            return results

        return await self._fallback_search(tokens)

    async def _fallback_search(self, tokens: list[str]) -> list[CatalogMatch]:
        if self.catalog is None:
            return []
        rows_by_code: dict[str, ProductRow] = {}
        for token in tokens:
            for variant in gender_number_variants(token)[:FALLBACK_VARIANTS_PER_TOKEN]:
                try:
                    rows = await self.catalog.search_products(variant)
                except Exception as e:
                    logger.warning("Catalog search for %r failed: %s", variant, e)
                    continue
                for row in rows:
                    rows_by_code.setdefault(row.code, row)

        results = _rank(rows_by_code.values(), tokens, self.limit)
        logger.debug(
            "Fallback search %r: %d rows fetched, %d candidates",
            tokens, len(rows_by_code), len(results),
        )
        return results
