"""
Tests for the product matching engine.
"""
import asyncio

from sales_bot.catalog_cache import CatalogCache
from sales_bot.tasks import ProductMatcher, ProductRow, score_description
from sales_bot.tasks.parsers import tokenize

from conftest import CATALOG, FakeCatalog


def search(matcher, text):
    return asyncio.run(matcher.search(text))


class TestScoreDescription:

    def test_unrelated_single_token_scores_zero(self):
        assert score_description("ROLLO OPACO 30X40", tokenize("bolsa")) == 0

    def test_half_coverage_is_enough_for_long_queries(self):
        assert score_description("ROLLO OPACO 30X40", tokenize("rollo opaco azul grande")) > 0

    def test_below_half_coverage_is_rejected(self):
        assert score_description("ROLLO OPACO 30X40", tokenize("rollo azul grande verde")) == 0

    def test_single_token_needs_full_coverage(self):
        assert score_description("BOLSA 8X12 NEGRA", tokenize("negra")) > 0

    def test_gender_variant_matches(self):
        assert score_description("BOLSA 12X16 BLANCA", tokenize("bolsa blanco")) > 0

    def test_prefix_match(self):
        assert score_description("ROLLO OPACO 30X40", tokenize("rollo opa")) > 0

    def test_compact_dimension_matches_spaced_description(self):
        assert score_description("BOLSA 8 X 12 NEGRA", tokenize("bolsa 812")) > 0

    def test_empty_query(self):
        assert score_description("BOLSA", []) == 0


class TestProductMatcherSnapshot:

    def test_pack_bonus_prefers_packs_of_ten(self):
        matcher = ProductMatcher(CatalogCache(CATALOG))
        results = search(matcher, "bolsa 8x12 negra")
        assert [m.code for m in results] == ["BOL812N", "BOL812N50"]
        assert results[0].score > results[1].score

    def test_explicit_pack_size_disables_bonus(self):
        matcher = ProductMatcher(CatalogCache(CATALOG))
        results = search(matcher, "bolsa 8x12 negra x50")
        assert results[0].code == "BOL812N50"

    def test_size_code_with_hyphen(self):
        matcher = ProductMatcher(CatalogCache(CATALOG))
        results = search(matcher, "camiseta t40 blanca")
        assert [m.code for m in results] == ["CAMT40B"]
        assert results[0].price == 45.0
        assert results[0].stock == 3

    def test_limit(self):
        matcher = ProductMatcher(CatalogCache(CATALOG), limit=1)
        assert len(search(matcher, "bolsa")) == 1

    def test_blank_text(self):
        matcher = ProductMatcher(CatalogCache(CATALOG))
        assert search(matcher, "   ") == []


class TestProductMatcherFallback:

    def test_falls_back_to_substring_search(self):
        catalog = FakeCatalog()
        matcher = ProductMatcher(CatalogCache(), catalog)

        results = search(matcher, "opaco")

        assert [m.code for m in results] == ["ROL-OPC"]
        assert catalog.searches == ["OPACO", "OPACA", "OPACOS"]

    def test_fallback_not_used_when_snapshot_has_hits(self):
        catalog = FakeCatalog()
        matcher = ProductMatcher(CatalogCache(CATALOG), catalog)

        search(matcher, "vaso")

        assert catalog.searches == []

    def test_fallback_merges_rows_by_code(self):
        rows = [ProductRow(code="A1", description="ROLLO NEGRO", stock=1, price=10.0)]
        matcher = ProductMatcher(CatalogCache(), FakeCatalog(rows))

        results = search(matcher, "rollo negro")

        assert [m.code for m in results] == ["A1"]

    def test_failing_catalog_yields_no_candidates(self):
        matcher = ProductMatcher(CatalogCache(), FakeCatalog(fail=True))
        assert search(matcher, "opaco") == []

    def test_no_catalog_and_empty_snapshot(self):
        assert search(ProductMatcher(CatalogCache()), "opaco") == []
