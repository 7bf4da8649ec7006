"""
Tests for the catalog snapshot, read-only lookups and message formatting.
"""
import asyncio

from sales_bot.catalog_cache import CatalogCache
from sales_bot.tasks import ConfirmedItem, OrderSession, SessionStep
from sales_bot.tasks.client_matcher import ClientMatcher
from sales_bot.tasks.lookup_handler import LookupHandler
from sales_bot.tasks.message_builder import MessageBuilder, money, number, signed_money

from conftest import CATALOG, FakeCatalog, FakeClients


class TestCatalogCache:

    def test_empty_cache_is_not_loaded(self):
        cache = CatalogCache()

        assert not cache.is_loaded
        assert cache.get_stats() == {"products": 0, "in_stock": 0, "last_refresh": None}

    def test_reload_replaces_snapshot(self):
        cache = CatalogCache()

        assert asyncio.run(cache.reload(FakeCatalog())) is True

        assert len(cache.products) == len(CATALOG)
        assert all(p.stock > 0 for p in cache.in_stock)
        assert "BOL1216B" not in {p.code for p in cache.in_stock}

    def test_failed_reload_keeps_previous_snapshot(self):
        cache = CatalogCache(CATALOG)
        before = cache.products

        assert asyncio.run(cache.reload(FakeCatalog(fail=True))) is False
        assert cache.products is before


class TestClientMatcher:

    def test_deduplicates_and_limits(self):
        from sales_bot.tasks import ClientRow

        rows = [
            ClientRow(id=1, name="ABARROTES LUPITA"),
            ClientRow(id=2, name="ABARROTES LUPITA"),
            ClientRow(id=3, name="ABARROTES DON PEPE"),
        ]
        matcher = ClientMatcher(FakeClients(rows), limit=5)

        assert asyncio.run(matcher.search("abarrotes")) == ["ABARROTES LUPITA", "ABARROTES DON PEPE"]
        assert asyncio.run(ClientMatcher(FakeClients(rows), limit=1).search("abarrotes")) == ["ABARROTES LUPITA"]

    def test_failures_and_blank_queries(self):
        assert asyncio.run(ClientMatcher(FakeClients(fail=True)).search("lupita")) == []
        assert asyncio.run(ClientMatcher(FakeClients()).search("   ")) == []


class TestLookupHandler:

    def test_product_list_from_catalog_when_cache_empty(self):
        lookups = LookupHandler(MessageBuilder(), catalog=FakeCatalog(), cache=CatalogCache())

        reply = asyncio.run(lookups.product_list())

        assert "`VAS10`" in reply.texts[0]
        assert "`BOL1216B`" not in reply.texts[0]

    def test_stock_lookup_failure(self):
        lookups = LookupHandler(MessageBuilder(), catalog=FakeCatalog(fail=True))

        reply = asyncio.run(lookups.stock("bolsa"))

        assert reply.texts == ["⚠️ Error al buscar productos."]

    def test_stock_lookup_truncates(self, monkeypatch):
        import sales_bot.tasks.lookup_handler as lookup_mod

        monkeypatch.setattr(lookup_mod, "STOCK_LOOKUP_LIMIT", 1)
        lookups = LookupHandler(MessageBuilder(), catalog=FakeCatalog())

        reply = asyncio.run(lookups.stock("bolsa"))

        assert "_...y 2 más_" in reply.texts[0]

    def test_stock_lookup_no_results(self):
        lookups = LookupHandler(MessageBuilder(), catalog=FakeCatalog())

        reply = asyncio.run(lookups.stock("tornillo"))

        assert "No se encontraron productos" in reply.texts[0]

    def test_combined_search_with_failing_catalog(self):
        lookups = LookupHandler(
            MessageBuilder(),
            catalog=FakeCatalog(fail=True),
            client_matcher=ClientMatcher(FakeClients()),
        )

        reply = asyncio.run(lookups.combined("lupita"))

        assert "ABARROTES LUPITA" in reply.texts[0]


class TestMessageFormatting:

    def test_money(self):
        assert money(1234.5) == "$1,234.50"
        assert money(0) == "$0.00"

    def test_signed_money(self):
        assert signed_money(5.5) == "+$5.50"
        assert signed_money(-2) == "-$2.00"

    def test_number(self):
        assert number(50.0) == "50"
        assert number(2.5) == "2.5"

    def test_summary_flags_limited_stock(self):
        session = OrderSession(
            step=SessionStep.CONFIRMING_PRICES,
            client="ABARROTES LUPITA",
            confirmed_items=[
                ConfirmedItem(code="CAMT40B", description="CAMISETA T-40 BLANCA", quantity=5, price=45.0, stock=3),
            ],
        )

        text, buttons = MessageBuilder().summary(session)

        assert "⚠️ *CAMISETA T-40 BLANCA*" in text
        assert "_⚠️ Stock: 3_" in text
        assert "💰 *TOTAL: $225.00*" in text
        assert buttons[2][0].label == "🗑️ Quitar: CAMISETA T-40 BLANCA"
