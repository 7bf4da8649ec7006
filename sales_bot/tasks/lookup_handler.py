"""
Lookup Handler for Order State Machine.

Read-only queries available at any time, independent of the order in
progress: stock by name, the in-stock product list, a combined client and
product search, and order counts by status.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from ..config import COMBINED_SEARCH_LIMIT, PRODUCT_LIST_LIMIT, STOCK_LOOKUP_LIMIT
from .client_matcher import ClientMatcher
from .collaborators import CatalogQuery, OrderRepository, ProductRow
from .message_builder import MessageBuilder
from .schemas import BotReply

if TYPE_CHECKING:
    from ..catalog_cache import CatalogCache

logger = logging.getLogger(__name__)


class LookupHandler:
    """Answers the stock, products, search and orders queries."""

    def __init__(
        self,
        messages: MessageBuilder,
        catalog: Optional[CatalogQuery] = None,
        cache: "CatalogCache | None" = None,
        client_matcher: Optional[ClientMatcher] = None,
        orders: Optional[OrderRepository] = None,
    ):
        self.messages = messages
        self.catalog = catalog
        self.cache = cache
        self.client_matcher = client_matcher
        self.orders = orders

    async def _search_products(self, text: str) -> list[ProductRow]:
        if self.catalog is None:
            return []
        return await self.catalog.search_products(text)

    async def stock(self, text: str) -> BotReply:
        try:
            rows = await self._search_products(text)
        except Exception as e:
            logger.warning("Stock lookup failed: %s", e)
            return BotReply().say(self.messages.lookup_failed("productos"))
        return BotReply().say(self.messages.stock_lookup(text, rows, STOCK_LOOKUP_LIMIT))

    async def product_list(self) -> BotReply:
        """First in-stock products, from the snapshot when it is loaded."""
        if self.cache is not None and self.cache.is_loaded:
            rows = list(self.cache.in_stock)
        else:
            try:
                rows = await self.catalog.list_all_products() if self.catalog else []
            except Exception as e:
                logger.warning("Product list failed: %s", e)
                return BotReply().say(self.messages.lookup_failed("productos"))
            rows = [row for row in rows if row.stock > 0]
        return BotReply().say(self.messages.product_list(rows[:PRODUCT_LIST_LIMIT]))

    async def combined(self, text: str) -> BotReply:
        clients = await self.client_matcher.search(text) if self.client_matcher else []
        try:
            rows = await self._search_products(text)
        except Exception as e:
            logger.warning("Product search failed: %s", e)
            rows = []
        return BotReply().say(self.messages.combined_search(
            text, clients[:COMBINED_SEARCH_LIMIT], rows[:COMBINED_SEARCH_LIMIT],
        ))

    async def order_counts(self) -> BotReply:
        if self.orders is None:
            return BotReply().say(self.messages.order_status_counts([]))
        try:
            counts = await asyncio.to_thread(self.orders.count_orders_by_status)
        except Exception as e:
            logger.warning("Order count failed: %s", e)
            return BotReply().say(self.messages.lookup_failed("órdenes"))
        return BotReply().say(self.messages.order_status_counts(counts))
