"""
Catalog Cache - In-Memory Product Snapshot.

Every product-matching call scores the whole catalog, so the catalog is read
once at startup and kept in memory. The snapshot is replaced wholesale on
reload and never mutated in place, which makes it safe to read from any
number of concurrent conversations.

Features:
- Full snapshot plus a derived in-stock view
- Explicit reload (startup, admin endpoint); no automatic invalidation
- A failed reload keeps the previous snapshot

Usage:
    from sales_bot.catalog_cache import catalog_cache

    await catalog_cache.reload(catalog_query)
    for product in catalog_cache.products:
        ...
"""

import logging
from datetime import datetime
from typing import Iterable

from .tasks.collaborators import CatalogQuery, ProductRow

logger = logging.getLogger(__name__)


class CatalogCache:
    """Read-only snapshot of the product catalog."""

    def __init__(self, products: Iterable[ProductRow] = ()):
        self._products: tuple[ProductRow, ...] = ()
        self._in_stock: tuple[ProductRow, ...] = ()
        self._last_refresh: datetime | None = None
        if products:
            self.load(products)

    @property
    def products(self) -> tuple[ProductRow, ...]:
        """All products, including those without stock."""
        return self._products

    @property
    def in_stock(self) -> tuple[ProductRow, ...]:
        """Products with stock greater than zero."""
        return self._in_stock

    @property
    def is_loaded(self) -> bool:
        return self._last_refresh is not None

    @property
    def last_refresh(self) -> datetime | None:
        return self._last_refresh

    def load(self, products: Iterable[ProductRow]) -> None:
        """Replace the snapshot with the given rows."""
        snapshot = tuple(products)
        self._products = snapshot
        self._in_stock = tuple(p for p in snapshot if p.stock > 0)
        self._last_refresh = datetime.now()
        logger.info(
            "Catalog cache loaded: %d products (%d in stock)",
            len(self._products), len(self._in_stock),
        )

    async def reload(self, catalog: CatalogQuery) -> bool:
        """
        Reload the snapshot from the catalog collaborator.

        Returns:
            True if the snapshot was replaced, False if the catalog failed
            and the previous snapshot was kept.
        """
        try:
            rows = await catalog.list_all_products()
        except Exception as e:
            logger.warning("Could not load product catalog, keeping previous snapshot: %s", e)
            return False
        self.load(rows)
        return True

    def get_stats(self) -> dict:
        return {
            "products": len(self._products),
            "in_stock": len(self._in_stock),
            "last_refresh": self._last_refresh.isoformat() if self._last_refresh else None,
        }


# Global instance shared by the running service
catalog_cache = CatalogCache()
