"""
Catalog and Client Query Services
=================================

SQLAlchemy implementations of the catalog and client query collaborators
used by the order conversation.

The queries themselves are plain synchronous SQLAlchemy. The collaborator
interfaces are async, so each query runs in a worker thread with
asyncio.to_thread and the event loop keeps serving other users meanwhile.

Product Search:
---------------
- search_products: case-insensitive substring match on the description,
  active products only, ordered by description, first 50 rows.
- list_all_products: every active product, used for the catalog snapshot.

Client Search:
--------------
The typed text is split into words. Short words and Spanish articles
("LA", "DEL", ...) are ignored unless nothing else is left. A client matches
if any word appears in its first or last name. Clients whose full name
contains the whole text are returned first.
"""

import asyncio
import logging
from typing import Callable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import Client, Product
from ..tasks.collaborators import ClientRow, ProductRow

logger = logging.getLogger(__name__)

PRODUCT_SEARCH_LIMIT = 50
CLIENT_QUERY_LIMIT = 50
CLIENT_RESULT_LIMIT = 30
MIN_CLIENT_QUERY_LENGTH = 2

CLIENT_STOPWORDS = {"LA", "EL", "DE", "DEL", "LOS", "LAS", "Y"}


def _product_row(product: Product) -> ProductRow:
    return ProductRow(
        code=product.code,
        description=product.description,
        stock=product.stock or 0.0,
        price=product.price or 0.0,
    )


def search_products(db: Session, substring: str) -> list[ProductRow]:
    """Substring search over active product descriptions."""
    products = (
        db.query(Product)
        .filter(Product.is_active.is_(True))
        .filter(Product.description.ilike(f"%{substring}%"))
        .order_by(Product.description)
        .limit(PRODUCT_SEARCH_LIMIT)
        .all()
    )
    return [_product_row(p) for p in products]


def list_all_products(db: Session) -> list[ProductRow]:
    products = (
        db.query(Product)
        .filter(Product.is_active.is_(True))
        .order_by(Product.description)
        .all()
    )
    return [_product_row(p) for p in products]


def client_search_words(text: str) -> list[str]:
    """Significant words of a client search, or all words if none are."""
    words = text.upper().split()
    significant = [w for w in words if len(w) >= 2 and w not in CLIENT_STOPWORDS]
    return significant or words


def search_clients(db: Session, text: str) -> list[ClientRow]:
    """
    Token OR search over client first and last names.

    Returns:
        Up to 30 clients; those whose full name contains the whole text come
        first. Empty for texts shorter than two characters.
    """
    query = (text or "").strip()
    if len(query) < MIN_CLIENT_QUERY_LENGTH:
        return []

    conditions = []
    for word in client_search_words(query):
        pattern = f"%{word}%"
        conditions.append(Client.first_name.ilike(pattern))
        conditions.append(Client.last_name.ilike(pattern))

    clients = (
        db.query(Client)
        .filter(Client.is_active.is_(True))
        .filter(or_(*conditions))
        .order_by(Client.first_name)
        .limit(CLIENT_QUERY_LIMIT)
        .all()
    )
    rows = [ClientRow(id=c.id, name=c.full_name, phone=c.phone or "") for c in clients]

    upper = query.upper()
    exact = [row for row in rows if upper in row.name.upper()]
    if exact:
        return exact[:CLIENT_RESULT_LIMIT]
    return rows[:CLIENT_RESULT_LIMIT]


class _SqlQuery:
    """Runs one synchronous query function per call in a worker thread."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _run(self, fn, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        finally:
            db.close()


class SqlCatalogQuery(_SqlQuery):
    """CatalogQuery backed by the products table."""

    async def search_products(self, substring: str) -> list[ProductRow]:
        return await asyncio.to_thread(self._run, search_products, substring)

    async def list_all_products(self) -> list[ProductRow]:
        return await asyncio.to_thread(self._run, list_all_products)


class SqlClientQuery(_SqlQuery):
    """ClientQuery backed by the clients table."""

    async def search_clients(self, text: str) -> list[ClientRow]:
        return await asyncio.to_thread(self._run, search_clients, text)
