"""
Collaborator interfaces consumed by the order flow.

The conversation core never touches a database or HTTP client directly. It
talks to these interfaces, which the services package implements on top of
SQLAlchemy and which tests replace with in-memory fakes.
"""

from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict


class ProductRow(BaseModel):
    """A product as returned by the catalog."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    stock: float = 0.0
    price: float = 0.0


class ClientRow(BaseModel):
    """A client as returned by the client search."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    phone: str = ""


class CatalogQuery(Protocol):
    async def search_products(self, substring: str) -> list[ProductRow]:
        """Case-insensitive substring search over product descriptions."""
        ...

    async def list_all_products(self) -> list[ProductRow]:
        """Every active product, used to build the in-memory snapshot."""
        ...


class ClientQuery(Protocol):
    async def search_clients(self, text: str) -> list[ClientRow]:
        """Token OR search over client names, exact-substring hits first."""
        ...


class OrderRepository(Protocol):
    def create_order(self, record: dict[str, Any]) -> int:
        """Persist a new order and return its id. Raises OrderPersistenceError."""
        ...

    def get_order_by_id(self, order_id: int) -> Optional[dict[str, Any]]:
        ...

    def count_orders_by_status(self) -> list[tuple[str, int]]:
        ...


class OrderNotifier(Protocol):
    def order_created(self, order: dict[str, Any]) -> None:
        """Announce a committed order."""
        ...


class OrderPersistenceError(Exception):
    """Raised by an OrderRepository when an order could not be stored."""
