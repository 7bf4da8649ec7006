import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import sales_bot.db as db
from sales_bot.catalog_cache import CatalogCache
from sales_bot.models import Base, Client, Product
from sales_bot.main import app
from sales_bot.routes import limiter
from sales_bot.services.session import SessionStore
from sales_bot.tasks import (
    ChatUser,
    ClientMatcher,
    ClientRow,
    OrderAssembler,
    OrderBot,
    OrderPersistenceError,
    OrderStateMachine,
    ProductMatcher,
    ProductRow,
)


# Small catalog shared by the conversation tests
CATALOG = [
    ProductRow(code="BOL812N", description="BOLSA 8X12 NEGRA X10", stock=50, price=80.0),
    ProductRow(code="BOL812N50", description="BOLSA 8X12 NEGRA X50", stock=20, price=380.0),
    ProductRow(code="BOL1216B", description="BOLSA 12X16 BLANCA", stock=0, price=120.0),
    ProductRow(code="CAMT40B", description="CAMISETA T-40 BLANCA", stock=3, price=45.0),
    ProductRow(code="ROL-OPC", description="ROLLO OPACO 30X40", stock=12, price=150.0),
    ProductRow(code="VAS10", description="VASO DESECHABLE 10 OZ", stock=200, price=25.0),
]

CLIENTS = [
    ClientRow(id=1, name="GRANJAS DEL SUR", phone="5550001"),
    ClientRow(id=2, name="ABARROTES LUPITA"),
    ClientRow(id=3, name="ABARROTES DON PEPE"),
]


class FakeCatalog:
    """In-memory CatalogQuery."""

    def __init__(self, rows=CATALOG, fail=False):
        self.rows = list(rows)
        self.fail = fail
        self.searches = []

    async def search_products(self, substring):
        self.searches.append(substring)
        if self.fail:
            raise RuntimeError("catalog down")
        needle = substring.upper()
        return [row for row in self.rows if needle in row.description.upper()]

    async def list_all_products(self):
        if self.fail:
            raise RuntimeError("catalog down")
        return list(self.rows)


class FakeClients:
    """In-memory ClientQuery matching any word of the text."""

    def __init__(self, rows=CLIENTS, fail=False):
        self.rows = list(rows)
        self.fail = fail

    async def search_clients(self, text):
        if self.fail:
            raise RuntimeError("clients down")
        words = text.upper().split()
        return [row for row in self.rows if any(w in row.name for w in words)]


class FakeOrders:
    """In-memory OrderRepository."""

    def __init__(self, fail=False):
        self.fail = fail
        self.records = []

    def create_order(self, record):
        if self.fail:
            raise OrderPersistenceError("database is locked")
        self.records.append(dict(record))
        return len(self.records)

    def get_order_by_id(self, order_id):
        if 1 <= order_id <= len(self.records):
            return {"id": order_id, **self.records[order_id - 1]}
        return None

    def count_orders_by_status(self):
        return [("pendiente", len(self.records))] if self.records else []


class FakeNotifier:
    def __init__(self):
        self.orders = []

    def order_created(self, order):
        self.orders.append(order)


@pytest.fixture
def user():
    return ChatUser(id=42, username="vendedor1", first_name="Ana", last_name="Ruiz")


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def cache():
    return CatalogCache(CATALOG)


@pytest.fixture
def orders():
    return FakeOrders()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def store():
    return SessionStore(idle_timeout_seconds=0)


@pytest.fixture
def machine(store, cache, catalog, orders, notifier):
    """State machine wired to in-memory collaborators."""
    return OrderStateMachine(
        store=store,
        product_matcher=ProductMatcher(cache, catalog),
        client_matcher=ClientMatcher(FakeClients()),
        assembler=OrderAssembler(orders, notifier),
        catalog=catalog,
        cache=cache,
        orders=orders,
    )


@pytest.fixture
def bot(machine):
    return OrderBot(machine)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def seed_catalog(session_factory):
    session = session_factory()
    session.add(Product(code="BOL812N", description="BOLSA 8X12 NEGRA X10", stock=50, price=80.0))
    session.add(Product(code="BOL1216B", description="BOLSA 12X16 BLANCA", stock=0, price=120.0))
    session.add(Product(code="CAMT40B", description="CAMISETA T-40 BLANCA", stock=3, price=45.0))
    session.add(Product(code="OLD1", description="BOLSA DESCONTINUADA", stock=9, price=1.0, is_active=False))
    session.add(Client(first_name="GRANJAS", last_name="DEL SUR", phone="5550001"))
    session.add(Client(first_name="ABARROTES", last_name="LUPITA"))
    session.add(Client(first_name="ABARROTES", last_name="DON PEPE"))
    session.add(Client(first_name="GRANJERO", last_name="INACTIVO", is_active=False))
    session.commit()
    session.close()


@pytest.fixture
def client(engine, session_factory):
    """Shared FastAPI TestClient using an in-memory SQLite DB.

    Uses StaticPool so all connections share the same in-memory database.
    Rate limiting is disabled unless a test turns it back on.
    """
    original_engine, original_session_local = db.engine, db.SessionLocal

    # Patch the db module used by the app
    db.engine = engine
    db.SessionLocal = session_factory

    seed_catalog(session_factory)

    # Override FastAPI DB dependency
    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db
    limiter.enabled = False
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    db.engine, db.SessionLocal = original_engine, original_session_local
