# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from . import db
from .catalog_cache import CatalogCache, catalog_cache
from .logging_config import setup_logging
from .routes import admin_router, bot_router, limiter
from .services.catalog import SqlCatalogQuery, SqlClientQuery
from .services.notifications import WebhookOrderNotifier
from .services.order import SqlOrderRepository
from .services.session import SessionStore
from .tasks import (
    ClientMatcher,
    OrderAssembler,
    OrderBot,
    OrderNotifier,
    OrderStateMachine,
    ProductMatcher,
)

# Configure logging at module load time
setup_logging()

logger = logging.getLogger(__name__)


def build_order_bot(
    session_factory: Callable[[], Session],
    cache: CatalogCache = catalog_cache,
    notifier: Optional[OrderNotifier] = None,
    store: Optional[SessionStore] = None,
) -> OrderBot:
    """
    Wire the conversation core to the SQLAlchemy-backed collaborators.

    Args:
        session_factory: Creates database sessions for catalog, client and order queries.
        cache: Catalog snapshot used by product matching.
        notifier: Receives committed orders; defaults to the webhook notifier.
        store: Session store; a fresh one is created when omitted.
    """
    catalog = SqlCatalogQuery(session_factory)
    orders = SqlOrderRepository(session_factory)
    machine = OrderStateMachine(
        store=store or SessionStore(),
        product_matcher=ProductMatcher(cache, catalog),
        client_matcher=ClientMatcher(SqlClientQuery(session_factory)),
        assembler=OrderAssembler(orders, notifier or WebhookOrderNotifier()),
        catalog=catalog,
        cache=cache,
        orders=orders,
    )
    return OrderBot(machine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Database migrations are handled by Alembic; create_all only fills gaps
    # for fresh local databases.
    db.init_db()

    order_bot = build_order_bot(db.SessionLocal)
    app.state.order_bot = order_bot
    app.state.catalog = order_bot.machine.lookups.catalog

    if not await catalog_cache.reload(app.state.catalog):
        logger.warning("Starting without a catalog snapshot; matching will use substring search")

    logger.info("Sales bot started")
    yield

    order_bot.store.close()
    logger.info("Sales bot stopped")


app = FastAPI(
    title="Sales Order Bot API",
    description="Conversational order builder for chat-based sales",
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Bot", "description": "Chat transport webhook"},
        {"name": "Admin", "description": "Catalog and order administration"},
    ],
)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(bot_router)
app.include_router(admin_router)


@app.get("/health", tags=["Health"])
def health_check():
    return {
        "status": "healthy",
        "catalog": catalog_cache.get_stats(),
    }
