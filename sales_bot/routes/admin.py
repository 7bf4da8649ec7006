"""
Admin Routes for Sales Bot
==========================

Back-office endpoints for the order bot.

Endpoints:
----------
- POST /admin/catalog/reload: Re-read the product catalog into memory
- GET /admin/orders/status-counts: Order counts grouped by status
- GET /admin/orders/{id}: Full order record

Catalog Reload:
---------------
The in-memory catalog snapshot is loaded once at startup and never
invalidated automatically. Call the reload endpoint after the catalog
changes. A failed reload keeps the previous snapshot and reports
reloaded=false.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..catalog_cache import catalog_cache
from ..db import get_db
from ..schemas.orders import (
    CatalogReloadResponse,
    OrderDetailOut,
    StatusCountOut,
    StatusCountsResponse,
)
from ..services.order import count_by_status, get_order, order_to_dict

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", tags=["Admin"])


@admin_router.post("/catalog/reload", response_model=CatalogReloadResponse)
async def reload_catalog(request: Request) -> CatalogReloadResponse:
    """Reload the catalog snapshot used by product matching."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Catalog not initialized")

    reloaded = await catalog_cache.reload(catalog)
    stats = catalog_cache.get_stats()
    logger.info("Catalog reload requested: reloaded=%s products=%d", reloaded, stats["products"])
    return CatalogReloadResponse(reloaded=reloaded, **stats)


@admin_router.get("/orders/status-counts", response_model=StatusCountsResponse)
def list_status_counts(db: Session = Depends(get_db)) -> StatusCountsResponse:
    """Order counts grouped by status."""
    counts = [StatusCountOut(status=status, count=count) for status, count in count_by_status(db)]
    return StatusCountsResponse(counts=counts, total=sum(c.count for c in counts))


@admin_router.get("/orders/{order_id}", response_model=OrderDetailOut)
def get_order_detail(order_id: int, db: Session = Depends(get_db)) -> OrderDetailOut:
    """Get a single order by id."""
    order = get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderDetailOut(**order_to_dict(order))
