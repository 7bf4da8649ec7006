"""
Order Schemas for Sales Bot
===========================

Pydantic models for the admin order and catalog endpoints.

Order States:
-------------
- pendiente: Created by the bot, waiting for review
- aprobado: Approved by back-office staff
- empacado: Packed
- despachado: Shipped
- cancelado: Cancelled
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OrderDetailOut(BaseModel):
    """
    Full order record as stored by the bot.

    Attributes:
        items: Confirmed lines (code, description, quantity, price,
            original_price, stock) decoded from products_json
        products_text: One "qty description" line per item
        raw_input: Every product list the operator typed, in order
    """
    id: int
    created_on: Optional[str] = None
    chat_user_id: Optional[int] = None
    chat_username: Optional[str] = None
    chat_display_name: Optional[str] = None
    raw_input: Optional[str] = None
    client_name: str
    client_id: Optional[int] = None
    products_text: str = ""
    items: List[Dict[str, Any]] = Field(default_factory=list)
    notes: Optional[str] = None
    status: str
    total: float
    subtotal: float
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class StatusCountOut(BaseModel):
    status: str
    count: int


class StatusCountsResponse(BaseModel):
    counts: List[StatusCountOut]
    total: int


class CatalogReloadResponse(BaseModel):
    """
    Result of POST /admin/catalog/reload.

    Attributes:
        reloaded: False when the catalog could not be read and the previous
            snapshot was kept
    """
    reloaded: bool
    products: int
    in_stock: int
    last_refresh: Optional[str] = None
