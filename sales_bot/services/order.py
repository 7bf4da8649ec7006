"""
Order Persistence Service for Sales Bot
=======================================

This module stores the orders created through the chat conversation and
answers the read queries the bot and the admin API need.

Order Lifecycle:
----------------
1. The operator builds the order in the session (nothing persisted)
2. On final confirmation -> create_order (status: pendiente)
3. Back-office staff move it through aprobado / empacado / despachado,
   or cancelado

Error Handling:
---------------
Any SQLAlchemy failure while creating an order is rolled back and re-raised
as OrderPersistenceError, which the conversation reports to the operator
while keeping the session so the order can be confirmed again.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Order
from ..tasks.collaborators import OrderPersistenceError

logger = logging.getLogger(__name__)


ORDER_FIELDS = (
    "chat_user_id",
    "chat_username",
    "chat_display_name",
    "raw_input",
    "client_name",
    "client_id",
    "products_text",
    "products_json",
    "notes",
    "total",
    "subtotal",
)


def persist_order(db: Session, record: Dict[str, Any]) -> Order:
    """
    Insert a new order from a record built by the Order Assembler.

    Unknown keys in the record are ignored; status always starts as pendiente.
    """
    order = Order(**{key: record[key] for key in ORDER_FIELDS if key in record})
    order.status = "pendiente"
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def order_to_dict(order: Order) -> Dict[str, Any]:
    """Serialize an Order row, decoding products_json into a list."""
    try:
        items = json.loads(order.products_json or "[]")
    except ValueError:
        logger.warning("Order #%s has malformed products_json", order.id)
        items = []
    return {
        "id": order.id,
        "created_on": order.created_on.isoformat() if order.created_on else None,
        "chat_user_id": order.chat_user_id,
        "chat_username": order.chat_username,
        "chat_display_name": order.chat_display_name,
        "raw_input": order.raw_input,
        "client_name": order.client_name,
        "client_id": order.client_id,
        "products_text": order.products_text,
        "items": items,
        "notes": order.notes,
        "status": order.status,
        "total": order.total,
        "subtotal": order.subtotal,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


def get_order(db: Session, order_id: int) -> Optional[Order]:
    return db.get(Order, order_id)


def count_by_status(db: Session) -> List[Tuple[str, int]]:
    rows = (
        db.query(Order.status, func.count(Order.id))
        .group_by(Order.status)
        .order_by(Order.status)
        .all()
    )
    return [(status, count) for status, count in rows]


class SqlOrderRepository:
    """OrderRepository backed by the orders table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def create_order(self, record: Dict[str, Any]) -> int:
        db = self.session_factory()
        try:
            order = persist_order(db, record)
            return order.id
        except SQLAlchemyError as e:
            db.rollback()
            raise OrderPersistenceError(f"Could not store order: {e}") from e
        finally:
            db.close()

    def get_order_by_id(self, order_id: int) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            order = get_order(db, order_id)
            return order_to_dict(order) if order else None
        finally:
            db.close()

    def count_orders_by_status(self) -> List[Tuple[str, int]]:
        db = self.session_factory()
        try:
            return count_by_status(db)
        finally:
            db.close()
