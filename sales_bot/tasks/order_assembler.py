"""
Order Assembler.

Turns a finished session into a persistence record, hands it to the order
repository and announces the new order. This is the only place an order is
created; nothing is written before the operator confirms.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from .collaborators import OrderNotifier, OrderRepository
from .models import ChatUser, ConfirmedItem, OrderSession

logger = logging.getLogger(__name__)


def serialize_items(items: list[ConfirmedItem]) -> str:
    """JSON list of the confirmed lines, as stored in products_json."""
    return json.dumps([item.model_dump() for item in items], ensure_ascii=False)


def build_order_record(session: OrderSession, note: str, user: ChatUser) -> dict[str, Any]:
    """Build the record passed to OrderRepository.create_order()."""
    items = session.confirmed_items
    total = session.total()
    return {
        "chat_user_id": user.id,
        "chat_username": user.username,
        "chat_display_name": user.display_name,
        "raw_input": session.raw_input_log,
        "client_name": session.client or "",
        "products_text": "\n".join(f"{item.quantity} {item.description}" for item in items),
        "products_json": serialize_items(items),
        "notes": note,
        "total": total,
        "subtotal": total,
    }


class OrderAssembler:
    """Commits confirmed sessions as orders."""

    def __init__(self, repository: OrderRepository, notifier: Optional[OrderNotifier] = None):
        self.repository = repository
        self.notifier = notifier

    async def finalize(self, session: OrderSession, note: str, user: ChatUser) -> int:
        """
        Persist the session as a new order and return its id.

        Repository and notifier calls block, so they run in worker threads.

        Raises:
            OrderPersistenceError: The repository could not store the order.
                The caller keeps the session so the operator can retry.
        """
        record = build_order_record(session, (note or "").strip(), user)
        order_id = await asyncio.to_thread(self.repository.create_order, record)
        logger.info(
            "Order #%s created by user %s: %d items, total %.2f",
            order_id, user.id, len(session.confirmed_items), record["total"],
        )
        await self._notify(order_id)
        return order_id

    async def _notify(self, order_id: int) -> None:
        if self.notifier is None:
            return
        # The order is already committed; a failed announcement must not undo it
        try:
            order = await asyncio.to_thread(self.repository.get_order_by_id, order_id)
            if order is None:
                logger.warning("Order #%s not found after commit, skipping notification", order_id)
                return
            await asyncio.to_thread(self.notifier.order_created, order)
        except Exception as e:
            logger.warning("Failed to announce order #%s: %s", order_id, e)
