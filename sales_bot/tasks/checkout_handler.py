"""
Checkout Handler for Order State Machine.

This module handles everything after the last line is verified: the order
summary, removing items, going back to add more, the optional note and the
final commit through the Order Assembler.

Extracted from state_machine.py for better separation of concerns.
"""

import logging

from .actions import RemoveConfirmedItem
from .collaborators import OrderPersistenceError
from .message_builder import STALE_ACTION, MessageBuilder
from .models import ChatUser, OrderSession
from .order_assembler import OrderAssembler
from .schemas import BotReply, SessionStep

logger = logging.getLogger(__name__)


class CheckoutHandler:
    """
    Handles the summary, note and commit steps.
    """

    def __init__(self, store, assembler: OrderAssembler, messages: MessageBuilder):
        self.store = store
        self.assembler = assembler
        self.messages = messages

    def show_summary(self, session: OrderSession) -> BotReply:
        session.step = SessionStep.CONFIRMING_PRICES
        if not session.confirmed_items:
            text, buttons = self.messages.empty_summary()
        else:
            text, buttons = self.messages.summary(session)
        return BotReply().say(text, buttons)

    def remove_item(self, session: OrderSession, action: RemoveConfirmedItem) -> BotReply:
        if action.item_index >= len(session.confirmed_items):
            return BotReply(notice=STALE_ACTION)
        removed = session.confirmed_items.pop(action.item_index)
        reply = BotReply(notice=f"Eliminado: {removed.description}")
        return reply.extend(self.show_summary(session))

    def add_more(self, session: OrderSession) -> BotReply:
        session.step = SessionStep.ADDING_PRODUCTS
        return BotReply().say(self.messages.ask_more_products(session))

    def ask_note(self, session: OrderSession) -> BotReply:
        session.step = SessionStep.WAITING_NOTE
        text, buttons = self.messages.ask_note()
        return BotReply().say(text, buttons)

    async def finalize(self, user: ChatUser, session: OrderSession, note: str, edit: bool = False) -> BotReply:
        """
        Commit the order and clear the session.

        On a persistence failure the session is kept untouched so the
        operator can confirm again without re-entering the order.
        """
        if not session.confirmed_items:
            return BotReply().say(self.messages.nothing_to_commit())

        note = (note or "").strip()
        try:
            order_id = await self.assembler.finalize(session, note, user)
        except OrderPersistenceError:
            logger.exception("Could not store order for user %s", user.id)
            return BotReply(notice="⚠️ Error").say(self.messages.order_failed())

        self.store.clear(user.id)
        text = self.messages.order_created(
            order_id, session.client or "", session.confirmed_items, note, session.total(),
        )
        reply = BotReply(notice=f"✅ Orden #{order_id} creada" if edit else None)
        return reply.say(text, edit=edit)
