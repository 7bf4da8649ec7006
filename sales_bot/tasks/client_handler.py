"""
Client Handler for Order State Machine.

This module handles the first step of an order: finding the client by name
and letting the operator pick the right one.

Extracted from state_machine.py for better separation of concerns.
"""

import logging

from .client_matcher import ClientMatcher
from .message_builder import MessageBuilder
from .models import ChatUser
from .schemas import BotReply, SessionStep

logger = logging.getLogger(__name__)


class ClientHandler:
    """
    Handles client search and selection.

    A selection always starts a fresh session, discarding anything the
    operator had in progress.
    """

    def __init__(self, store, client_matcher: ClientMatcher, messages: MessageBuilder):
        """
        Initialize the client handler.

        Args:
            store: SessionStore holding the per-user sessions.
            client_matcher: Client lookup used for every search.
            messages: Prompt text builder.
        """
        self.store = store
        self.client_matcher = client_matcher
        self.messages = messages

    async def search(self, user: ChatUser, text: str, start_flow: bool) -> BotReply:
        """
        Search clients by name and offer the hits as buttons.

        With start_flow, a successful search replaces the user's session with
        one waiting for a client selection.
        """
        query = text.strip()
        names = await self.client_matcher.search(query)
        logger.debug("Client search by user %s: %d names", user.id, len(names))

        if not names:
            prompt, buttons = self.messages.clients_not_found(query)
            return BotReply().say(prompt, buttons)

        if start_flow:
            self.store.create(user.id, SessionStep.SELECTING_CLIENT, client_query=query)
        prompt, buttons = self.messages.clients_found(query, names)
        return BotReply().say(prompt, buttons)

    def select(self, user: ChatUser, name: str) -> BotReply:
        self.store.create(user.id, SessionStep.WAITING_PRODUCTS, client=name)
        reply = BotReply(notice=f"✅ {name}")
        return reply.say(self.messages.client_selected(name), edit=True)

    def search_again(self, user: ChatUser) -> BotReply:
        self.store.create(user.id, SessionStep.WAITING_CLIENT)
        return BotReply().say(self.messages.ask_other_client())

    def start_order(self, user: ChatUser) -> BotReply:
        self.store.create(user.id, SessionStep.WAITING_CLIENT)
        return BotReply().say(self.messages.ask_client())
