"""
Per-user entry point of the order conversation.

OrderBot is what the chat transport talks to. It decodes raw button strings
and slash commands at the boundary, then runs the state machine inside the
user's session lock so that events from one user are handled strictly one
after another while different users proceed concurrently.
"""

import logging
from typing import Union

from .actions import Action, Command, decode_action, parse_command
from .models import ChatUser
from .schemas import BotReply
from .state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderBot:
    """Serializes and routes inbound events for the state machine."""

    def __init__(self, machine: OrderStateMachine):
        self.machine = machine
        self.store = machine.store

    async def on_text(self, user: ChatUser, text: str) -> BotReply:
        """Free text, or a slash command when it starts with "/"."""
        command = parse_command(text)
        if command is not None:
            return await self.on_command(user, command)
        async with self.store.lock(user.id):
            return await self.machine.handle_text(user, text)

    async def on_action(self, user: ChatUser, action: Union[str, Action]) -> BotReply:
        """A button press, raw wire string or already decoded."""
        if isinstance(action, str):
            action = decode_action(action)
        async with self.store.lock(user.id):
            return await self.machine.handle_action(user, action)

    async def on_command(self, user: ChatUser, command: Command) -> BotReply:
        async with self.store.lock(user.id):
            return await self.machine.handle_command(user, command)
