"""
Pricing Handler for Order State Machine.

Once a candidate is chosen for a line the operator decides between the
catalog price and a negotiated special price. The choice produces the
ConfirmedItem for that line.

Extracted from state_machine.py for better separation of concerns.
"""

import logging
from typing import Callable

from .actions import AcceptNormalPrice, RequestSpecialPrice
from .message_builder import SESSION_EXPIRED, STALE_ACTION, MessageBuilder
from .models import CatalogMatch, ConfirmedItem, OrderSession, PendingPricing
from .parsers import parse_price
from .schemas import BotReply, SessionStep

logger = logging.getLogger(__name__)


class PricingHandler:
    """
    Handles the normal vs special price decision for one line at a time.
    """

    def __init__(
        self,
        messages: MessageBuilder,
        present_current: Callable[[OrderSession], BotReply] | None = None,
    ):
        """
        Initialize the pricing handler.

        Args:
            messages: Prompt text builder.
            present_current: Callback rendering the next pending line.
        """
        self.messages = messages
        self._present_current = present_current

    def ask(self, session: OrderSession, idx: int, match: CatalogMatch) -> BotReply:
        """Hold the chosen candidate for line idx and ask for the price type."""
        line = session.pending_lines[idx]
        session.pending_pricing = PendingPricing(
            code=match.code,
            description=match.description,
            quantity=line.requested_qty,
            normal_price=match.price,
            stock=match.stock,
            idx=idx,
        )
        text, buttons = self.messages.ask_price_type(match, line.requested_qty, idx)
        return BotReply().say(text, buttons)

    def _check_pending(self, session: OrderSession, line_index: int) -> BotReply | None:
        """Return a notice when a price action cannot apply to the held candidate."""
        pricing = session.pending_pricing
        if pricing is None:
            return BotReply(notice=SESSION_EXPIRED)
        if pricing.idx != line_index:
            logger.debug("Stale price action for line %d, pending line is %d", line_index, pricing.idx)
            return BotReply(notice=STALE_ACTION)
        return None

    def _apply(self, session: OrderSession, price: float, special: bool) -> ConfirmedItem:
        pricing = session.pending_pricing
        item = ConfirmedItem(
            code=pricing.code,
            description=pricing.description,
            quantity=pricing.quantity,
            price=price,
            original_price=pricing.normal_price if special else None,
            stock=pricing.stock,
        )
        session.confirmed_items.append(item)
        session.advance_past(pricing.idx)
        session.pending_pricing = None
        session.step = SessionStep.VERIFYING_STOCK
        return item

    def accept_normal(self, session: OrderSession, action: AcceptNormalPrice) -> BotReply:
        rejected = self._check_pending(session, action.line_index)
        if rejected:
            return rejected
        item = self._apply(session, session.pending_pricing.normal_price, special=False)
        reply = BotReply(notice="✅ Precio normal")
        reply.say(self.messages.normal_price_applied(item), edit=True)
        return reply.extend(self._present_current(session))

    def request_special(self, session: OrderSession, action: RequestSpecialPrice) -> BotReply:
        rejected = self._check_pending(session, action.line_index)
        if rejected:
            return rejected
        session.step = SessionStep.WAITING_SPECIAL_PRICE
        return BotReply().say(self.messages.ask_special_price(session.pending_pricing))

    def receive_special_price(self, session: OrderSession, text: str) -> BotReply:
        if session.pending_pricing is None:
            return self._present_current(session)

        price = parse_price(text)
        if price is None:
            return BotReply().say(self.messages.invalid_price())

        item = self._apply(session, price, special=True)
        reply = BotReply().say(self.messages.special_price_applied(item))
        return reply.extend(self._present_current(session))
