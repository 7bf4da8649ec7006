"""
Line Review Handler for Order State Machine.

This module walks the operator through the parsed product lines one at a
time: showing the candidates for the line under the cursor, and handling
skip, re-search and quantity edits.

Extracted from state_machine.py for better separation of concerns.
"""

import logging
from typing import Callable

from .actions import ConfirmLineMatch, EditQuantity, PickLineCandidate, RetryLine, SkipLine
from .message_builder import INVALID_PRODUCT, STALE_ACTION, MessageBuilder
from .models import CatalogMatch, OrderSession, PendingLine
from .parsers import parse_lines, parse_quantity
from .product_matcher import ProductMatcher
from .schemas import BotReply, SessionStep

logger = logging.getLogger(__name__)


class LineReviewHandler:
    """
    Handles product entry and per-line verification.

    Manages parsing the product list, matching each line against the
    catalog, rendering the line under the cursor and the actions offered on
    it. Pricing and the summary live in their own handlers and are reached
    through callbacks.
    """

    def __init__(
        self,
        product_matcher: ProductMatcher,
        messages: MessageBuilder,
        start_pricing: Callable[[OrderSession, int, CatalogMatch], BotReply] | None = None,
        show_summary: Callable[[OrderSession], BotReply] | None = None,
    ):
        """
        Initialize the line review handler.

        Args:
            product_matcher: Catalog Matcher used for every line.
            messages: Prompt text builder.
            start_pricing: Callback asking normal vs special price for a chosen candidate.
            show_summary: Callback rendering the order summary once all lines are walked.
        """
        self.product_matcher = product_matcher
        self.messages = messages
        self._start_pricing = start_pricing
        self._show_summary = show_summary

    async def receive_products(self, session: OrderSession, text: str) -> BotReply:
        """Parse a product list, match every line and show the first one."""
        parsed = parse_lines(text)
        if not parsed:
            return BotReply().say(self.messages.unparseable_products())

        reply = BotReply().say(self.messages.verifying(len(parsed)))
        lines = []
        for entry in parsed:
            candidates = await self.product_matcher.search(entry.description)
            lines.append(PendingLine(
                original_text=entry.description,
                requested_qty=entry.quantity,
                candidates=candidates,
            ))
        logger.debug(
            "Matched %d lines: %s", len(lines), [len(line.candidates) for line in lines],
        )

        # Confirmed items survive when adding more products
        session.pending_lines = lines
        session.current_index = 0
        session.pending_pricing = None
        session.target_index = None
        session.append_raw_input(text)
        session.step = SessionStep.VERIFYING_STOCK
        return reply.extend(self.present_current(session))

    def present_current(self, session: OrderSession) -> BotReply:
        """Render the line under the cursor, or the summary when none is left."""
        line = session.current_line
        if line is None:
            return self._show_summary(session)

        session.step = SessionStep.VERIFYING_STOCK
        idx, total = session.current_index, len(session.pending_lines)
        if not line.candidates:
            text, buttons = self.messages.line_not_found(idx, total, line)
        elif len(line.candidates) == 1:
            text, buttons = self.messages.line_single_match(idx, total, line)
        else:
            text, buttons = self.messages.line_multiple_matches(idx, total, line)
        return BotReply().say(text, buttons)

    # ------------------------------------------------------------------
    # Candidate choice
    # ------------------------------------------------------------------

    def _line_under_cursor(self, session: OrderSession, index: int):
        """The line at index, only if it is the one being reviewed now."""
        if index != session.current_index:
            return None
        return session.current_line

    def confirm_match(self, session: OrderSession, action: ConfirmLineMatch) -> BotReply:
        line = self._line_under_cursor(session, action.line_index)
        if line is None:
            return BotReply(notice=STALE_ACTION)
        match = next((c for c in line.candidates if c.code == action.code), None)
        if match is None:
            return BotReply(notice=INVALID_PRODUCT)
        reply = BotReply(notice=f"✅ {match.description}")
        return reply.extend(self._start_pricing(session, action.line_index, match))

    def pick_candidate(self, session: OrderSession, action: PickLineCandidate) -> BotReply:
        line = self._line_under_cursor(session, action.line_index)
        if line is None:
            return BotReply(notice=STALE_ACTION)
        if action.candidate_index >= len(line.candidates):
            return BotReply(notice=INVALID_PRODUCT)
        match = line.candidates[action.candidate_index]
        reply = BotReply(notice=f"✅ {match.description[:40]}")
        return reply.extend(self._start_pricing(session, action.line_index, match))

    def skip(self, session: OrderSession, action: SkipLine) -> BotReply:
        line = self._line_under_cursor(session, action.line_index)
        if line is None:
            return BotReply(notice=STALE_ACTION)
        if session.pending_pricing is not None and session.pending_pricing.idx == action.line_index:
            session.pending_pricing = None
        session.advance_past(action.line_index)
        reply = BotReply(notice="Producto omitido")
        reply.say(self.messages.line_skipped(line), edit=True)
        return reply.extend(self.present_current(session))

    # ------------------------------------------------------------------
    # Quantity edit
    # ------------------------------------------------------------------

    def edit_quantity(self, session: OrderSession, action: EditQuantity) -> BotReply:
        line = self._line_under_cursor(session, action.line_index)
        if line is None:
            return BotReply(notice=STALE_ACTION)
        session.step = SessionStep.WAITING_QUANTITY
        session.target_index = action.line_index
        return BotReply().say(self.messages.ask_quantity(line))

    def receive_quantity(self, session: OrderSession, text: str) -> BotReply:
        quantity = parse_quantity(text)
        if quantity is None:
            return BotReply().say(self.messages.invalid_quantity())

        line = session.line_at(session.target_index if session.target_index is not None else -1)
        session.target_index = None
        if line is None:
            return self.present_current(session)
        line.requested_qty = quantity
        reply = BotReply().say(self.messages.quantity_updated(quantity))
        return reply.extend(self.present_current(session))

    # ------------------------------------------------------------------
    # Re-search
    # ------------------------------------------------------------------

    def retry(self, session: OrderSession, action: RetryLine) -> BotReply:
        line = self._line_under_cursor(session, action.line_index)
        if line is None:
            return BotReply(notice=STALE_ACTION)
        session.step = SessionStep.RETRYING_PRODUCT
        session.target_index = action.line_index
        return BotReply().say(self.messages.ask_retry_text(line))

    async def receive_retry(self, session: OrderSession, text: str) -> BotReply:
        """Search again for the targeted line; the cursor does not move."""
        line = session.line_at(session.target_index if session.target_index is not None else -1)
        session.target_index = None
        if line is None:
            return self.present_current(session)
        line.candidates = await self.product_matcher.search(text)
        line.original_text = text.strip()
        return self.present_current(session)
