"""
State Machine for Order Flow.

This module routes every inbound event of the order-building conversation:
free text, structured button actions and slash commands. Free text is
interpreted according to the session step; actions carry typed payloads and
are applied to the session whatever its step.

Steps and their text handlers:
    (no session)               auto-detect product lookup vs client search
    esperando_cliente          client search, starts the flow
    esperando_productos        product list -> line verification
    agregando_productos        product list, confirmed items kept
    esperando_cantidad         new quantity for the targeted line
    reintentando_producto      new search text for the targeted line
    esperando_precio_especial  special price for the held candidate
    esperando_nota             note, then commit
    anything else              client search, replaces the session

The machine never awaits two things for the same user at once: callers
serialize events per user (see OrderBot).
"""

import logging
from typing import TYPE_CHECKING, Optional

from .actions import (
    AcceptNormalPrice,
    Action,
    AddMoreItems,
    CancelOrder,
    Command,
    ConfirmLineMatch,
    ConfirmOrder,
    ConfirmOrderWithoutNote,
    EditQuantity,
    PickLineCandidate,
    RemoveConfirmedItem,
    RequestSpecialPrice,
    RetryLine,
    SearchAgain,
    SelectClient,
    ShowHelp,
    ShowProducts,
    SkipLine,
    StartNewOrder,
    UnknownAction,
)
from .checkout_handler import CheckoutHandler
from .client_handler import ClientHandler
from .client_matcher import ClientMatcher
from .collaborators import CatalogQuery, OrderRepository
from .line_review_handler import LineReviewHandler
from .lookup_handler import LookupHandler
from .message_builder import SESSION_EXPIRED, UNKNOWN_ACTION, MessageBuilder
from .models import ChatUser, OrderSession
from .order_assembler import OrderAssembler
from .parsers import looks_like_product
from .pricing_handler import PricingHandler
from .product_matcher import ProductMatcher
from .schemas import BotReply, SessionStep

if TYPE_CHECKING:
    from ..catalog_cache import CatalogCache
    from ..services.session import SessionStore

logger = logging.getLogger(__name__)


class OrderStateMachine:
    """
    Deterministic conversation core for building orders.

    Owns no state itself: sessions live in the SessionStore, collaborators
    are injected. Each handle_* call returns the BotReply to render.
    """

    def __init__(
        self,
        store: "SessionStore",
        product_matcher: ProductMatcher,
        client_matcher: ClientMatcher,
        assembler: OrderAssembler,
        catalog: Optional[CatalogQuery] = None,
        cache: "CatalogCache | None" = None,
        orders: Optional[OrderRepository] = None,
        messages: Optional[MessageBuilder] = None,
    ):
        self.store = store
        self.product_matcher = product_matcher
        self.messages = messages or MessageBuilder()

        self.clients = ClientHandler(store, client_matcher, self.messages)
        self.checkout = CheckoutHandler(store, assembler, self.messages)
        self.lookups = LookupHandler(
            self.messages,
            catalog=catalog,
            cache=cache,
            client_matcher=client_matcher,
            orders=orders,
        )
        self.pricing = PricingHandler(
            self.messages,
            present_current=lambda session: self.lines.present_current(session),
        )
        self.lines = LineReviewHandler(
            product_matcher,
            self.messages,
            start_pricing=self.pricing.ask,
            show_summary=self.checkout.show_summary,
        )

    def _persist(self, user_id: int, session: OrderSession) -> None:
        """Save the session unless the handler replaced or cleared it."""
        if self.store.get(user_id) is session:
            self.store.save(user_id, session)

    # ------------------------------------------------------------------
    # Free text
    # ------------------------------------------------------------------

    async def handle_text(self, user: ChatUser, text: str) -> BotReply:
        text = (text or "").strip()
        if not text:
            return BotReply()

        session = self.store.get(user.id)
        if session is None:
            return await self._auto_detect(user, text)

        step = session.step
        logger.debug("Text from user %s at step %s", user.id, step.value)

        if step == SessionStep.WAITING_CLIENT:
            reply = await self.clients.search(user, text, start_flow=True)
        elif step in (SessionStep.WAITING_PRODUCTS, SessionStep.ADDING_PRODUCTS):
            reply = await self.lines.receive_products(session, text)
        elif step == SessionStep.WAITING_QUANTITY:
            reply = self.lines.receive_quantity(session, text)
        elif step == SessionStep.WAITING_SPECIAL_PRICE:
            reply = self.pricing.receive_special_price(session, text)
        elif step == SessionStep.WAITING_NOTE:
            reply = await self.checkout.finalize(user, session, text)
        elif step == SessionStep.RETRYING_PRODUCT:
            reply = await self.lines.receive_retry(session, text)
        else:
            reply = await self.clients.search(user, text, start_flow=True)

        self._persist(user.id, session)
        return reply

    async def _auto_detect(self, user: ChatUser, text: str) -> BotReply:
        """
        Idle text: a product-looking text with catalog hits is answered as a
        stock lookup; anything else is treated as a client name.
        """
        if looks_like_product(text):
            matches = await self.product_matcher.search(text)
            if matches:
                logger.debug("Idle text from user %s looks like a product", user.id)
                return BotReply().say(self.messages.product_hits(text, matches))
        return await self.clients.search(user, text, start_flow=True)

    # ------------------------------------------------------------------
    # Structured actions
    # ------------------------------------------------------------------

    async def handle_action(self, user: ChatUser, action: Action) -> BotReply:
        logger.debug("Action from user %s: %r", user.id, action)

        if isinstance(action, UnknownAction):
            return BotReply(notice=UNKNOWN_ACTION)

        # Actions that do not need a session in progress
        if isinstance(action, StartNewOrder):
            return self.clients.start_order(user)
        if isinstance(action, ShowProducts):
            return await self.lookups.product_list()
        if isinstance(action, ShowHelp):
            return BotReply().say(self.messages.help())
        if isinstance(action, SearchAgain):
            return self.clients.search_again(user)
        if isinstance(action, SelectClient):
            return self.clients.select(user, action.name)
        if isinstance(action, CancelOrder):
            self.store.clear(user.id)
            return BotReply(notice="Pedido cancelado").say(self.messages.order_cancelled(), edit=True)

        session = self.store.get(user.id)
        if session is None:
            return BotReply(notice=SESSION_EXPIRED)

        if isinstance(action, ConfirmLineMatch):
            reply = self.lines.confirm_match(session, action)
        elif isinstance(action, PickLineCandidate):
            reply = self.lines.pick_candidate(session, action)
        elif isinstance(action, SkipLine):
            reply = self.lines.skip(session, action)
        elif isinstance(action, RetryLine):
            reply = self.lines.retry(session, action)
        elif isinstance(action, EditQuantity):
            reply = self.lines.edit_quantity(session, action)
        elif isinstance(action, AcceptNormalPrice):
            reply = self.pricing.accept_normal(session, action)
        elif isinstance(action, RequestSpecialPrice):
            reply = self.pricing.request_special(session, action)
        elif isinstance(action, RemoveConfirmedItem):
            reply = self.checkout.remove_item(session, action)
        elif isinstance(action, AddMoreItems):
            reply = self.checkout.add_more(session)
        elif isinstance(action, ConfirmOrder):
            reply = self.checkout.ask_note(session)
        elif isinstance(action, ConfirmOrderWithoutNote):
            reply = await self.checkout.finalize(user, session, "", edit=True)
        else:
            logger.warning("Unhandled action type: %s", type(action).__name__)
            return BotReply(notice=UNKNOWN_ACTION)

        self._persist(user.id, session)
        return reply

    # ------------------------------------------------------------------
    # Slash commands
    # ------------------------------------------------------------------

    async def handle_command(self, user: ChatUser, command: Command) -> BotReply:
        name, argument = command.name, command.argument
        logger.debug("Command from user %s: /%s", user.id, name)

        if name == "start":
            self.store.clear(user.id)
            text, buttons = self.messages.welcome(user.first_name or user.username)
            return BotReply().say(text, buttons)
        if name in ("ayuda", "help"):
            return BotReply().say(self.messages.help())
        if name == "cancelar":
            if self.store.clear(user.id):
                return BotReply().say(self.messages.order_cancelled())
            return BotReply().say(self.messages.no_order_in_progress())
        if name in ("pedido", "p"):
            return self.clients.start_order(user)
        if name == "productos":
            return await self.lookups.product_list()
        if name in ("ordenes", "o"):
            return await self.lookups.order_counts()

        if name in ("stock", "s"):
            if not argument:
                return BotReply().say(self.messages.usage("stock", "nombre_producto"))
            return await self.lookups.stock(argument)
        if name in ("cliente", "c"):
            if not argument:
                return BotReply().say(self.messages.usage("cliente", "nombre"))
            return await self.clients.search(user, argument, start_flow=False)
        if name in ("buscar", "b"):
            if not argument:
                return BotReply().say(self.messages.usage("buscar", "texto"))
            return await self.lookups.combined(argument)

        return BotReply().say(self.messages.unknown_command())
