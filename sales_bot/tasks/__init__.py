"""
Order-Building Conversation Core.

This package turns chat events into orders:
- Text normalization and product-line parsing (parsers/)
- Catalog and client matching
- Typed structured actions decoded at the transport boundary
- A deterministic per-step state machine with focused handlers
- Order assembly through injected collaborators

Nothing in here touches a database or network client directly; the
services package provides the SQLAlchemy-backed collaborators.
"""

from .actions import (
    Action,
    Command,
    UnknownAction,
    decode_action,
    encode_action,
    parse_command,
)

from .collaborators import (
    CatalogQuery,
    ClientQuery,
    ClientRow,
    OrderNotifier,
    OrderPersistenceError,
    OrderRepository,
    ProductRow,
)

from .models import (
    CatalogMatch,
    ChatUser,
    ConfirmedItem,
    OrderSession,
    PendingLine,
    PendingPricing,
)

from .schemas import (
    BotReply,
    Button,
    Prompt,
    SessionStep,
)

from .product_matcher import ProductMatcher, score_description
from .client_matcher import ClientMatcher
from .order_assembler import OrderAssembler
from .state_machine import OrderStateMachine
from .dispatcher import OrderBot

__all__ = [
    # Actions
    "Action",
    "Command",
    "UnknownAction",
    "decode_action",
    "encode_action",
    "parse_command",
    # Collaborators
    "CatalogQuery",
    "ClientQuery",
    "ClientRow",
    "OrderNotifier",
    "OrderPersistenceError",
    "OrderRepository",
    "ProductRow",
    # Models
    "CatalogMatch",
    "ChatUser",
    "ConfirmedItem",
    "OrderSession",
    "PendingLine",
    "PendingPricing",
    # Results
    "BotReply",
    "Button",
    "Prompt",
    "SessionStep",
    # Engine
    "ProductMatcher",
    "score_description",
    "ClientMatcher",
    "OrderAssembler",
    "OrderStateMachine",
    "OrderBot",
]
