"""
Schemas Package for Sales Bot
=============================

This package contains the Pydantic models used for HTTP request validation
and response serialization.

Schema Organization:
--------------------
- **bot.py**: Chat transport webhook events and rendered prompts
- **orders.py**: Admin order lookup, status counts and catalog reload

Naming Conventions:
-------------------
- *In: Nested request models (e.g., ChatUserIn)
- *Out: Response models (e.g., OrderDetailOut)
- *Request / *Response: Top-level bodies (e.g., BotEventRequest)

The conversation's own models (sessions, lines, replies) live in
sales_bot.tasks; these schemas only describe the wire format.
"""

from .bot import (
    ChatUserIn,
    BotEventRequest,
    ButtonOut,
    PromptOut,
    BotEventResponse,
)

from .orders import (
    OrderDetailOut,
    StatusCountOut,
    StatusCountsResponse,
    CatalogReloadResponse,
)

__all__ = [
    "ChatUserIn",
    "BotEventRequest",
    "ButtonOut",
    "PromptOut",
    "BotEventResponse",
    "OrderDetailOut",
    "StatusCountOut",
    "StatusCountsResponse",
    "CatalogReloadResponse",
]
