"""
Bot Routes for Sales Bot
========================

This module contains the webhook the chat transport calls for every operator
event. The transport owns the chat platform connection; this endpoint only
turns events into prompts.

Endpoints:
----------
- POST /bot/events: Handle one text message, slash command or button press

Event Flow:
-----------
1. The transport posts {user, text} or {user, action, message_id}
2. Raw action strings and slash commands are decoded here, at the boundary
3. OrderBot runs the state machine inside the user's session lock
4. The reply's prompts are returned with their buttons encoded back into
   action strings

Rate Limiting:
--------------
The endpoint is rate limited per chat user (default: 60/minute), falling
back to the client IP when the body has no user id.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_bot
from ..schemas.bot import BotEventRequest, BotEventResponse, ButtonOut, PromptOut
from ..tasks import BotReply, ChatUser, OrderBot, encode_action

logger = logging.getLogger(__name__)

# Router definition
bot_router = APIRouter(prefix="/bot", tags=["Bot"])


# =============================================================================
# Rate Limiting Setup
# =============================================================================

async def cache_body_json(request: Request) -> None:
    """Keep the parsed body on request.state so the rate limit key can use it."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    request.state.body_json = body if isinstance(body, dict) else None


def get_chat_user_or_ip(request: Request) -> str:
    """Get rate limit key from the event's user id or fall back to IP."""
    body = getattr(request.state, "body_json", None)
    if body:
        user = body.get("user")
        if isinstance(user, dict) and user.get("id") is not None:
            return f"chat_user:{user['id']}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_chat_user_or_ip, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Helper Functions
# =============================================================================

def get_order_bot(request: Request) -> OrderBot:
    """FastAPI dependency returning the OrderBot built at startup."""
    bot = getattr(request.app.state, "order_bot", None)
    if bot is None:
        raise HTTPException(status_code=503, detail="Bot not initialized")
    return bot


def reply_to_response(reply: BotReply, message_id: Optional[int]) -> BotEventResponse:
    """Encode a BotReply for the transport."""
    prompts = []
    for prompt in reply.prompts:
        prompts.append(PromptOut(
            text=prompt.text,
            buttons=[
                [ButtonOut(label=button.label, action=encode_action(button.action)) for button in row]
                for row in prompt.buttons
            ],
            edit_message_id=message_id if prompt.edit else None,
        ))
    return BotEventResponse(prompts=prompts, notice=reply.notice)


# =============================================================================
# Bot Endpoints
# =============================================================================

@bot_router.post(
    "/events",
    response_model=BotEventResponse,
    dependencies=[Depends(cache_body_json)],
)
@limiter.limit(get_rate_limit_bot)
async def bot_event(
    request: Request,
    event: BotEventRequest,
    bot: OrderBot = Depends(get_order_bot),
) -> BotEventResponse:
    """Handle one operator event and return the prompts to render."""
    user = ChatUser(**event.user.model_dump())

    if event.action is not None:
        reply = await bot.on_action(user, event.action)
    else:
        reply = await bot.on_text(user, event.text)

    logger.debug(
        "Event from user %s answered with %d prompts", user.id, len(reply.prompts),
    )
    return reply_to_response(reply, event.message_id)
