"""
Bot Event Schemas for Sales Bot
===============================

Pydantic models for the chat transport webhook. The transport forwards every
operator event (a typed message or a button press) to POST /bot/events and
renders the prompts it gets back.

Key Concepts:
-------------
1. **Events**: Exactly one of `text` or `action` is set. Text starting with
   "/" is a slash command. `action` is the raw colon-delimited string the
   pressed button carried ("prod_ok:0:BOL812N").

2. **Prompts**: Each response prompt has text plus rows of buttons. A
   button's `action` is the string to send back when it is pressed.

3. **Edits**: When a prompt replaces the message whose button was pressed,
   `edit_message_id` echoes the request's `message_id`.

Validation:
-----------
- text cannot exceed MAX_MESSAGE_LENGTH characters.
- action strings are capped at 256 characters.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..config import MAX_MESSAGE_LENGTH

MAX_ACTION_LENGTH = 256


class ChatUserIn(BaseModel):
    """
    Operator identity as reported by the chat transport.

    Attributes:
        id: Stable numeric user id; sessions are keyed by it
        username: Chat handle, if any
        first_name: Given name, used in the welcome text
        last_name: Family name
    """
    id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""


class BotEventRequest(BaseModel):
    """
    Request body for POST /bot/events.

    Attributes:
        user: Operator who sent the event
        text: Typed message (or slash command)
        action: Raw action string of a pressed button
        message_id: Transport id of the message carrying the pressed button
    """
    user: ChatUserIn
    text: Optional[str] = Field(None, min_length=1, max_length=MAX_MESSAGE_LENGTH)
    action: Optional[str] = Field(None, min_length=1, max_length=MAX_ACTION_LENGTH)
    message_id: Optional[int] = None

    @model_validator(mode="after")
    def check_one_payload(self) -> "BotEventRequest":
        if (self.text is None) == (self.action is None):
            raise ValueError("exactly one of text or action is required")
        return self


class ButtonOut(BaseModel):
    label: str
    action: str


class PromptOut(BaseModel):
    """
    One message to render.

    Attributes:
        text: Markdown text
        buttons: Rows of buttons, top to bottom
        edit_message_id: Replace this message instead of sending a new one
    """
    text: str
    buttons: List[List[ButtonOut]] = Field(default_factory=list)
    edit_message_id: Optional[int] = None


class BotEventResponse(BaseModel):
    """
    Response from POST /bot/events.

    Attributes:
        prompts: Messages to render, in order
        notice: Short acknowledgement for the button press, if any
    """
    prompts: List[PromptOut] = Field(default_factory=list)
    notice: Optional[str] = None
