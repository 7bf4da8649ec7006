"""
State Machine Schemas.

This package contains the step enum and the reply structures produced by the
order state machine.
"""

from .phases import SessionStep
from .result import Button, Prompt, BotReply

__all__ = [
    "SessionStep",
    "Button",
    "Prompt",
    "BotReply",
]
