"""
Bot Reply Structures.

Defines what the state machine hands back to the chat transport: one or more
prompts, each with optional rows of labeled buttons, plus an optional short
notice used to acknowledge a button press.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..actions import Action


@dataclass(frozen=True)
class Button:
    """A labeled button that sends a structured action when pressed."""
    label: str
    action: Action


@dataclass
class Prompt:
    """
    A text prompt rendered by the transport.

    When edit is True the transport replaces the message that carried the
    triggering action instead of sending a new one.
    """
    text: str
    buttons: list[list[Button]] = field(default_factory=list)
    edit: bool = False


@dataclass
class BotReply:
    """Result of handling one inbound event."""
    prompts: list[Prompt] = field(default_factory=list)
    notice: Optional[str] = None

    def say(self, text: str, buttons: Optional[list[list[Button]]] = None, edit: bool = False) -> "BotReply":
        """Append a prompt and return self for chaining."""
        self.prompts.append(Prompt(text=text, buttons=buttons or [], edit=edit))
        return self

    def extend(self, other: "BotReply") -> "BotReply":
        """Append another reply's prompts; its notice wins if this one has none."""
        self.prompts.extend(other.prompts)
        if self.notice is None:
            self.notice = other.notice
        return self

    @property
    def texts(self) -> list[str]:
        """Plain texts of all prompts, in order."""
        return [prompt.text for prompt in self.prompts]
