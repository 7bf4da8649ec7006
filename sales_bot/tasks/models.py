"""
Pydantic models for the order-building conversation.

The session hierarchy:
- OrderSession (one per chat user)
  - PendingLine[] (parsed from the operator's product list)
    - CatalogMatch[] (scored candidates for that line)
  - PendingPricing (candidate accepted, waiting for normal vs special price)
  - ConfirmedItem[] (lines with a chosen product and price)
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .schemas import SessionStep


class ChatUser(BaseModel):
    """Operator identity as delivered by the chat transport."""

    id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CatalogMatch(BaseModel):
    """A catalog row scored against one query. The score only means something within that search."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    price: float = 0.0
    stock: float = 0.0
    score: float = 0.0


class PendingLine(BaseModel):
    """One quantity + description entry waiting to be resolved."""

    original_text: str
    requested_qty: int = 1
    candidates: list[CatalogMatch] = Field(default_factory=list)


class PendingPricing(BaseModel):
    """A candidate accepted for line idx, waiting for a price decision."""

    code: str
    description: str
    quantity: int
    normal_price: float
    stock: float
    idx: int


class ConfirmedItem(BaseModel):
    """A finalized order line."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    quantity: int
    price: float
    original_price: Optional[float] = None
    stock: float = 0.0

    @property
    def line_total(self) -> float:
        return self.quantity * self.price

    @property
    def has_special_price(self) -> bool:
        return self.original_price is not None and self.original_price != self.price

    @property
    def stock_ok(self) -> bool:
        return self.stock >= self.quantity


class OrderSession(BaseModel):
    """
    Conversation record for one chat user.

    Exactly one exists per user while an order is being built. It is dropped
    when the order is committed or cancelled.
    """

    step: SessionStep
    client: Optional[str] = None
    client_query: Optional[str] = None
    pending_lines: list[PendingLine] = Field(default_factory=list)
    confirmed_items: list[ConfirmedItem] = Field(default_factory=list)
    current_index: int = 0
    pending_pricing: Optional[PendingPricing] = None
    # Line targeted by an in-flight quantity edit or re-search
    target_index: Optional[int] = None
    raw_input_log: str = ""
    last_touched: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def current_line(self) -> Optional[PendingLine]:
        """The pending line under the cursor, or None once all lines are walked."""
        if 0 <= self.current_index < len(self.pending_lines):
            return self.pending_lines[self.current_index]
        return None

    def line_at(self, index: int) -> Optional[PendingLine]:
        if 0 <= index < len(self.pending_lines):
            return self.pending_lines[index]
        return None

    def total(self) -> float:
        """Order total, always recomputed from the confirmed items."""
        return sum(item.line_total for item in self.confirmed_items)

    def append_raw_input(self, text: str) -> None:
        self.raw_input_log = f"{self.raw_input_log}\n{text}" if self.raw_input_log else text

    def advance_past(self, index: int) -> None:
        """Move the cursor just past line index; it never moves backwards or past the end."""
        self.current_index = max(self.current_index, min(index + 1, len(self.pending_lines)))
