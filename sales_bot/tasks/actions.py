"""
Structured Actions and Commands.

Buttons rendered by the chat transport carry a short colon-delimited string
("prod_ok:2:BOL812N"). Those strings are decoded exactly once, at the
transport boundary, into the typed actions below; the state machine only
ever sees Action instances.

Wire vocabulary:
    sel_cli:<name>              SelectClient
    prod_ok:<line>:<code>       ConfirmLineMatch
    prod_sel:<line>:<cand>      PickLineCandidate
    prod_skip:<line>            SkipLine
    prod_retry:<line>           RetryLine
    precio_normal:<line>        AcceptNormalPrice
    precio_especial:<line>      RequestSpecialPrice
    prod_edit_qty:<line>        EditQuantity
    prod_remove:<item>          RemoveConfirmedItem
    agregar_mas_productos       AddMoreItems
    orden_confirmar             ConfirmOrder
    orden_sin_nota              ConfirmOrderWithoutNote
    orden_cancelar              CancelOrder
    nuevo_pedido                StartNewOrder
    ver_productos               ShowProducts
    cmd_ayuda                   ShowHelp
    buscar_otro_cliente         SearchAgain

Anything else, including known names with malformed arguments, decodes to
UnknownAction.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

logger = logging.getLogger(__name__)


class Action:
    """Base class for structured actions."""

    wire_name: ClassVar[str] = ""

    def wire_args(self) -> list[str]:
        return []

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "Action":
        if args:
            raise ValueError(f"{cls.wire_name} takes no arguments")
        return cls()


def _parse_index(value: str) -> int:
    index = int(value)
    if index < 0:
        raise ValueError("negative index")
    return index


@dataclass(frozen=True)
class SelectClient(Action):
    wire_name: ClassVar[str] = "sel_cli"
    name: str

    def wire_args(self) -> list[str]:
        return [self.name]

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "SelectClient":
        # Client names may themselves contain colons
        name = ":".join(args)
        if not name:
            raise ValueError("missing client name")
        return cls(name=name)


@dataclass(frozen=True)
class ConfirmLineMatch(Action):
    wire_name: ClassVar[str] = "prod_ok"
    line_index: int
    code: str

    def wire_args(self) -> list[str]:
        return [str(self.line_index), self.code]

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "ConfirmLineMatch":
        if len(args) < 2:
            raise ValueError("expected line index and product code")
        return cls(line_index=_parse_index(args[0]), code=":".join(args[1:]))


@dataclass(frozen=True)
class PickLineCandidate(Action):
    wire_name: ClassVar[str] = "prod_sel"
    line_index: int
    candidate_index: int

    def wire_args(self) -> list[str]:
        return [str(self.line_index), str(self.candidate_index)]

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "PickLineCandidate":
        if len(args) != 2:
            raise ValueError("expected line index and candidate index")
        return cls(line_index=_parse_index(args[0]), candidate_index=_parse_index(args[1]))


@dataclass(frozen=True)
class _LineAction(Action):
    line_index: int

    def wire_args(self) -> list[str]:
        return [str(self.line_index)]

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "_LineAction":
        if len(args) != 1:
            raise ValueError(f"{cls.wire_name} expects one index")
        return cls(_parse_index(args[0]))


@dataclass(frozen=True)
class SkipLine(_LineAction):
    wire_name: ClassVar[str] = "prod_skip"


@dataclass(frozen=True)
class RetryLine(_LineAction):
    wire_name: ClassVar[str] = "prod_retry"


@dataclass(frozen=True)
class AcceptNormalPrice(_LineAction):
    wire_name: ClassVar[str] = "precio_normal"


@dataclass(frozen=True)
class RequestSpecialPrice(_LineAction):
    wire_name: ClassVar[str] = "precio_especial"


@dataclass(frozen=True)
class EditQuantity(_LineAction):
    wire_name: ClassVar[str] = "prod_edit_qty"


@dataclass(frozen=True)
class RemoveConfirmedItem(Action):
    wire_name: ClassVar[str] = "prod_remove"
    item_index: int

    def wire_args(self) -> list[str]:
        return [str(self.item_index)]

    @classmethod
    def from_wire_args(cls, args: list[str]) -> "RemoveConfirmedItem":
        if len(args) != 1:
            raise ValueError("prod_remove expects one index")
        return cls(item_index=_parse_index(args[0]))


@dataclass(frozen=True)
class AddMoreItems(Action):
    wire_name: ClassVar[str] = "agregar_mas_productos"


@dataclass(frozen=True)
class ConfirmOrder(Action):
    wire_name: ClassVar[str] = "orden_confirmar"


@dataclass(frozen=True)
class ConfirmOrderWithoutNote(Action):
    wire_name: ClassVar[str] = "orden_sin_nota"


@dataclass(frozen=True)
class CancelOrder(Action):
    wire_name: ClassVar[str] = "orden_cancelar"


@dataclass(frozen=True)
class StartNewOrder(Action):
    wire_name: ClassVar[str] = "nuevo_pedido"


@dataclass(frozen=True)
class ShowProducts(Action):
    wire_name: ClassVar[str] = "ver_productos"


@dataclass(frozen=True)
class ShowHelp(Action):
    wire_name: ClassVar[str] = "cmd_ayuda"


@dataclass(frozen=True)
class SearchAgain(Action):
    wire_name: ClassVar[str] = "buscar_otro_cliente"


@dataclass(frozen=True)
class UnknownAction(Action):
    """An action string that did not decode; answered with a harmless notice."""
    raw: str

    def wire_args(self) -> list[str]:
        return []


ACTION_TYPES: dict[str, type[Action]] = {
    cls.wire_name: cls
    for cls in (
        SelectClient,
        ConfirmLineMatch,
        PickLineCandidate,
        SkipLine,
        RetryLine,
        AcceptNormalPrice,
        RequestSpecialPrice,
        EditQuantity,
        RemoveConfirmedItem,
        AddMoreItems,
        ConfirmOrder,
        ConfirmOrderWithoutNote,
        CancelOrder,
        StartNewOrder,
        ShowProducts,
        ShowHelp,
        SearchAgain,
    )
}


def encode_action(action: Action) -> str:
    """Encode an action into its colon-delimited wire string."""
    if isinstance(action, UnknownAction):
        return action.raw
    return ":".join([action.wire_name, *action.wire_args()])


def decode_action(raw: str) -> Action:
    """
    Decode a wire string into a typed action.

    Never raises: unknown names and malformed arguments yield UnknownAction.
    """
    name, _, rest = (raw or "").partition(":")
    action_type = ACTION_TYPES.get(name)
    if action_type is None:
        logger.debug("Unknown action name: %r", name)
        return UnknownAction(raw=raw or "")
    args = rest.split(":") if rest else []
    try:
        return action_type.from_wire_args(args)
    except ValueError as e:
        logger.debug("Malformed action %r: %s", raw, e)
        return UnknownAction(raw=raw)


# =============================================================================
# Commands
# =============================================================================

@dataclass(frozen=True)
class Command:
    """A slash command typed by the operator ("/stock bolsa negra")."""
    name: str
    argument: str = ""


def parse_command(text: str) -> Optional[Command]:
    """
    Parse "/name [argument]" into a Command.

    The name is lowercased and a trailing "@botname" mention is dropped.
    Returns None when the text is not a command.
    """
    stripped = (text or "").strip()
    if not stripped.startswith("/") or len(stripped) == 1:
        return None
    head, _, argument = stripped[1:].partition(" ")
    name = head.split("@", 1)[0].lower()
    if not name:
        return None
    return Command(name=name, argument=argument.strip())


InboundEvent = Union[str, Action, Command]
