"""
Tests for the button action codec and slash command parsing.
"""
import pytest

from sales_bot.tasks.actions import (
    AddMoreItems,
    Command,
    ConfirmLineMatch,
    PickLineCandidate,
    RemoveConfirmedItem,
    SelectClient,
    SkipLine,
    UnknownAction,
    decode_action,
    encode_action,
    parse_command,
)


class TestActionCodec:

    def test_encode_line_match(self):
        assert encode_action(ConfirmLineMatch(2, "BOL812N")) == "prod_ok:2:BOL812N"

    def test_decode_known_actions(self):
        assert decode_action("prod_ok:2:BOL812N") == ConfirmLineMatch(2, "BOL812N")
        assert decode_action("prod_sel:0:3") == PickLineCandidate(0, 3)
        assert decode_action("prod_skip:1") == SkipLine(1)
        assert decode_action("prod_remove:0") == RemoveConfirmedItem(0)
        assert decode_action("agregar_mas_productos") == AddMoreItems()

    def test_client_name_with_colon(self):
        action = decode_action("sel_cli:ABARROTES: LUPITA")
        assert action == SelectClient("ABARROTES: LUPITA")
        assert encode_action(action) == "sel_cli:ABARROTES: LUPITA"

    def test_product_code_with_colon(self):
        assert decode_action("prod_ok:0:A:B") == ConfirmLineMatch(0, "A:B")

    @pytest.mark.parametrize("raw", [
        "nope",
        "",
        "prod_ok:x:BOL812N",
        "prod_ok:1",
        "prod_skip",
        "prod_skip:1:2",
        "prod_remove:-1",
        "orden_confirmar:extra",
        "sel_cli:",
    ])
    def test_malformed_actions_decode_to_unknown(self, raw):
        action = decode_action(raw)
        assert isinstance(action, UnknownAction)
        assert action.raw == raw

    def test_unknown_action_encodes_raw_string(self):
        assert encode_action(UnknownAction("zz:1")) == "zz:1"


class TestParseCommand:

    def test_name_and_argument(self):
        assert parse_command("/stock bolsa negra") == Command("stock", "bolsa negra")

    def test_lowercases_and_drops_bot_mention(self):
        assert parse_command("/Stock@ventas_bot  bolsa ") == Command("stock", "bolsa")

    def test_no_argument(self):
        assert parse_command("/ayuda") == Command("ayuda", "")

    @pytest.mark.parametrize("text", ["hola", "/", "", "  texto /stock"])
    def test_not_a_command(self, text):
        assert parse_command(text) is None
