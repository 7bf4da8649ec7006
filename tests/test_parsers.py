"""
Tests for the deterministic operator-input parsers.
"""
import pytest

from sales_bot.tasks.parsers import (
    ParsedLine,
    looks_like_product,
    parse_lines,
    parse_price,
    parse_quantity,
)


class TestParseLines:

    def test_mixed_formats(self):
        text = "10 bolsa 8x12 negra\n\ncamiseta x5\nvaso"
        assert parse_lines(text) == [
            ParsedLine(10, "bolsa 8x12 negra"),
            ParsedLine(5, "camiseta"),
            ParsedLine(1, "vaso"),
        ]

    def test_leading_quantity_with_x(self):
        assert parse_lines("10x bolsa negra") == [ParsedLine(10, "bolsa negra")]
        assert parse_lines("10 x bolsa negra") == [ParsedLine(10, "bolsa negra")]

    def test_trailing_quantity_uppercase_x(self):
        assert parse_lines("camiseta blanca X 12") == [ParsedLine(12, "camiseta blanca")]

    def test_blank_input(self):
        assert parse_lines("") == []
        assert parse_lines("\n  \n") == []


class TestLooksLikeProduct:

    @pytest.mark.parametrize("text", [
        "8x12 negra",
        "10 bolsas",
        "t40",
        "T 15 blanca",
        "812",
        "rollo",
        "Bolsa",
    ])
    def test_product_like(self, text):
        assert looks_like_product(text)

    @pytest.mark.parametrize("text", [
        "Granjas del Sur",
        "Lupita",
        "5512345678",
        "",
    ])
    def test_client_like(self, text):
        assert not looks_like_product(text)


class TestParseQuantity:

    def test_plain_and_suffixed(self):
        assert parse_quantity("12") == 12
        assert parse_quantity(" 12 piezas") == 12

    @pytest.mark.parametrize("text", ["0", "-3", "abc", ""])
    def test_invalid(self, text):
        assert parse_quantity(text) is None


class TestParsePrice:

    def test_plain(self):
        assert parse_price("85.50") == 85.5

    def test_currency_and_thousands(self):
        assert parse_price("$1,250.50") == 1250.5

    def test_leading_decimal_point(self):
        assert parse_price(".5") == 0.5

    @pytest.mark.parametrize("text", ["0", "-5", "abc", "", "12.5.1"])
    def test_invalid(self, text):
        assert parse_price(text) is None
