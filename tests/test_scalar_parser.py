"""
tests/test_scalar_parser.py

Pytest unit tests for cell-level parsing and coercion.
"""

from __future__ import annotations

import pytest

from app.validators.scalar_parser import (
    coerce_number,
    format_scalar,
    normalize_locale_number,
    parse_scalar,
    strip_quotes,
    to_number,
)


class TestParseScalar:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("R$ 1.234,56", 1234.56),
            ("12,5%", 12.5),
            ("42", 42),
            ("1234.5", 1234.5),
            ("-3,75", -3.75),
            ("1.234.567,89", 1234567.89),
            ('"R$ 10,00"', 10.0),
            ("R$ 199,90", 199.9),
            ("  7  ", 7),
        ],
    )
    def test_numeric_values(self, raw: str, expected: float) -> None:
        result = parse_scalar(raw)
        assert isinstance(result, float)
        assert result == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_input_yields_empty_string(self, raw: str | None) -> None:
        assert parse_scalar(raw) == ""

    def test_text_is_returned_without_quotes_and_whitespace(self) -> None:
        assert parse_scalar('  "facebook_ads"  ') == "facebook_ads"

    def test_text_with_comma_inside_quotes_is_kept(self) -> None:
        assert parse_scalar('"Promo, Black Friday"') == "Promo, Black Friday"

    def test_dotted_number_without_comma_is_not_rewritten(self) -> None:
        assert parse_scalar("1.234.567") == "1.234.567"

    def test_currency_marker_alone_becomes_empty_string(self) -> None:
        assert parse_scalar("R$") == ""

    def test_non_numeric_currency_text_keeps_cleaned_form(self) -> None:
        assert parse_scalar("R$ abc") == "abc"

    def test_date_strings_stay_text(self) -> None:
        assert parse_scalar("01/02/2024 10:30") == "01/02/2024 10:30"

    def test_overflowing_literal_stays_text(self) -> None:
        assert parse_scalar("1e999") == "1e999"

    def test_never_raises_on_odd_input(self) -> None:
        for raw in ['"', '""', ",", "%", "R$%", "-", "."]:
            parse_scalar(raw)


class TestHelpers:
    def test_strip_quotes_removes_one_layer(self) -> None:
        assert strip_quotes('""x""') == '"x"'

    def test_strip_quotes_handles_unbalanced_quote(self) -> None:
        assert strip_quotes('"abc') == "abc"

    def test_normalize_only_touches_marked_values(self) -> None:
        assert normalize_locale_number("1.5") == "1.5"
        assert normalize_locale_number("1,5") == "1.5"
        assert normalize_locale_number("R$ 2.000,00") == "2000.00"

    @pytest.mark.parametrize("text", ["abc", "", "-", "1,5", "0x1F", "inf", "nan"])
    def test_to_number_rejects_non_decimal_literals(self, text: str) -> None:
        assert to_number(text) is None

    def test_to_number_accepts_exponent(self) -> None:
        assert to_number("1e3") == 1000.0


class TestCoerceNumber:
    def test_number_passes_through(self) -> None:
        assert coerce_number(12.5) == 12.5

    def test_numeric_text_converts(self) -> None:
        assert coerce_number("10") == 10.0

    @pytest.mark.parametrize("value", ["", "abc", None])
    def test_non_numeric_counts_as_zero(self, value: str | None) -> None:
        assert coerce_number(value) == 0.0


class TestFormatScalar:
    def test_integral_float_renders_without_fraction(self) -> None:
        assert format_scalar(42.0) == "42"

    def test_fractional_float(self) -> None:
        assert format_scalar(12.5) == "12.5"

    def test_none_is_empty(self) -> None:
        assert format_scalar(None) == ""

    def test_text_unchanged(self) -> None:
        assert format_scalar("Promo") == "Promo"
