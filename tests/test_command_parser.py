"""
Tests for chat command argument parsing.
"""

from datetime import date

import pytest

import config
from landedcost.services.command_parser import (
    parse_freight,
    parse_generation,
    parse_invoice_header,
    parse_line_item,
    parse_number,
    split_fields,
)


class TestNumbers:

    @pytest.mark.parametrize("text,expected", [
        ("12.5", 12.5),
        ("  7 ", 7.0),
        ("", 0.0),
        ("1,250.75", 1250.75),
        ("$40", 40.0),
    ])
    def test_parse_number(self, text, expected):
        assert parse_number(text, "Amount") == expected

    def test_not_a_number(self):
        with pytest.raises(ValueError, match="Weight must be a number"):
            parse_number("heavy", "Weight")

    def test_negative(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            parse_number("-3", "Quantity")

    @pytest.mark.parametrize("text", ["nan", "inf", "-inf", "Infinity"])
    def test_non_finite(self, text):
        with pytest.raises(ValueError, match="Quantity must be a finite number"):
            parse_number(text, "Quantity")


def test_split_fields():
    assert split_fields(" a | b |c ") == ["a", "b", "c"]
    assert split_fields("   ") == []


class TestInvoiceHeader:

    def test_full_header(self):
        draft = parse_invoice_header("INV-7 | Shenzhen Parts Co | cny | 0.14 | 2024-02-29")
        assert draft.invoice_number == "INV-7"
        assert draft.supplier == "Shenzhen Parts Co"
        assert draft.currency == "CNY"
        assert draft.exchange_rate == 0.14
        assert draft.date == date(2024, 2, 29)
        assert draft.items == []

    def test_defaults(self):
        draft = parse_invoice_header("INV-8")
        assert draft.currency == config.DEFAULT_CURRENCY
        assert draft.exchange_rate == 1.0
        assert draft.date == date.today()

    def test_free_text_currency(self):
        assert parse_invoice_header("INV-9 | Acme | chf").currency == "CHF"

    def test_number_required(self):
        with pytest.raises(ValueError, match="Invoice number is required"):
            parse_invoice_header("")

    def test_bad_date(self):
        with pytest.raises(ValueError, match="Could not understand the date"):
            parse_invoice_header("INV-1 | Acme | USD | 1 | not a date")


class TestLineItem:

    def test_full_item(self):
        item = parse_line_item("Ball bearings | 200 | 0.35 | 8482.10 | 12.5")
        assert item.description == "Ball bearings"
        assert item.quantity == 200
        assert item.unit_price == 0.35
        assert item.hs_code == "8482.10"
        assert item.weight == 12.5
        assert item.total_price == pytest.approx(70.0)

    def test_optional_fields(self):
        item = parse_line_item("Widget | 10 | 5")
        assert item.hs_code == ""
        assert item.weight == 0.0

    def test_description_required(self):
        with pytest.raises(ValueError, match="description is required"):
            parse_line_item(" | 10 | 5")

    def test_dash_hs_code_is_reserved(self):
        with pytest.raises(ValueError, match="reserved for items without an HS code"):
            parse_line_item("Widget | 10 | 5 | -")


class TestFreight:

    def test_full_freight(self):
        draft = parse_freight("Air | Shanghai | London | 150 | 1.2 | 4.5 | 60 | 25 | 40 | 15")
        assert draft.shipment_type == "air"
        assert draft.origin == "Shanghai"
        assert draft.destination == "London"
        assert draft.total_cost == pytest.approx(150 * 4.5 + 60 + 25 + 40 + 15)

    def test_defaults_to_sea(self):
        assert parse_freight("").shipment_type == "sea"

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown shipment type"):
            parse_freight("rail | A | B")


class TestGeneration:

    def test_ids_only_uses_default_tax(self):
        request = parse_generation(["inv1", "fr1"])
        assert request.invoice_id == "inv1"
        assert request.freight_id == "fr1"
        assert request.tax_rate == config.DEFAULT_TAX_RATE
        assert request.other_charges == 0
        assert request.duty_rates == {}

    def test_options_and_duty_rates(self):
        request = parse_generation(["inv1", "fr1", "tax=20", "other=150.5", "8483=2.5", "7318=4", "-=1"])
        assert request.tax_rate == 20
        assert request.other_charges == 150.5
        assert request.duty_rates == {"8483": 2.5, "7318": 4, "": 1}

    def test_option_keys_are_case_insensitive(self):
        request = parse_generation(["inv1", "fr1", "TAX=0", "Other=5"])
        assert request.tax_rate == 0
        assert request.other_charges == 5

    def test_missing_ids(self):
        with pytest.raises(ValueError, match="Usage"):
            parse_generation(["inv1"])

    def test_extra_positional(self):
        with pytest.raises(ValueError, match="Unexpected arguments"):
            parse_generation(["inv1", "fr1", "oops"])

    def test_bad_rate(self):
        with pytest.raises(ValueError, match="Duty rate for 8483"):
            parse_generation(["inv1", "fr1", "8483=abc"])

    @pytest.mark.parametrize("option", ["tax=nan", "other=inf", "8483=nan"])
    def test_non_finite_options(self, option):
        with pytest.raises(ValueError, match="finite number"):
            parse_generation(["inv1", "fr1", option])
