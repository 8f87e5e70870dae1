"""Parse chat command arguments into drafts and generation requests."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date

from dateutil import parser as date_parser

import config
from landedcost.accounting.models import FreightDraft, InvoiceDraft, LineItem

FIELD_SEPARATOR = "|"

# Stands for "no HS code" in /landed duty arguments
BLANK_HS_CODE = "-"


@dataclass
class GenerationRequest:
    invoice_id: str
    freight_id: str
    duty_rates: dict[str, float] = field(default_factory=dict)
    tax_rate: float = 0.0
    other_charges: float = 0.0


def split_fields(text: str) -> list[str]:
    if not text or not text.strip():
        return []
    return [part.strip() for part in text.split(FIELD_SEPARATOR)]


def _field(parts: list[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""


def parse_number(text: str, name: str) -> float:
    """Parse a non-negative amount. Blank means 0."""
    cleaned = (text or "").strip().replace(",", "").lstrip("$")
    if not cleaned:
        return 0.0
    try:
        value = float(cleaned)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{text.strip()}'")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    if value < 0:
        raise ValueError(f"{name} cannot be negative")
    return value


def parse_date(text: str) -> date:
    if not text or not text.strip():
        return date.today()
    try:
        return date_parser.parse(text.strip()).date()
    except (ValueError, OverflowError):
        raise ValueError(f"Could not understand the date '{text.strip()}'")


def parse_invoice_header(text: str) -> InvoiceDraft:
    """number | supplier | currency | exchange rate | date"""
    parts = split_fields(text)
    invoice_number = _field(parts, 0)
    if not invoice_number:
        raise ValueError("Invoice number is required")

    exchange_rate = parse_number(_field(parts, 3), "Exchange rate") or 1.0

    return InvoiceDraft(
        invoice_number=invoice_number,
        supplier=_field(parts, 1),
        currency=(_field(parts, 2) or config.DEFAULT_CURRENCY).upper(),
        exchange_rate=exchange_rate,
        date=parse_date(_field(parts, 4)),
    )


def parse_line_item(text: str) -> LineItem:
    """description | quantity | unit price | hs code | weight"""
    parts = split_fields(text)
    description = _field(parts, 0)
    if not description:
        raise ValueError("Item description is required")
    hs_code = _field(parts, 3)
    if hs_code == BLANK_HS_CODE:
        raise ValueError(f"'{BLANK_HS_CODE}' is reserved for items without an HS code; leave the field empty")

    return LineItem(
        description=description,
        quantity=parse_number(_field(parts, 1), "Quantity"),
        unit_price=parse_number(_field(parts, 2), "Unit price"),
        hs_code=hs_code,
        weight=parse_number(_field(parts, 4), "Weight"),
    )


def parse_freight(text: str) -> FreightDraft:
    """type | origin | destination | weight | volume | rate | fuel | insurance | handling | documentation"""
    parts = split_fields(text)
    shipment_type = (_field(parts, 0) or "sea").lower()

    return FreightDraft(
        shipment_type=shipment_type,
        origin=_field(parts, 1),
        destination=_field(parts, 2),
        weight=parse_number(_field(parts, 3), "Weight"),
        volume=parse_number(_field(parts, 4), "Volume"),
        freight_rate=parse_number(_field(parts, 5), "Freight rate"),
        fuel_surcharge=parse_number(_field(parts, 6), "Fuel surcharge"),
        insurance=parse_number(_field(parts, 7), "Insurance"),
        handling=parse_number(_field(parts, 8), "Handling"),
        documentation=parse_number(_field(parts, 9), "Documentation"),
    )


def parse_generation(args: list[str]) -> GenerationRequest:
    """<invoice id> <freight id> [tax=10] [other=50] [<hs code>=<duty %> ...]

    Use `-=<duty %>` for items without an HS code.
    """
    positional = [arg for arg in args if "=" not in arg]
    options = [arg for arg in args if "=" in arg]

    if len(positional) < 2:
        raise ValueError("Usage: /landed <invoice id> <freight id> [tax=10] [other=0] [hs code=duty %]")
    if len(positional) > 2:
        raise ValueError(f"Unexpected arguments: {' '.join(positional[2:])}")

    request = GenerationRequest(
        invoice_id=positional[0],
        freight_id=positional[1],
        tax_rate=config.DEFAULT_TAX_RATE,
    )

    for option in options:
        key, value = option.split("=", 1)
        key = key.strip()
        if key.lower() == "tax":
            request.tax_rate = parse_number(value, "Tax rate")
        elif key.lower() == "other":
            request.other_charges = parse_number(value, "Other charges")
        else:
            hs_code = "" if key == BLANK_HS_CODE else key
            request.duty_rates[hs_code] = parse_number(value, f"Duty rate for {key}")

    return request
