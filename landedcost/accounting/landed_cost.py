"""Landed cost allocation engine.

Spreads a shipment's freight total and any extra charges over the invoice
lines in proportion to each line's value, then layers duty (on goods + freight)
and tax (on goods + freight + duty) on top.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime

from landedcost.accounting.models import FreightCost, Invoice, LandedCostItem, LineItem

logger = logging.getLogger(__name__)


def allocation_ratio(item: LineItem, invoice_total: float) -> float:
    """Share of the invoice value carried by one item. Zero when the invoice is worth nothing."""
    if not invoice_total:
        return 0.0
    return item.total_price / invoice_total


def hs_code_key(hs_code: str | None) -> str:
    return (hs_code or "").strip()


def duty_rate_for(hs_code: str | None, duty_rates: dict[str, float]) -> float:
    """Duty rates are shared per HS code; blank codes all fall into the "" bucket."""
    return duty_rates.get(hs_code_key(hs_code)) or 0.0


def duty_rate_keys(invoice: Invoice) -> list[str]:
    """Distinct HS code buckets of an invoice, in item order."""
    keys: list[str] = []
    for item in invoice.items:
        key = hs_code_key(item.hs_code)
        if key not in keys:
            keys.append(key)
    return keys


def normalize_duty_rates(duty_rates: dict[str, float] | None) -> dict[str, float]:
    return {hs_code_key(code): float(rate or 0) for code, rate in (duty_rates or {}).items()}


def generate_landed_costs(
    invoice: Invoice,
    freight: FreightCost,
    duty_rates: dict[str, float] | None = None,
    tax_rate: float = 0.0,
    other_charges: float = 0.0,
    generated_at: datetime | None = None,
) -> list[LandedCostItem]:
    """Build one landed cost row per invoice line.

    Args:
        invoice: Source invoice; its header and items are copied into each row.
        freight: Shipment whose total cost is allocated across the items.
        duty_rates: Duty percentage keyed by HS code. Missing codes pay 0.
        tax_rate: Tax percentage applied on goods + freight + duty.
        other_charges: Shipment-level extra charges, allocated like freight.
        generated_at: Timestamp used for row ids. Defaults to now.

    Raises:
        ValueError: if invoice or freight is missing, or an item has a
            non-positive or non-finite quantity.
    """
    if invoice is None or freight is None:
        raise ValueError("An invoice and a freight record are both required")

    rates = normalize_duty_rates(duty_rates)
    tax_rate = tax_rate or 0.0
    other_charges = other_charges or 0.0
    generated_at = generated_at or datetime.now()
    stamp = int(generated_at.timestamp() * 1000)

    invoice_total = invoice.total_value
    freight_total = freight.total_cost
    if not invoice_total and invoice.items:
        logger.warning(f"Invoice {invoice.invoice_number} has zero value; nothing will be allocated")

    rows = []
    for item in invoice.items:
        if item.quantity is None or not math.isfinite(item.quantity) or item.quantity <= 0:
            raise ValueError(
                f"Item '{item.description}' has quantity {item.quantity}; unit cost needs a positive quantity"
            )

        ratio = allocation_ratio(item, invoice_total)
        allocated_freight = freight_total * ratio

        duty_rate = duty_rate_for(item.hs_code, rates)
        duty_base = item.total_price + allocated_freight
        duty_amount = duty_base * (duty_rate / 100)

        tax_base = item.total_price + allocated_freight + duty_amount
        tax_amount = tax_base * (tax_rate / 100)

        allocated_other = other_charges * ratio

        total_landed_cost = item.total_price + allocated_freight + duty_amount + tax_amount + allocated_other

        rows.append(LandedCostItem(
            id=f"{invoice.id}-{stamp}-{uuid.uuid4().hex[:6]}",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            supplier=invoice.supplier,
            item_description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            freight_cost=allocated_freight,
            duty_rate=duty_rate,
            duty_amount=duty_amount,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            other_charges=allocated_other,
            total_landed_cost=total_landed_cost,
            unit_landed_cost=total_landed_cost / item.quantity,
            currency=invoice.currency,
            exchange_rate=invoice.exchange_rate,
            generated_at=generated_at,
        ))

    logger.info(
        f"Generated {len(rows)} landed cost rows for invoice {invoice.invoice_number} "
        f"(freight {freight_total:.2f}, tax {tax_rate}%, other {other_charges:.2f})"
    )
    return rows
