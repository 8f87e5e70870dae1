"""Totals for the worksheet and the dashboard."""

from __future__ import annotations

from dataclasses import dataclass

from landedcost.accounting.models import FreightCost, Invoice, LandedCostItem


@dataclass
class WorksheetSummary:
    item_count: int = 0
    total_goods_value: float = 0.0
    total_freight: float = 0.0
    total_duties_and_taxes: float = 0.0
    total_other_charges: float = 0.0
    total_landed_cost: float = 0.0


@dataclass
class DashboardStats:
    total_invoice_value: float = 0.0
    total_freight_costs: float = 0.0
    active_invoices: int = 0
    total_landed_cost: float = 0.0


def summarize(items: list[LandedCostItem]) -> WorksheetSummary:
    """Sum every accumulated row, across all generation runs."""
    return WorksheetSummary(
        item_count=len(items),
        total_goods_value=sum(item.total_price for item in items),
        total_freight=sum(item.freight_cost for item in items),
        total_duties_and_taxes=sum(item.duty_amount + item.tax_amount for item in items),
        total_other_charges=sum(item.other_charges for item in items),
        total_landed_cost=sum(item.total_landed_cost for item in items),
    )


def dashboard_stats(
    invoices: list[Invoice],
    freight_costs: list[FreightCost],
    landed_costs: list[LandedCostItem],
) -> DashboardStats:
    return DashboardStats(
        total_invoice_value=sum(inv.total_value or 0 for inv in invoices),
        total_freight_costs=sum(fc.total_cost or 0 for fc in freight_costs),
        active_invoices=len(invoices),
        total_landed_cost=sum(lc.total_landed_cost or 0 for lc in landed_costs),
    )


def recent_activity(
    invoices: list[Invoice],
    freight_costs: list[FreightCost],
    limit: int = 3,
) -> tuple[list[Invoice], list[FreightCost]]:
    """The last `limit` invoices and freight records, oldest first."""
    if limit <= 0:
        return [], []
    return invoices[-limit:], freight_costs[-limit:]
