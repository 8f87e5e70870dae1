"""
Tests for worksheet and dashboard totals.
"""

import pytest

from landedcost.accounting.summary import dashboard_stats, recent_activity, summarize


def test_summary_of_empty_worksheet():
    summary = summarize([])
    assert summary.item_count == 0
    assert summary.total_landed_cost == 0


def test_summary_spans_all_runs(worksheet, widget_draft, mixed_draft, freight_20):
    widget = worksheet.add_invoice(widget_draft)
    mixed = worksheet.add_invoice(mixed_draft)
    freight = worksheet.add_freight_cost(freight_20)
    worksheet.generate(widget.id, freight.id, {"1234": 10}, 10, 0)
    worksheet.generate(mixed.id, freight.id, {"7318": 5, "8483": 2}, 20, 30)

    rows = worksheet.landed_costs
    summary = summarize(rows)

    assert summary.item_count == 4
    assert summary.total_goods_value == pytest.approx(50 + 1000)
    assert summary.total_freight == pytest.approx(40.0)
    assert summary.total_duties_and_taxes == pytest.approx(sum(r.duty_amount + r.tax_amount for r in rows))
    assert summary.total_other_charges == pytest.approx(30.0)
    assert summary.total_landed_cost == pytest.approx(sum(r.total_landed_cost for r in rows))


def test_dashboard_stats(worksheet, widget_draft, mixed_draft, freight_20):
    widget = worksheet.add_invoice(widget_draft)
    worksheet.add_invoice(mixed_draft)
    freight = worksheet.add_freight_cost(freight_20)
    rows = worksheet.generate(widget.id, freight.id, {"1234": 10}, 10, 0)

    stats = dashboard_stats(worksheet.invoices, worksheet.freight_costs, worksheet.landed_costs)
    assert stats.total_invoice_value == pytest.approx(1050.0)
    assert stats.total_freight_costs == pytest.approx(20.0)
    assert stats.active_invoices == 2
    assert stats.total_landed_cost == pytest.approx(rows[0].total_landed_cost)


def test_recent_activity_keeps_latest(worksheet, widget_draft, freight_20):
    invoices = [worksheet.add_invoice(widget_draft) for _ in range(5)]
    freights = [worksheet.add_freight_cost(freight_20) for _ in range(2)]

    recent_invoices, recent_freights = recent_activity(worksheet.invoices, worksheet.freight_costs, 3)
    assert recent_invoices == invoices[-3:]
    assert recent_freights == freights


def test_recent_activity_with_zero_limit(worksheet, widget_draft):
    worksheet.add_invoice(widget_draft)
    assert recent_activity(worksheet.invoices, [], 0) == ([], [])
