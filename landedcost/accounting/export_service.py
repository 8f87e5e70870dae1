"""Export service for landed cost worksheets (CSV, Excel and PDF)."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from landedcost.accounting.models import LandedCostItem
from landedcost.accounting.summary import summarize

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Invoice Number",
    "Supplier",
    "Item Description",
    "Quantity",
    "Unit Price",
    "Total Price",
    "Freight Cost",
    "Duty Rate (%)",
    "Duty Amount",
    "Tax Rate (%)",
    "Tax Amount",
    "Other Charges",
    "Total Landed Cost",
    "Unit Landed Cost",
    "Currency",
    "Exchange Rate",
]

# 1-based worksheet columns holding money or percentages
MONEY_COLUMNS = range(5, 15)
TOTALLED_FIELDS = {
    6: "total_price",
    7: "freight_cost",
    9: "duty_amount",
    11: "tax_amount",
    12: "other_charges",
    13: "total_landed_cost",
}

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin"),
)


def worksheet_filename(day: date | None = None, extension: str = "csv") -> str:
    day = day or date.today()
    return f"landed-cost-worksheet-{day.isoformat()}.{extension}"


def format_native(value) -> str:
    """Numbers as typed: 10.0 -> "10", 1.25 -> "1.25"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _row_values(item: LandedCostItem) -> list:
    return [
        item.invoice_number, item.supplier, item.item_description, item.quantity,
        item.unit_price, item.total_price, item.freight_cost,
        item.duty_rate, item.duty_amount, item.tax_rate, item.tax_amount,
        item.other_charges, item.total_landed_cost, item.unit_landed_cost,
        item.currency, item.exchange_rate,
    ]


def format_csv_rows(items: list[LandedCostItem]) -> list[list[str]]:
    rows = [list(CSV_HEADERS)]
    for item in items:
        rows.append([
            item.invoice_number,
            item.supplier,
            item.item_description,
            format_native(item.quantity),
            f"{item.unit_price:.2f}",
            f"{item.total_price:.2f}",
            f"{item.freight_cost:.2f}",
            f"{item.duty_rate:.2f}",
            f"{item.duty_amount:.2f}",
            f"{item.tax_rate:.2f}",
            f"{item.tax_amount:.2f}",
            f"{item.other_charges:.2f}",
            f"{item.total_landed_cost:.2f}",
            f"{item.unit_landed_cost:.2f}",
            item.currency,
            format_native(item.exchange_rate),
        ])
    return rows


def render_csv(items: list[LandedCostItem]) -> str:
    """Header plus one line per row. Fields with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=",", lineterminator="\n")
    writer.writerows(format_csv_rows(items))
    return buffer.getvalue()


def export_csv(items: list[LandedCostItem], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        f.write(render_csv(items))

    logger.info(f"CSV exported to {output_path} ({len(items)} rows)")
    return output_path


def _write_worksheet_sheet(wb: Workbook, items: list[LandedCostItem]):
    ws = wb.create_sheet(title="Landed Costs")

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(CSV_HEADERS))
    ws["A1"] = "Landed Cost Worksheet"
    ws["A1"].font = Font(bold=True, size=14)

    for col, header in enumerate(CSV_HEADERS, 1):
        cell = ws.cell(row=3, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center")
        cell.border = BORDER

    for i, item in enumerate(items, 4):
        for col, value in enumerate(_row_values(item), 1):
            cell = ws.cell(row=i, column=col, value=value)
            cell.border = BORDER
            if col in MONEY_COLUMNS:
                cell.number_format = "#,##0.00"
                cell.alignment = Alignment(horizontal="right")

    total_row = len(items) + 4
    ws.cell(row=total_row, column=1, value="TOTAL").font = Font(bold=True)
    for col, attr in TOTALLED_FIELDS.items():
        cell = ws.cell(row=total_row, column=col, value=sum(getattr(item, attr) for item in items))
        cell.font = Font(bold=True)
        cell.number_format = "#,##0.00"
        cell.border = BORDER

    for col in range(1, len(CSV_HEADERS) + 1):
        max_len = max(
            (len(str(ws.cell(row=r, column=col).value or "")) for r in range(3, ws.max_row + 1)),
            default=10,
        )
        ws.column_dimensions[get_column_letter(col)].width = min(max(max_len + 2, 12), 45)


def _write_summary_sheet(wb: Workbook, items: list[LandedCostItem]):
    ws = wb.create_sheet(title="Summary")
    summary = summarize(items)

    ws.merge_cells("A1:B1")
    ws["A1"] = "Cost Analysis Summary"
    ws["A1"].font = Font(bold=True, size=14)

    rows = [
        ("Line items", summary.item_count),
        ("Total Goods Value", summary.total_goods_value),
        ("Total Freight", summary.total_freight),
        ("Total Duties & Taxes", summary.total_duties_and_taxes),
        ("Total Other Charges", summary.total_other_charges),
        ("Total Landed Cost", summary.total_landed_cost),
    ]
    for row, (label, value) in enumerate(rows, 3):
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        cell = ws.cell(row=row, column=2, value=value)
        cell.border = BORDER
        if isinstance(value, float):
            cell.number_format = "#,##0.00"

    ws.column_dimensions["A"].width = 24
    ws.column_dimensions["B"].width = 18


def export_excel(items: list[LandedCostItem], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    wb.remove(wb.active)

    _write_worksheet_sheet(wb, items)
    _write_summary_sheet(wb, items)

    wb.save(str(output_path))
    logger.info(f"Excel exported to {output_path}")
    return output_path


def export_pdf(items: list[LandedCostItem], output_path: str | Path) -> Path:
    """Export the worksheet as a printable PDF report."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
    from reportlab.lib.units import mm
    from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path), pagesize=landscape(A4),
        leftMargin=12 * mm, rightMargin=12 * mm,
        topMargin=15 * mm, bottomMargin=15 * mm,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("CustomTitle", parent=styles["Title"], fontSize=16, spaceAfter=12)
    heading_style = ParagraphStyle("CustomHeading", parent=styles["Heading2"], fontSize=12, spaceAfter=6)

    elements = [
        Paragraph("Landed Cost Worksheet", title_style),
        Paragraph(f"Generated on: {date.today().isoformat()}", styles["Normal"]),
        Spacer(1, 8 * mm),
    ]

    summary = summarize(items)
    summary_data = [
        ["Summary", ""],
        ["Line items", str(summary.item_count)],
        ["Total goods value", f"{summary.total_goods_value:.2f}"],
        ["Total freight", f"{summary.total_freight:.2f}"],
        ["Total duties & taxes", f"{summary.total_duties_and_taxes:.2f}"],
        ["Total other charges", f"{summary.total_other_charges:.2f}"],
        ["Total landed cost", f"{summary.total_landed_cost:.2f}"],
    ]
    summary_table = Table(summary_data, colWidths=[130, 110])
    summary_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (1, -1), "RIGHT"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 8 * mm))

    if items:
        elements.append(Paragraph("Landed Cost Items", heading_style))
        table_data = [[
            "Invoice", "Description", "Qty", "Total Price", "Freight",
            "Duty", "Tax", "Other", "Landed Cost", "Unit Cost", "Cur.",
        ]]
        for item in items:
            desc = item.item_description
            if len(desc) > 35:
                desc = desc[:32] + "..."
            table_data.append([
                item.invoice_number, desc, format_native(item.quantity),
                f"{item.total_price:.2f}", f"{item.freight_cost:.2f}",
                f"{item.duty_amount:.2f}", f"{item.tax_amount:.2f}",
                f"{item.other_charges:.2f}", f"{item.total_landed_cost:.2f}",
                f"{item.unit_landed_cost:.2f}", item.currency,
            ])

        col_widths = [65, 150, 40, 65, 60, 55, 55, 55, 70, 60, 35]
        t = Table(table_data, colWidths=col_widths, repeatRows=1)
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ALIGN", (2, 0), (9, -1), "RIGHT"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F2F2")]),
        ]))
        elements.append(t)

    doc.build(elements)
    logger.info(f"PDF exported to {output_path}")
    return output_path
