"""Telegram handlers for invoices, freight records and the landed cost worksheet.

Drafts (an invoice being typed in) live in context.user_data; saved records
live in the process-wide worksheet.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes

import config
from landedcost.accounting import storage
from landedcost.accounting.export_service import (
    export_csv,
    export_excel,
    export_pdf,
    worksheet_filename,
)
from landedcost.accounting.landed_cost import duty_rate_keys
from landedcost.accounting.models import InvoiceDraft
from landedcost.accounting.summary import dashboard_stats, recent_activity, summarize
from landedcost.services.command_parser import (
    BLANK_HS_CODE,
    parse_freight,
    parse_generation,
    parse_invoice_header,
    parse_line_item,
)

logger = logging.getLogger(__name__)

DRAFT_KEY = "invoice_draft"

EXPORT_FORMATS = {
    "csv": ("csv", export_csv),
    "excel": ("xlsx", export_excel),
    "pdf": ("pdf", export_pdf),
}

HELP_TEXT = (
    "Landed cost worksheet\n\n"
    "Invoices:\n"
    "  /invoice_new number | supplier | currency | exchange rate | date\n"
    "  /item description | quantity | unit price | hs code | weight\n"
    "  /item_remove <n>\n"
    "  /invoice_save, /invoice_cancel\n"
    "  /invoices, /invoice_edit <id>, /invoice_delete <id>\n\n"
    "Freight:\n"
    "  /freight sea|air|road | origin | destination | weight | volume | rate"
    " | fuel | insurance | handling | documentation\n"
    "  /freights, /freight_delete <id>\n\n"
    "Worksheet:\n"
    "  /landed <invoice id> <freight id> [tax=10] [other=0] [<hs code>=<duty %>]\n"
    f"    (use {BLANK_HS_CODE}=<duty %> for items without an HS code)\n"
    "  /worksheet, /worksheet_clear, /export\n"
    "  /dashboard"
)


def _text_args(context: ContextTypes.DEFAULT_TYPE) -> str:
    return " ".join(context.args or [])


def _get_draft(context: ContextTypes.DEFAULT_TYPE) -> InvoiceDraft | None:
    return context.user_data.get(DRAFT_KEY)


def _export_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("CSV (.csv)", callback_data="lc_export:csv"),
            InlineKeyboardButton("Excel (.xlsx)", callback_data="lc_export:excel"),
        ],
        [
            InlineKeyboardButton("PDF (.pdf)", callback_data="lc_export:pdf"),
        ],
    ])


def _format_draft(draft: InvoiceDraft) -> str:
    title = "Editing invoice" if draft.editing_id else "New invoice"
    text = (
        f"{title} {draft.invoice_number} - {draft.supplier or '?'}\n"
        f"Currency: {draft.currency} (rate {draft.exchange_rate})\n"
        f"Date: {draft.date.isoformat()}\n"
    )
    if draft.items:
        text += f"\nItems ({len(draft.items)}):\n"
        for i, item in enumerate(draft.items, 1):
            hs = item.hs_code or "no HS code"
            text += f"  {i}. {item.description}: {item.quantity} x {item.unit_price:.2f} = {item.total_price:.2f} [{hs}]\n"
    text += f"\nTotal: {draft.total_value:.2f} {draft.currency}"
    return text


# --- General ---


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(HELP_TEXT)


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(HELP_TEXT)


async def cmd_dashboard(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /dashboard - totals and recent activity."""
    ws = storage.worksheet
    stats = dashboard_stats(ws.invoices, ws.freight_costs, ws.landed_costs)
    text = (
        f"Total invoice value: {stats.total_invoice_value:,.2f}\n"
        f"Total freight costs: {stats.total_freight_costs:,.2f}\n"
        f"Active invoices: {stats.active_invoices}\n"
        f"Total landed cost: {stats.total_landed_cost:,.2f}"
    )

    invoices, freight_costs = recent_activity(ws.invoices, ws.freight_costs, config.RECENT_ACTIVITY_LIMIT)
    if not invoices and not freight_costs and not ws.landed_costs:
        text += "\n\nNo activity yet. Start by adding invoices or freight costs."
    else:
        text += "\n\nRecent activity:"
        for inv in invoices:
            text += f"\n  Invoice {inv.invoice_number} ({inv.supplier}): {inv.total_value:,.2f} {inv.currency}"
        for fc in freight_costs:
            text += f"\n  Freight {fc.origin} -> {fc.destination}: {fc.total_cost:,.2f}"
    await update.message.reply_text(text)


# --- Invoices ---


async def cmd_invoice_new(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /invoice_new - start a draft invoice."""
    try:
        draft = parse_invoice_header(_text_args(context))
    except ValueError as e:
        await update.message.reply_text(f"{e}\nUsage: /invoice_new number | supplier | currency | exchange rate | date")
        return

    context.user_data[DRAFT_KEY] = draft
    await update.message.reply_text(
        f"{_format_draft(draft)}\n\nAdd items with /item, then /invoice_save."
    )


async def cmd_item(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /item - add a line item to the draft."""
    draft = _get_draft(context)
    if draft is None:
        await update.message.reply_text("No invoice in progress. Start one with /invoice_new.")
        return

    try:
        item = parse_line_item(_text_args(context))
    except ValueError as e:
        await update.message.reply_text(f"{e}\nUsage: /item description | quantity | unit price | hs code | weight")
        return

    if not storage.add_line_item(draft, item):
        await update.message.reply_text("Item not added: description, quantity and unit price are all required.")
        return
    await update.message.reply_text(_format_draft(draft))


async def cmd_item_remove(update: Update, context: ContextTypes.DEFAULT_TYPE):
    draft = _get_draft(context)
    if draft is None:
        await update.message.reply_text("No invoice in progress.")
        return

    try:
        index = int(context.args[0]) - 1
    except (IndexError, ValueError):
        await update.message.reply_text("Usage: /item_remove <item number>")
        return

    if not storage.remove_line_item(draft, index):
        await update.message.reply_text(f"There is no item {index + 1}.")
        return
    await update.message.reply_text(_format_draft(draft))


async def cmd_invoice_save(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /invoice_save - store the draft as a new invoice or over the one being edited."""
    draft = _get_draft(context)
    if draft is None:
        await update.message.reply_text("No invoice in progress.")
        return

    if draft.editing_id:
        invoice = storage.worksheet.update_invoice(draft.editing_id, draft)
        if invoice is None:
            await update.message.reply_text("The invoice being edited no longer exists. Draft discarded.")
            context.user_data.pop(DRAFT_KEY, None)
            return
        action = "updated"
    else:
        invoice = storage.worksheet.add_invoice(draft)
        action = "saved"

    context.user_data.pop(DRAFT_KEY, None)
    await update.message.reply_text(
        f"Invoice {invoice.invoice_number} {action}.\n"
        f"ID: {invoice.id}\n"
        f"Items: {len(invoice.items)}\n"
        f"Total: {invoice.total_value:,.2f} {invoice.currency}"
    )


async def cmd_invoice_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if context.user_data.pop(DRAFT_KEY, None) is None:
        await update.message.reply_text("No invoice in progress.")
    else:
        await update.message.reply_text("Draft discarded.")


async def cmd_invoice_edit(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not context.args:
        await update.message.reply_text("Usage: /invoice_edit <invoice id>")
        return

    draft = storage.worksheet.edit_invoice(context.args[0])
    if draft is None:
        await update.message.reply_text(f"Invoice {context.args[0]} not found.")
        return

    context.user_data[DRAFT_KEY] = draft
    await update.message.reply_text(
        f"{_format_draft(draft)}\n\nChange items with /item and /item_remove, then /invoice_save."
    )


async def cmd_invoices(update: Update, context: ContextTypes.DEFAULT_TYPE):
    invoices = storage.worksheet.invoices
    if not invoices:
        await update.message.reply_text("No invoices yet. Add one with /invoice_new.")
        return

    lines = [f"Invoices ({len(invoices)}):"]
    for inv in invoices:
        lines.append(
            f"  {inv.id}: {inv.invoice_number} - {inv.supplier} | {inv.date.isoformat()} | "
            f"{len(inv.items)} items | {inv.total_value:,.2f} {inv.currency}"
        )
    await update.message.reply_text("\n".join(lines))


async def cmd_invoice_delete(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not context.args:
        await update.message.reply_text("Usage: /invoice_delete <invoice id>")
        return

    if storage.worksheet.delete_invoice(context.args[0]):
        await update.message.reply_text(f"Invoice {context.args[0]} deleted.")
    else:
        await update.message.reply_text(f"Invoice {context.args[0]} not found.")


# --- Freight ---


async def cmd_freight(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /freight - calculate and store a freight cost."""
    try:
        draft = parse_freight(_text_args(context))
    except ValueError as e:
        await update.message.reply_text(
            f"{e}\nUsage: /freight sea|air|road | origin | destination | weight | volume | rate"
            " | fuel | insurance | handling | documentation"
        )
        return

    freight = storage.worksheet.add_freight_cost(draft)
    await update.message.reply_text(
        f"{freight.shipment_label} saved.\n"
        f"ID: {freight.id}\n"
        f"{freight.origin or '?'} -> {freight.destination or '?'}\n"
        f"Base freight: {freight.freight_rate * freight.weight:,.2f} "
        f"({freight.weight} kg x {freight.freight_rate:.2f})\n"
        f"Total cost: {freight.total_cost:,.2f}"
    )


async def cmd_freights(update: Update, context: ContextTypes.DEFAULT_TYPE):
    freight_costs = storage.worksheet.freight_costs
    if not freight_costs:
        await update.message.reply_text("No freight costs yet. Add one with /freight.")
        return

    lines = [f"Freight costs ({len(freight_costs)}):"]
    for fc in freight_costs:
        lines.append(
            f"  {fc.id}: {fc.shipment_type} {fc.origin} -> {fc.destination} | "
            f"{fc.weight} kg | {fc.total_cost:,.2f} | {fc.created_date.strftime('%Y-%m-%d')}"
        )
    await update.message.reply_text("\n".join(lines))


async def cmd_freight_delete(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not context.args:
        await update.message.reply_text("Usage: /freight_delete <freight id>")
        return

    if storage.worksheet.delete_freight_cost(context.args[0]):
        await update.message.reply_text(f"Freight {context.args[0]} deleted.")
    else:
        await update.message.reply_text(f"Freight {context.args[0]} not found.")


# --- Worksheet ---


async def cmd_landed(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /landed - generate landed cost rows for an invoice and a freight record."""
    try:
        request = parse_generation(context.args or [])
    except ValueError as e:
        await update.message.reply_text(str(e))
        return

    ws = storage.worksheet
    invoice = ws.get_invoice(request.invoice_id)
    if invoice is None:
        await update.message.reply_text(f"Invoice {request.invoice_id} not found. See /invoices.")
        return
    if ws.get_freight_cost(request.freight_id) is None:
        await update.message.reply_text(f"Freight {request.freight_id} not found. See /freights.")
        return

    try:
        rows = ws.generate(
            request.invoice_id, request.freight_id,
            request.duty_rates, request.tax_rate, request.other_charges,
        )
    except ValueError as e:
        await update.message.reply_text(f"Could not calculate landed costs: {e}")
        return

    if not rows:
        await update.message.reply_text(f"Invoice {invoice.invoice_number} has no items.")
        return

    lines = [f"Landed costs for invoice {invoice.invoice_number} ({len(rows)} items):"]
    for row in rows:
        lines.append(
            f"  {row.item_description}: {row.total_landed_cost:,.2f} "
            f"({row.unit_landed_cost:,.2f}/unit, duty {row.duty_rate:.2f}%)"
        )

    missing = [key for key in duty_rate_keys(invoice) if key not in request.duty_rates]
    if missing:
        labels = ", ".join(key or BLANK_HS_CODE for key in missing)
        lines.append(f"\nNo duty rate given for: {labels} (0% used)")

    lines.append(f"\nWorksheet now has {len(ws.landed_costs)} rows. Use /export to download it.")
    await update.message.reply_text("\n".join(lines))


async def cmd_worksheet(update: Update, context: ContextTypes.DEFAULT_TYPE):
    items = storage.worksheet.landed_costs
    if not items:
        await update.message.reply_text(
            "No landed cost calculations yet. Use /landed to generate some."
        )
        return

    summary = summarize(items)
    await update.message.reply_text(
        f"Landed cost items: {summary.item_count}\n\n"
        f"Total goods value: {summary.total_goods_value:,.2f}\n"
        f"Total freight: {summary.total_freight:,.2f}\n"
        f"Total duties & taxes: {summary.total_duties_and_taxes:,.2f}\n"
        f"Total other charges: {summary.total_other_charges:,.2f}\n"
        f"Total landed cost: {summary.total_landed_cost:,.2f}",
        reply_markup=_export_keyboard(),
    )


async def cmd_worksheet_clear(update: Update, context: ContextTypes.DEFAULT_TYPE):
    count = storage.worksheet.clear_landed_costs()
    await update.message.reply_text(f"Removed {count} landed cost rows.")


async def cmd_export(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not storage.worksheet.landed_costs:
        await update.message.reply_text("Nothing to export yet. Use /landed first.")
        return
    await update.message.reply_text("Choose a format:", reply_markup=_export_keyboard())


async def handle_export_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle export format buttons."""
    query = update.callback_query
    await query.answer()

    fmt = query.data.split(":", 1)[1] if ":" in query.data else ""
    if fmt not in EXPORT_FORMATS:
        return

    items = storage.worksheet.landed_costs
    if not items:
        await query.edit_message_text("Nothing to export yet. Use /landed first.")
        return

    extension, exporter = EXPORT_FORMATS[fmt]
    await query.edit_message_text(f"Generating {fmt.upper()}...")

    try:
        with tempfile.TemporaryDirectory() as tmp_dir:
            out = exporter(items, Path(tmp_dir) / worksheet_filename(extension=extension))
            with open(out, "rb") as f:
                await update.effective_chat.send_document(
                    document=f, filename=out.name,
                    caption=f"Landed cost worksheet ({len(items)} items)",
                )
    except Exception as e:
        logger.error(f"Export error: {e}", exc_info=True)
        await update.effective_chat.send_message(f"Export failed: {str(e)}")
