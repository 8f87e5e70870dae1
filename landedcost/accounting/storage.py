"""In-memory stores for invoices, freight records and landed cost rows.

Everything lives for the lifetime of the process; nothing is written to disk.
"""

from __future__ import annotations

import copy
import logging
import math
import uuid
from datetime import datetime

from landedcost.accounting.landed_cost import generate_landed_costs
from landedcost.accounting.models import (
    FreightCost,
    FreightDraft,
    Invoice,
    InvoiceDraft,
    LandedCostItem,
    LineItem,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


# --- Draft editing ---


def _positive(value) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def add_line_item(draft: InvoiceDraft, item: LineItem) -> bool:
    """Append an item to the draft. Items without description, a positive quantity or a price are skipped."""
    if not (item.description and item.description.strip()) or not _positive(item.quantity) or not _positive(item.unit_price):
        logger.debug(f"Skipped incomplete line item: {item}")
        return False
    draft.items.append(item)
    return True


def remove_line_item(draft: InvoiceDraft, index: int) -> bool:
    if index < 0 or index >= len(draft.items):
        return False
    draft.items.pop(index)
    return True


def _invoice_from_draft(invoice_id: str, draft: InvoiceDraft) -> Invoice:
    return Invoice(
        id=invoice_id,
        invoice_number=draft.invoice_number,
        supplier=draft.supplier,
        currency=draft.currency,
        exchange_rate=draft.exchange_rate,
        date=draft.date,
        items=copy.deepcopy(draft.items),
    )


class Worksheet:
    """The invoice, freight and landed cost collections of one running session."""

    def __init__(self):
        self._invoices: list[Invoice] = []
        self._freight_costs: list[FreightCost] = []
        self._landed_costs: list[LandedCostItem] = []

    # -- Invoices --

    @property
    def invoices(self) -> list[Invoice]:
        return list(self._invoices)

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        return next((inv for inv in self._invoices if inv.id == invoice_id), None)

    def add_invoice(self, draft: InvoiceDraft) -> Invoice:
        invoice = _invoice_from_draft(_new_id(), draft)
        self._invoices.append(invoice)
        logger.info(
            f"Invoice {invoice.id} added: {invoice.invoice_number} from {invoice.supplier} "
            f"({len(invoice.items)} items, {invoice.total_value:.2f} {invoice.currency})"
        )
        return invoice

    def update_invoice(self, invoice_id: str, draft: InvoiceDraft) -> Invoice | None:
        for i, existing in enumerate(self._invoices):
            if existing.id == invoice_id:
                invoice = _invoice_from_draft(invoice_id, draft)
                self._invoices[i] = invoice
                logger.info(f"Invoice {invoice_id} updated ({invoice.total_value:.2f} {invoice.currency})")
                return invoice
        logger.warning(f"Invoice {invoice_id} not found, nothing updated")
        return None

    def edit_invoice(self, invoice_id: str) -> InvoiceDraft | None:
        """Load a saved invoice into a draft that can be changed and passed to update_invoice."""
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return None
        return InvoiceDraft(
            invoice_number=invoice.invoice_number,
            supplier=invoice.supplier,
            currency=invoice.currency,
            exchange_rate=invoice.exchange_rate,
            date=invoice.date,
            items=copy.deepcopy(invoice.items),
            editing_id=invoice.id,
        )

    def delete_invoice(self, invoice_id: str) -> bool:
        before = len(self._invoices)
        self._invoices = [inv for inv in self._invoices if inv.id != invoice_id]
        deleted = len(self._invoices) < before
        if deleted:
            logger.info(f"Invoice {invoice_id} deleted")
        return deleted

    # -- Freight --

    @property
    def freight_costs(self) -> list[FreightCost]:
        return list(self._freight_costs)

    def get_freight_cost(self, freight_id: str) -> FreightCost | None:
        return next((fc for fc in self._freight_costs if fc.id == freight_id), None)

    def add_freight_cost(self, draft: FreightDraft) -> FreightCost:
        freight = FreightCost(
            id=_new_id(),
            shipment_type=draft.shipment_type,
            origin=draft.origin,
            destination=draft.destination,
            weight=draft.weight or 0.0,
            volume=draft.volume or 0.0,
            freight_rate=draft.freight_rate or 0.0,
            fuel_surcharge=draft.fuel_surcharge or 0.0,
            insurance=draft.insurance or 0.0,
            handling=draft.handling or 0.0,
            documentation=draft.documentation or 0.0,
            created_date=datetime.now(),
        )
        self._freight_costs.append(freight)
        logger.info(
            f"Freight {freight.id} added: {freight.origin} -> {freight.destination} "
            f"({freight.shipment_type}, {freight.total_cost:.2f})"
        )
        return freight

    def delete_freight_cost(self, freight_id: str) -> bool:
        before = len(self._freight_costs)
        self._freight_costs = [fc for fc in self._freight_costs if fc.id != freight_id]
        deleted = len(self._freight_costs) < before
        if deleted:
            logger.info(f"Freight {freight_id} deleted")
        return deleted

    # -- Landed costs --

    @property
    def landed_costs(self) -> list[LandedCostItem]:
        return list(self._landed_costs)

    def generate(
        self,
        invoice_id: str,
        freight_id: str,
        duty_rates: dict[str, float] | None = None,
        tax_rate: float = 0.0,
        other_charges: float = 0.0,
    ) -> list[LandedCostItem]:
        """Run the engine for one invoice + freight pair and keep the rows.

        Returns an empty list, leaving the worksheet untouched, when either id
        does not resolve.
        """
        invoice = self.get_invoice(invoice_id) if invoice_id else None
        freight = self.get_freight_cost(freight_id) if freight_id else None
        if invoice is None or freight is None:
            logger.warning(f"Generation skipped: invoice={invoice_id!r} freight={freight_id!r} not both found")
            return []

        rows = generate_landed_costs(invoice, freight, duty_rates, tax_rate, other_charges)
        self._landed_costs.extend(rows)
        return rows

    def clear_landed_costs(self) -> int:
        count = len(self._landed_costs)
        self._landed_costs = []
        logger.info(f"Cleared {count} landed cost rows")
        return count

    def reset(self):
        self._invoices = []
        self._freight_costs = []
        self._landed_costs = []


worksheet = Worksheet()
