import pytest
from datetime import date

from landedcost.accounting import storage
from landedcost.accounting.models import FreightDraft, InvoiceDraft, LineItem


@pytest.fixture
def worksheet():
    """A fresh, empty worksheet."""
    return storage.Worksheet()


@pytest.fixture(autouse=True)
def reset_global_worksheet():
    """The bot shares one process-wide worksheet; start every test from empty."""
    storage.worksheet.reset()
    yield
    storage.worksheet.reset()


@pytest.fixture
def widget_draft():
    """One item: 10 x 5.00 = 50.00 under HS code 1234."""
    draft = InvoiceDraft(
        invoice_number="INV-001",
        supplier="Acme Ltd",
        currency="USD",
        exchange_rate=1.0,
        date=date(2024, 3, 1),
    )
    storage.add_line_item(draft, LineItem(
        description="Widget", quantity=10, unit_price=5.00, hs_code="1234", weight=2.5,
    ))
    return draft


@pytest.fixture
def mixed_draft():
    """Three items worth 100, 300 and 600 under two HS codes."""
    draft = InvoiceDraft(
        invoice_number="INV-002",
        supplier="Shenzhen Parts Co",
        currency="CNY",
        exchange_rate=0.14,
    )
    storage.add_line_item(draft, LineItem("Bolts", 100, 1.00, "7318"))
    storage.add_line_item(draft, LineItem("Nuts", 300, 1.00, "7318"))
    storage.add_line_item(draft, LineItem("Gearbox", 2, 300.00, "8483"))
    return draft


@pytest.fixture
def freight_20():
    """A road shipment costing exactly 20.00."""
    return FreightDraft(
        shipment_type="road",
        origin="Rotterdam",
        destination="Antwerp",
        weight=10,
        freight_rate=1.5,
        fuel_surcharge=2,
        insurance=1,
        handling=1.5,
        documentation=0.5,
    )
