"""Data models for invoices, freight and landed cost worksheets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

CURRENCIES = ("USD", "EUR", "GBP", "CNY", "JPY")

SHIPMENT_TYPES = {
    "sea": "Sea Freight",
    "air": "Air Freight",
    "road": "Road Freight",
}


@dataclass
class LineItem:
    description: str
    quantity: float
    unit_price: float
    hs_code: str = ""
    weight: float = 0.0  # kg

    @property
    def total_price(self) -> float:
        return self.quantity * self.unit_price


@dataclass
class InvoiceDraft:
    """An invoice still being filled in. Items are added through the store."""
    invoice_number: str = ""
    supplier: str = ""
    currency: str = "USD"
    exchange_rate: float = 1.0
    date: date = field(default_factory=date.today)
    items: list[LineItem] = field(default_factory=list)
    editing_id: str | None = None

    @property
    def total_value(self) -> float:
        return sum(item.total_price for item in self.items)


@dataclass
class Invoice:
    id: str
    invoice_number: str
    supplier: str
    currency: str
    exchange_rate: float
    date: date
    items: list[LineItem] = field(default_factory=list)

    @property
    def total_value(self) -> float:
        return sum(item.total_price for item in self.items)


@dataclass
class FreightDraft:
    shipment_type: str = "sea"
    origin: str = ""
    destination: str = ""
    weight: float = 0.0
    volume: float = 0.0
    freight_rate: float = 0.0   # per kg
    fuel_surcharge: float = 0.0
    insurance: float = 0.0
    handling: float = 0.0
    documentation: float = 0.0

    def __post_init__(self):
        if self.shipment_type not in SHIPMENT_TYPES:
            raise ValueError(
                f"Unknown shipment type '{self.shipment_type}' "
                f"(expected one of: {', '.join(SHIPMENT_TYPES)})"
            )

    @property
    def total_cost(self) -> float:
        return calculate_total_cost(self)


@dataclass
class FreightCost:
    id: str
    shipment_type: str
    origin: str
    destination: str
    weight: float
    volume: float
    freight_rate: float
    fuel_surcharge: float
    insurance: float
    handling: float
    documentation: float
    created_date: datetime = field(default_factory=datetime.now)

    @property
    def total_cost(self) -> float:
        return calculate_total_cost(self)

    @property
    def shipment_label(self) -> str:
        return SHIPMENT_TYPES.get(self.shipment_type, self.shipment_type)


def calculate_total_cost(freight: FreightDraft | FreightCost) -> float:
    """Base freight (rate x weight) plus every add-on charge. Missing values count as 0."""
    base_freight = (freight.freight_rate or 0) * (freight.weight or 0)
    return (
        base_freight
        + (freight.fuel_surcharge or 0)
        + (freight.insurance or 0)
        + (freight.handling or 0)
        + (freight.documentation or 0)
    )


@dataclass(frozen=True)
class LandedCostItem:
    """One worksheet row. Invoice and item fields are copied at generation time."""
    id: str
    invoice_id: str
    invoice_number: str
    supplier: str
    item_description: str
    quantity: float
    unit_price: float
    total_price: float
    freight_cost: float
    duty_rate: float
    duty_amount: float
    tax_rate: float
    tax_amount: float
    other_charges: float
    total_landed_cost: float
    unit_landed_cost: float
    currency: str
    exchange_rate: float
    generated_at: datetime = field(default_factory=datetime.now)
