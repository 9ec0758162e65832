"""
Cost ledger: line items grouped into fixed categories.

Amounts are Decimal throughout. Line items keep the precision they were
entered with; rounding happens only when totals are computed (rollup.py).
"""

import math
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

ZERO = Decimal("0")


class CostCategory(Enum):
    """The six cost sections of a cost sheet, in display order."""

    UPPER = "upper"
    COMPONENT = "component"
    MATERIAL = "material"
    PACKAGING = "packaging"
    LABOUR = "labour"
    MISCELLANEOUS = "miscellaneous"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_CATEGORY_ALIASES = {
    "misc": CostCategory.MISCELLANEOUS,
    "labor": CostCategory.LABOUR,
    "components": CostCategory.COMPONENT,
    "materials": CostCategory.MATERIAL,
}


def parse_category(text: str | None) -> CostCategory | None:
    """Parse a category name (case-insensitive, 'misc' and 'labor' accepted)."""
    if not text:
        return None
    s = text.strip().lower()
    for category in CostCategory:
        if category.value == s:
            return category
    return _CATEGORY_ALIASES.get(s)


def to_amount(value) -> Decimal | None:
    """Strictly convert a number or numeric string to Decimal.

    Returns None for anything that isn't a finite number. Sign is kept;
    callers decide whether negatives are allowed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    if amount == 0:
        return ZERO
    return amount


def parse_cost_input(value) -> Decimal:
    """Lenient cost parsing for edited cost cells.

    Policy: anything that is not a finite, non-negative number (blank,
    None, text, NaN, infinity, negatives) becomes 0. Editing a cost never
    fails because of what was typed into the cost field.
    """
    amount = to_amount(value)
    if amount is None or amount < 0:
        return ZERO
    return amount


def format_amount(amount: Decimal) -> str:
    """Plain decimal string for storage ("6.20", never "6.2E+0")."""
    return format(amount, "f")


def new_item_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class CostLineItem:
    """One row of a cost table."""
    name: str
    description: str = ""
    consumption: str = ""
    cost: Decimal = ZERO
    id: str = field(default_factory=new_item_id)
    seeded: bool = False  # Came from the default sheet, not typed by a user

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "consumption": self.consumption,
            "cost": format_amount(self.cost),
            "seeded": self.seeded,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CostLineItem":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            consumption=data.get("consumption", ""),
            cost=parse_cost_input(data.get("cost")),
            seeded=data.get("seeded", False),
        )


def _empty_categories() -> dict[CostCategory, list[CostLineItem]]:
    return {category: [] for category in CostCategory}


@dataclass
class CostBreakdown:
    """All cost line items of a project, one list per category."""
    categories: dict[CostCategory, list[CostLineItem]] = field(default_factory=_empty_categories)
    profit_margin: Decimal = Decimal("25")
    additional_costs: Decimal = ZERO

    def __post_init__(self):
        for category in CostCategory:
            self.categories.setdefault(category, [])

    def items(self, category: CostCategory) -> list[CostLineItem]:
        return self.categories[category]

    def find(self, category: CostCategory, item_id: str) -> CostLineItem | None:
        for item in self.categories[category]:
            if item.id == item_id:
                return item
        return None

    def all_items(self) -> list[tuple[CostCategory, CostLineItem]]:
        return [
            (category, item)
            for category in CostCategory
            for item in self.categories[category]
        ]

    def to_dict(self) -> dict:
        return {
            "profit_margin": format_amount(self.profit_margin),
            "additional_costs": format_amount(self.additional_costs),
            "categories": {
                category.value: [item.to_dict() for item in self.categories[category]]
                for category in CostCategory
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CostBreakdown":
        categories = _empty_categories()
        for key, rows in data.get("categories", {}).items():
            categories[CostCategory(key)] = [CostLineItem.from_dict(row) for row in rows]
        return cls(
            categories=categories,
            profit_margin=parse_cost_input(data.get("profit_margin", "25")),
            additional_costs=parse_cost_input(data.get("additional_costs", "0")),
        )


# Default cost sheet for a new project: (name, description, consumption, cost)
DEFAULT_COST_SHEET: dict[CostCategory, list[tuple[str, str, str, str]]] = {
    CostCategory.UPPER: [
        ("Upper", "Rexine", "26 pairs/mtr @/-", "0"),
        ("Lining", "Skinfit", "25 pair @ 155/-", "6.20"),
        ("Lining", "EVA", "33/70 - 1.5mm 35pair", "0"),
    ],
    CostCategory.COMPONENT: [
        ("Thread", "-", "-", "1.00"),
        ("Tafta Label", "MRP", "-", "1.00"),
        ("Heat Transfer", "-", "-", "1.00"),
        ("Welding", "-", "-", "1.00"),
    ],
    CostCategory.MATERIAL: [
        ("Out Sole", "-", "-", "98.00"),
        ("PU Adhesive", "-", "-", "7.00"),
        ("Print", "-", "-", "4.00"),
    ],
    CostCategory.PACKAGING: [
        ("Inner", "-", "-", "22.00"),
    ],
    CostCategory.LABOUR: [
        ("Total labour", "-", "-", "62.00"),
    ],
    CostCategory.MISCELLANEOUS: [
        ("Seconds (4.064%)", "-", "-", "4.064"),
        ("Freight", "-", "-", "2.00"),
    ],
}


def default_breakdown(profit_margin: Decimal = Decimal("25"), seed: bool = True) -> CostBreakdown:
    """A fresh breakdown, optionally pre-filled with the default cost sheet."""
    breakdown = CostBreakdown(profit_margin=profit_margin)
    if not seed:
        return breakdown
    for category, rows in DEFAULT_COST_SHEET.items():
        for name, description, consumption, cost in rows:
            breakdown.categories[category].append(CostLineItem(
                name=name,
                description=description,
                consumption=consumption,
                cost=Decimal(cost),
                seeded=True,
            ))
    return breakdown
