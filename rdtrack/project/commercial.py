"""
Commercial terms agreed with the client: the final cost and PO details.

The client final cost sits beside the computed tentative cost and does not
replace it. Every accepted final cost is appended to the project's
client_cost_history; entries are never rewritten.

PO details (order quantity and unit price) are kept next to the PO number.
Their total is derived, not stored.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from rdtrack.costing.ledger import format_amount, to_amount
from rdtrack.costing.rollup import round_cents
from rdtrack.lib.result import InvalidValue, Result

logger = logging.getLogger(__name__)


@dataclass
class ClientCostEntry:
    """One accepted client final cost."""
    amount: Decimal
    at: str  # ISO timestamp

    def to_dict(self) -> dict:
        return {"amount": format_amount(self.amount), "at": self.at}

    @classmethod
    def from_dict(cls, data: dict) -> "ClientCostEntry":
        return cls(amount=Decimal(data["amount"]), at=data["at"])


@dataclass
class PoDetails:
    order_quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None

    @property
    def total_amount(self) -> Optional[Decimal]:
        """order_quantity x unit_price to the cent; None until both are known."""
        if self.order_quantity is None or self.unit_price is None:
            return None
        return round_cents(self.order_quantity * self.unit_price)

    def to_dict(self) -> dict:
        return {
            "order_quantity": _optional_amount(self.order_quantity),
            "unit_price": _optional_amount(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "PoDetails":
        data = data or {}
        return cls(
            order_quantity=_optional_decimal(data.get("order_quantity")),
            unit_price=_optional_decimal(data.get("unit_price")),
        )


def _optional_amount(value: Decimal | None) -> str | None:
    return None if value is None else format_amount(value)


def _optional_decimal(value: str | None) -> Decimal | None:
    return None if value is None else Decimal(value)


def _non_negative(field_name: str, value) -> Decimal | InvalidValue:
    amount = to_amount(value)
    if amount is None:
        return InvalidValue(field_name, f"'{value}' is not a number")
    if amount < 0:
        return InvalidValue(field_name, "must not be negative")
    return amount


def set_client_final_cost(project, value, at: str | None = None) -> Result:
    """Record the cost the client agreed to and append it to the history."""
    amount = _non_negative("client_final_cost", value)
    if isinstance(amount, InvalidValue):
        return Result.fail(amount)

    updated = copy.deepcopy(project)
    updated.client_final_cost = amount
    updated.client_cost_history.append(
        ClientCostEntry(amount=amount, at=at or datetime.now().isoformat(timespec="seconds"))
    )
    logger.info(f"[COST] {project.auto_code}: client final cost {format_amount(amount)}")
    return Result.ok(updated)


def set_po_details(project, order_quantity=None, unit_price=None) -> Result:
    """Update order quantity and/or unit price.

    A value left as None keeps what was stored before. Both must be
    non-negative numbers.
    """
    changes = {}
    for field_name, value in (("order_quantity", order_quantity), ("unit_price", unit_price)):
        if value is None:
            continue
        amount = _non_negative(field_name, value)
        if isinstance(amount, InvalidValue):
            return Result.fail(amount)
        changes[field_name] = amount

    updated = copy.deepcopy(project)
    for field_name, amount in changes.items():
        setattr(updated.po_details, field_name, amount)
    return Result.ok(updated)
