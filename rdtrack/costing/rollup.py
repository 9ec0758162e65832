"""
Cost roll-up: edit line items and compute project totals.

Rounding policy:
- category totals, grand total, subtotal and tentative cost are quantized
  to 0.01, half-up
- the profit amount is rounded to a whole currency unit, half-up, computed
  from the quantized subtotal

    subtotal  = grand_total + additional_costs
    profit    = round_whole(subtotal * profit_margin / 100)
    tentative = subtotal + profit

Totals are added up at whatever precision the amounts need, so large
costs round like small ones instead of overflowing the default context.

Editing functions return a new breakdown and never modify their input.
"""

import copy
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, getcontext, localcontext

from rdtrack.costing.ledger import (
    ZERO,
    CostBreakdown,
    CostCategory,
    CostLineItem,
    format_amount,
    new_item_id,
    parse_cost_input,
    to_amount,
)
from rdtrack.lib.result import EmptyValue, InvalidValue, Result, UnknownLineItem

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
UNIT = Decimal("1")
HUNDRED = Decimal("100")

EDITABLE_FIELDS = ("name", "description", "consumption", "cost")


def _quantize(amount: Decimal, exp: Decimal) -> Decimal:
    # quantize fails when the result needs more digits than the context allows
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(exp, rounding=ROUND_HALF_UP)


def round_cents(amount: Decimal) -> Decimal:
    return _quantize(amount, CENT)


def round_whole(amount: Decimal) -> Decimal:
    return _quantize(amount, UNIT)


def _working_precision(breakdown: CostBreakdown) -> int:
    """Digits needed to add up the breakdown without losing cents."""
    amounts = [item.cost for _, item in breakdown.all_items()]
    amounts.append(breakdown.additional_costs)
    top = max((amount.adjusted() for amount in amounts if amount), default=0)
    return max(getcontext().prec, top + 12)


@dataclass
class CostSummary:
    """Computed totals for one breakdown at one profit margin."""
    category_totals: dict[CostCategory, Decimal]
    grand_total: Decimal
    additional_costs: Decimal
    subtotal: Decimal
    profit_margin: Decimal
    profit_amount: Decimal
    tentative_cost: Decimal

    def category_total(self, category: CostCategory) -> Decimal:
        return self.category_totals[category]

    def as_dict(self) -> dict[str, str]:
        """Flat mapping of display keys to amount strings."""
        data = {
            f"{category.value}_total": format_amount(total)
            for category, total in self.category_totals.items()
        }
        data.update({
            "grand_total": format_amount(self.grand_total),
            "additional_costs": format_amount(self.additional_costs),
            "subtotal": format_amount(self.subtotal),
            "profit_margin": format_amount(self.profit_margin),
            "profit_amount": format_amount(self.profit_amount),
            "tentative_cost": format_amount(self.tentative_cost),
        })
        return data


def _check_margin(value) -> Decimal | InvalidValue:
    margin = to_amount(value)
    if margin is None:
        return InvalidValue("profit_margin", f"'{value}' is not a number")
    if margin < 0 or margin > HUNDRED:
        return InvalidValue("profit_margin", f"{margin} is outside 0-100")
    return margin


def compute_totals(breakdown: CostBreakdown, profit_margin=None) -> CostSummary:
    """Roll the breakdown up into a CostSummary.

    profit_margin defaults to the breakdown's own margin. An explicit
    margin outside 0-100 is a programming error and raises ValueError;
    user input goes through set_profit_margin first.
    """
    if profit_margin is None:
        margin = breakdown.profit_margin
    else:
        margin = _check_margin(profit_margin)
        if isinstance(margin, InvalidValue):
            raise ValueError(str(margin))

    with localcontext() as ctx:
        ctx.prec = _working_precision(breakdown)
        category_totals = {
            category: round_cents(sum((item.cost for item in breakdown.items(category)), ZERO))
            for category in CostCategory
        }
        grand_total = round_cents(sum(category_totals.values(), ZERO))
        additional = round_cents(breakdown.additional_costs)
        subtotal = grand_total + additional
        profit_amount = round_whole(subtotal * margin / HUNDRED)
        tentative_cost = round_cents(subtotal + profit_amount)

    return CostSummary(
        category_totals=category_totals,
        grand_total=grand_total,
        additional_costs=additional,
        subtotal=subtotal,
        profit_margin=margin,
        profit_amount=profit_amount,
        tentative_cost=tentative_cost,
    )


def add_line_item(breakdown: CostBreakdown, category: CostCategory, item: CostLineItem) -> Result:
    """Append item to category.

    The cost must be a non-negative number. Items typed in by a user also
    need a non-blank name; seeded default rows are exempt.
    """
    cost = to_amount(item.cost)
    if cost is None:
        return Result.fail(InvalidValue("cost", f"'{item.cost}' is not a number"))
    if cost < 0:
        return Result.fail(InvalidValue("cost", "must not be negative"))
    if not item.seeded and not (item.name or "").strip():
        return Result.fail(EmptyValue("name"))

    updated = copy.deepcopy(breakdown)
    new_item = copy.deepcopy(item)
    new_item.cost = cost
    if not item.seeded:
        new_item.name = new_item.name.strip()
    if any(existing.id == new_item.id for _, existing in updated.all_items()):
        new_item.id = new_item_id()

    updated.categories[category].append(new_item)
    logger.debug(f"[COST] added {category.value} item '{new_item.name}' ({format_amount(cost)})")
    return Result.ok(updated)


def remove_line_item(breakdown: CostBreakdown, category: CostCategory, item_id: str) -> CostBreakdown:
    """Remove item by id. Removing an absent item is not an error."""
    updated = copy.deepcopy(breakdown)
    updated.categories[category] = [
        item for item in updated.categories[category] if item.id != item_id
    ]
    return updated


def update_line_item(
    breakdown: CostBreakdown,
    category: CostCategory,
    item_id: str,
    patch: dict,
) -> Result:
    """Partially update one item.

    'cost' goes through parse_cost_input, so an invalid or blank cost is
    stored as 0 instead of rejecting the edit.
    """
    unknown = [key for key in patch if key not in EDITABLE_FIELDS]
    if unknown:
        return Result.fail(InvalidValue(unknown[0], "not an editable field"))

    updated = copy.deepcopy(breakdown)
    item = updated.find(category, item_id)
    if item is None:
        return Result.fail(UnknownLineItem(item_id))

    for key, value in patch.items():
        if key == "cost":
            item.cost = parse_cost_input(value)
        else:
            setattr(item, key, "" if value is None else str(value))
    return Result.ok(updated)


def set_profit_margin(breakdown: CostBreakdown, value) -> Result:
    """Set the margin percentage; must be a number in 0-100."""
    margin = _check_margin(value)
    if isinstance(margin, InvalidValue):
        return Result.fail(margin)
    updated = copy.deepcopy(breakdown)
    updated.profit_margin = margin
    return Result.ok(updated)


def set_additional_costs(breakdown: CostBreakdown, value) -> Result:
    """Set the extra amount added before profit; must be a number >= 0."""
    amount = to_amount(value)
    if amount is None:
        return Result.fail(InvalidValue("additional_costs", f"'{value}' is not a number"))
    if amount < 0:
        return Result.fail(InvalidValue("additional_costs", "must not be negative"))
    updated = copy.deepcopy(breakdown)
    updated.additional_costs = amount
    return Result.ok(updated)


def set_labour_total(breakdown: CostBreakdown, value) -> CostBreakdown:
    """Replace the labour section with one direct-labour line.

    The total is typed by a user, so the new line is not seeded even when
    it replaces the default sheet's labour row. Same lenient parsing as
    cost edits.
    """
    updated = copy.deepcopy(breakdown)
    updated.categories[CostCategory.LABOUR] = [
        CostLineItem(name="Total labour", description="-", consumption="-",
                     cost=parse_cost_input(value), seeded=False)
    ]
    return updated
