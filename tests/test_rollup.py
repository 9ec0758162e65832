"""Tests for rdtrack.costing.rollup module."""

import random
from decimal import Decimal

import pytest

from rdtrack.costing.ledger import CostBreakdown, CostCategory, CostLineItem, default_breakdown
from rdtrack.costing.rollup import (
    add_line_item,
    compute_totals,
    remove_line_item,
    round_whole,
    set_additional_costs,
    set_labour_total,
    set_profit_margin,
    update_line_item,
)
from rdtrack.lib.result import EmptyValue, InvalidValue, UnknownLineItem


def _breakdown(rows):
    """Build a breakdown from {category: [cost, ...]}."""
    breakdown = CostBreakdown()
    for category, costs in rows.items():
        for i, cost in enumerate(costs):
            breakdown.categories[category].append(
                CostLineItem(name=f"item {i}", cost=Decimal(cost), id=f"{category.value}-{i}")
            )
    return breakdown


class TestComputeTotals:
    """Tests for compute_totals()."""

    def test_empty_breakdown_is_all_zero(self):
        summary = compute_totals(CostBreakdown())
        assert summary.grand_total == 0
        assert summary.profit_amount == 0
        assert summary.tentative_cost == 0
        assert all(total == 0 for total in summary.category_totals.values())

    def test_default_sheet_scenario(self):
        """209.264 shows as 209.26; 25% gives profit 52 and tentative 261.26."""
        summary = compute_totals(default_breakdown())
        assert summary.category_total(CostCategory.UPPER) == Decimal("6.20")
        assert summary.category_total(CostCategory.COMPONENT) == Decimal("4.00")
        assert summary.category_total(CostCategory.MATERIAL) == Decimal("109.00")
        assert summary.category_total(CostCategory.PACKAGING) == Decimal("22.00")
        assert summary.category_total(CostCategory.LABOUR) == Decimal("62.00")
        assert summary.category_total(CostCategory.MISCELLANEOUS) == Decimal("6.06")
        assert summary.grand_total == Decimal("209.26")
        assert summary.profit_amount == Decimal("52")
        assert summary.tentative_cost == Decimal("261.26")

    def test_grand_total_is_sum_of_categories(self):
        breakdown = _breakdown({
            CostCategory.UPPER: ["1.10", "2.20"],
            CostCategory.LABOUR: ["30"],
            CostCategory.MISCELLANEOUS: ["0.333"],
        })
        summary = compute_totals(breakdown)
        assert summary.grand_total == sum(summary.category_totals.values())
        assert summary.grand_total == Decimal("33.63")

    def test_order_independent(self):
        breakdown = _breakdown({CostCategory.MATERIAL: ["98", "7", "4.005", "0.335", "12.40"]})
        expected = compute_totals(breakdown)

        shuffled = _breakdown({CostCategory.MATERIAL: ["98", "7", "4.005", "0.335", "12.40"]})
        random.Random(7).shuffle(shuffled.categories[CostCategory.MATERIAL])
        actual = compute_totals(shuffled)

        assert actual.category_totals == expected.category_totals
        assert actual.grand_total == expected.grand_total

    def test_profit_rounds_half_up_to_whole_unit(self):
        breakdown = _breakdown({CostCategory.UPPER: ["10"]})
        assert compute_totals(breakdown, Decimal("25")).profit_amount == Decimal("3")  # 2.5
        assert compute_totals(breakdown, Decimal("24")).profit_amount == Decimal("2")  # 2.4
        assert round_whole(Decimal("0.5")) == Decimal("1")

    def test_explicit_margin_overrides_breakdown(self):
        breakdown = default_breakdown()
        summary = compute_totals(breakdown, "10")
        assert summary.profit_margin == Decimal("10")
        assert summary.profit_amount == Decimal("21")  # 20.926

    @pytest.mark.parametrize("margin", ["-1", "100.01", "abc"])
    def test_explicit_margin_out_of_range_raises(self, margin):
        with pytest.raises(ValueError):
            compute_totals(CostBreakdown(), margin)

    def test_margin_bounds_inclusive(self):
        breakdown = _breakdown({CostCategory.UPPER: ["40"]})
        assert compute_totals(breakdown, 0).tentative_cost == Decimal("40.00")
        assert compute_totals(breakdown, 100).tentative_cost == Decimal("80.00")

    def test_additional_costs_added_before_profit(self):
        breakdown = default_breakdown()
        breakdown.additional_costs = Decimal("10.74")
        summary = compute_totals(breakdown)
        assert summary.subtotal == Decimal("220.00")
        assert summary.profit_amount == Decimal("55")
        assert summary.tentative_cost == Decimal("275.00")

    def test_very_large_edited_cost(self):
        """An accepted cost of any size still rolls up."""
        breakdown = _breakdown({CostCategory.UPPER: ["1"]})
        breakdown = update_line_item(breakdown, CostCategory.UPPER, "upper-0", {"cost": "1e30"}).unwrap()
        summary = compute_totals(breakdown)
        assert summary.grand_total == Decimal("1e30")
        assert summary.profit_amount == Decimal("2.5e29")
        assert summary.tentative_cost == Decimal("1.25e30")
        assert summary.as_dict()["grand_total"] == "1" + "0" * 30 + ".00"

    def test_very_large_added_cost_keeps_cents(self):
        breakdown = add_line_item(
            _breakdown({CostCategory.UPPER: ["0.01"]}),
            CostCategory.UPPER,
            CostLineItem(name="Upper", cost="1e27"),
        ).unwrap()
        summary = compute_totals(breakdown, profit_margin="0")
        assert summary.category_total(CostCategory.UPPER) == Decimal("1000000000000000000000000000.01")
        assert summary.tentative_cost == summary.grand_total

    def test_as_dict(self):
        data = compute_totals(default_breakdown()).as_dict()
        assert data["grand_total"] == "209.26"
        assert data["miscellaneous_total"] == "6.06"
        assert data["profit_amount"] == "52"
        assert data["tentative_cost"] == "261.26"


class TestAddLineItem:
    """Tests for add_line_item()."""

    def test_add_updates_category_total(self):
        result = add_line_item(CostBreakdown(), CostCategory.UPPER,
                               CostLineItem(name="Lining", cost=Decimal("6.20")))
        assert result.success
        assert compute_totals(result.value).category_total(CostCategory.UPPER) >= Decimal("6.20")

    def test_appends_in_order(self):
        breakdown = _breakdown({CostCategory.COMPONENT: ["1"]})
        result = add_line_item(breakdown, CostCategory.COMPONENT, CostLineItem(name="Buckle", cost="2"))
        names = [i.name for i in result.value.items(CostCategory.COMPONENT)]
        assert names == ["item 0", "Buckle"]

    def test_input_not_modified(self):
        breakdown = CostBreakdown()
        add_line_item(breakdown, CostCategory.UPPER, CostLineItem(name="Lining", cost="1"))
        assert breakdown.items(CostCategory.UPPER) == []

    def test_negative_cost_rejected(self):
        result = add_line_item(CostBreakdown(), CostCategory.UPPER, CostLineItem(name="x", cost="-1"))
        assert isinstance(result.error, InvalidValue)
        assert result.error.field == "cost"

    def test_non_numeric_cost_rejected(self):
        result = add_line_item(CostBreakdown(), CostCategory.UPPER, CostLineItem(name="x", cost="abc"))
        assert isinstance(result.error, InvalidValue)

    def test_blank_name_rejected_for_user_items(self):
        result = add_line_item(CostBreakdown(), CostCategory.UPPER, CostLineItem(name="  ", cost="1"))
        assert isinstance(result.error, EmptyValue)
        assert result.error.field == "name"

    def test_blank_name_allowed_for_seeded_items(self):
        item = CostLineItem(name="", cost="1", seeded=True)
        assert add_line_item(CostBreakdown(), CostCategory.UPPER, item).success

    def test_name_trimmed_and_cost_converted(self):
        result = add_line_item(CostBreakdown(), CostCategory.PACKAGING,
                               CostLineItem(name="  Inner box ", cost="22"))
        item = result.value.items(CostCategory.PACKAGING)[0]
        assert item.name == "Inner box"
        assert item.cost == Decimal("22")

    def test_duplicate_id_replaced(self):
        breakdown = _breakdown({CostCategory.UPPER: ["1"]})
        result = add_line_item(breakdown, CostCategory.UPPER,
                               CostLineItem(name="dup", cost="1", id="upper-0"))
        ids = [i.id for i in result.value.items(CostCategory.UPPER)]
        assert len(set(ids)) == 2


class TestRemoveLineItem:
    """Tests for remove_line_item()."""

    def test_remove(self):
        breakdown = _breakdown({CostCategory.UPPER: ["1", "2"]})
        updated = remove_line_item(breakdown, CostCategory.UPPER, "upper-0")
        assert [i.id for i in updated.items(CostCategory.UPPER)] == ["upper-1"]
        assert len(breakdown.items(CostCategory.UPPER)) == 2

    def test_idempotent(self):
        breakdown = _breakdown({CostCategory.UPPER: ["1", "2"]})
        once = remove_line_item(breakdown, CostCategory.UPPER, "upper-0")
        twice = remove_line_item(once, CostCategory.UPPER, "upper-0")
        assert once == twice

    def test_absent_item_is_not_an_error(self):
        breakdown = _breakdown({CostCategory.UPPER: ["1"]})
        assert remove_line_item(breakdown, CostCategory.UPPER, "nope") == breakdown


class TestUpdateLineItem:
    """Tests for update_line_item()."""

    def test_partial_update(self):
        breakdown = _breakdown({CostCategory.MATERIAL: ["98"]})
        result = update_line_item(breakdown, CostCategory.MATERIAL, "material-0",
                                  {"description": "PU", "cost": "101.50"})
        item = result.value.find(CostCategory.MATERIAL, "material-0")
        assert item.description == "PU"
        assert item.cost == Decimal("101.50")
        assert item.name == "item 0"

    @pytest.mark.parametrize("cost", ["abc", "", None, "-4"])
    def test_invalid_cost_becomes_zero(self, cost):
        breakdown = _breakdown({CostCategory.MATERIAL: ["98"]})
        result = update_line_item(breakdown, CostCategory.MATERIAL, "material-0", {"cost": cost})
        assert result.success
        assert result.value.find(CostCategory.MATERIAL, "material-0").cost == Decimal("0")

    def test_unknown_item(self):
        result = update_line_item(CostBreakdown(), CostCategory.UPPER, "nope", {"name": "x"})
        assert isinstance(result.error, UnknownLineItem)

    def test_unknown_field(self):
        breakdown = _breakdown({CostCategory.UPPER: ["1"]})
        result = update_line_item(breakdown, CostCategory.UPPER, "upper-0", {"id": "other"})
        assert isinstance(result.error, InvalidValue)


class TestMarginAndExtras:
    """Tests for set_profit_margin(), set_additional_costs(), set_labour_total()."""

    @pytest.mark.parametrize("value", ["0", "100", "37.5", 25])
    def test_margin_accepted(self, value):
        assert set_profit_margin(CostBreakdown(), value).value.profit_margin == Decimal(str(value))

    @pytest.mark.parametrize("value", ["-0.5", "101", "abc", None])
    def test_margin_rejected(self, value):
        result = set_profit_margin(CostBreakdown(), value)
        assert isinstance(result.error, InvalidValue)
        assert result.error.field == "profit_margin"

    def test_additional_costs(self):
        assert set_additional_costs(CostBreakdown(), "12.5").value.additional_costs == Decimal("12.5")
        assert isinstance(set_additional_costs(CostBreakdown(), "-1").error, InvalidValue)
        assert isinstance(set_additional_costs(CostBreakdown(), "x").error, InvalidValue)

    def test_labour_total_replaces_lines(self):
        breakdown = _breakdown({CostCategory.LABOUR: ["10", "20"]})
        updated = set_labour_total(breakdown, "55")
        labour = updated.items(CostCategory.LABOUR)
        assert len(labour) == 1
        assert labour[0].cost == Decimal("55")
        assert compute_totals(updated).category_total(CostCategory.LABOUR) == Decimal("55.00")

    def test_labour_total_is_user_entered(self):
        """The replacement line is not seeded even over the default sheet."""
        labour = set_labour_total(default_breakdown(), "70").items(CostCategory.LABOUR)
        assert [(item.name, item.seeded) for item in labour] == [("Total labour", False)]
