"""Tests for rdtrack.costing.ledger module."""

from decimal import Decimal

import pytest

from rdtrack.costing.ledger import (
    DEFAULT_COST_SHEET,
    CostBreakdown,
    CostCategory,
    CostLineItem,
    default_breakdown,
    format_amount,
    parse_category,
    parse_cost_input,
    to_amount,
)


class TestParseCostInput:
    """Lenient cost parsing: anything unusable becomes zero."""

    @pytest.mark.parametrize("value,expected", [
        ("12.5", Decimal("12.5")),
        (" 6.20 ", Decimal("6.20")),
        (7, Decimal("7")),
        (6.2, Decimal("6.2")),
        (Decimal("1.005"), Decimal("1.005")),
    ])
    def test_valid_numbers(self, value, expected):
        assert parse_cost_input(value) == expected

    @pytest.mark.parametrize("value", [
        "", "   ", None, "abc", "12abc", "-5", -0.01,
        float("nan"), float("inf"), "NaN", "Infinity", True,
    ])
    def test_invalid_becomes_zero(self, value):
        assert parse_cost_input(value) == Decimal("0")


class TestToAmount:
    """Strict conversion used where bad input must be rejected."""

    def test_keeps_sign(self):
        assert to_amount("-3") == Decimal("-3")

    def test_invalid_is_none(self):
        assert to_amount("abc") is None
        assert to_amount(None) is None
        assert to_amount(float("nan")) is None
        assert to_amount(False) is None

    def test_float_uses_shortest_repr(self):
        """0.1 converts to Decimal('0.1'), not the binary expansion."""
        assert to_amount(0.1) == Decimal("0.1")

    def test_zero_normalized(self):
        assert format_amount(to_amount("0.000")) == "0"
        assert format_amount(to_amount("-0")) == "0"


class TestParseCategory:
    def test_canonical_names(self):
        for category in CostCategory:
            assert parse_category(category.value) is category

    def test_aliases_and_case(self):
        assert parse_category("Misc") is CostCategory.MISCELLANEOUS
        assert parse_category("labor") is CostCategory.LABOUR
        assert parse_category("COMPONENTS") is CostCategory.COMPONENT

    def test_unknown(self):
        assert parse_category("shipping") is None
        assert parse_category("") is None


class TestCostLineItem:
    def test_to_dict_formats_cost(self):
        item = CostLineItem(name="Lining", description="Skinfit", cost=Decimal("6.20"), id="abc")
        data = item.to_dict()
        assert data == {
            "id": "abc",
            "name": "Lining",
            "description": "Skinfit",
            "consumption": "",
            "cost": "6.20",
            "seeded": False,
        }
        assert CostLineItem.from_dict(data) == item

    def test_ids_unique(self):
        assert CostLineItem(name="a").id != CostLineItem(name="a").id


class TestCostBreakdown:
    def test_all_categories_present(self):
        breakdown = CostBreakdown()
        assert set(breakdown.categories) == set(CostCategory)
        assert all(breakdown.items(c) == [] for c in CostCategory)

    def test_partial_categories_filled_in(self):
        breakdown = CostBreakdown(categories={CostCategory.UPPER: []})
        assert breakdown.items(CostCategory.LABOUR) == []

    def test_find(self):
        item = CostLineItem(name="Thread", id="t1")
        breakdown = CostBreakdown()
        breakdown.categories[CostCategory.COMPONENT].append(item)
        assert breakdown.find(CostCategory.COMPONENT, "t1") is item
        assert breakdown.find(CostCategory.UPPER, "t1") is None

    def test_dict_round_trip(self):
        breakdown = default_breakdown(Decimal("30"))
        breakdown.additional_costs = Decimal("4.50")
        restored = CostBreakdown.from_dict(breakdown.to_dict())
        assert restored == breakdown


class TestDefaultBreakdown:
    def test_seeded_rows(self):
        breakdown = default_breakdown()
        for category, rows in DEFAULT_COST_SHEET.items():
            assert [i.name for i in breakdown.items(category)] == [r[0] for r in rows]
        assert all(item.seeded for _, item in breakdown.all_items())

    def test_unseeded(self):
        breakdown = default_breakdown(Decimal("10"), seed=False)
        assert breakdown.all_items() == []
        assert breakdown.profit_margin == Decimal("10")

    def test_labour_is_single_line(self):
        labour = default_breakdown().items(CostCategory.LABOUR)
        assert len(labour) == 1
        assert labour[0].cost == Decimal("62.00")
