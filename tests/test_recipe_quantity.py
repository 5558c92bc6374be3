"""Tests for quantities, grouped quantities and the ingredient accumulator."""

import itertools

import pytest

from recipe_quantity import AmountRange, Quantity, merge, parse_amount, parse_number, parse_quantity
from grouped_quantity import GroupedQuantity
from ingredient_list import IngredientList


class TestQuantity:

    def test_display_drops_trailing_zero(self):
        assert str(Quantity(400.0, "g")) == "400 g"
        assert str(Quantity(62.5, "g")) == "62.5 g"
        assert str(Quantity(1 / 3)) == "0.333"

    def test_tiny_amounts_keep_significant_digits(self):
        assert str(Quantity(0.0004, "g")) == "0.0004 g"
        assert str(Quantity(0.00012345, "g")) == "0.000123 g"

    def test_unit_is_normalized(self):
        assert Quantity(1, "  ").unit is None
        assert Quantity(1, " ml ").unit == "ml"

    def test_rejects_unsupported_amounts(self):
        with pytest.raises(TypeError):
            Quantity(True)
        with pytest.raises(TypeError):
            Quantity(None)

    def test_scaling_leaves_text_alone(self):
        assert Quantity("a pinch").scaled(3) == Quantity("a pinch")
        assert Quantity(AmountRange(1, 2), "cup").scaled(2) == Quantity(AmountRange(2, 4), "cup")
        assert Quantity(1.5, "large").scaled(2) == Quantity(3, "large")

    def test_range_display(self):
        assert str(Quantity(AmountRange(1, 2.5), "tbsp")) == "1-2.5 tbsp"


class TestParsing:

    @pytest.mark.parametrize("text,expected", [
        ("2", 2.0),
        ("1.5", 1.5),
        ("1/2", 0.5),
        ("1 1/2", 1.5),
        ("½", 0.5),
        ("2½", 2.5),
        ("a pinch", None),
        ("", None),
    ])
    def test_parse_number(self, text, expected):
        assert parse_number(text) == expected

    def test_parse_amount_variants(self):
        assert parse_amount("3") == 3.0
        assert parse_amount("1-2") == AmountRange(1, 2)
        assert parse_amount("to taste") == "to taste"

    def test_parse_quantity_passes_quantities_through(self):
        quantity = Quantity(2, "g")
        assert parse_quantity(quantity) is quantity
        assert parse_quantity("1/4", "cup") == Quantity(0.25, "cup")


class TestMerge:

    def test_same_unit_sums(self):
        result = merge(Quantity(200, "ml"), Quantity(500, "ml"))
        assert result.mergeable
        assert result.merged == Quantity(700, "ml")

    def test_different_units_do_not_merge(self):
        assert not merge(Quantity(6, "large"), Quantity(4)).mergeable

    def test_text_never_merges(self):
        assert not merge(Quantity("some"), Quantity("some")).mergeable

    def test_ranges_sum_component_wise(self):
        result = merge(Quantity(AmountRange(1, 2), "cup"), Quantity(AmountRange(2, 3), "cup"))
        assert result.merged == Quantity(AmountRange(3, 5), "cup")

    def test_number_and_range_give_range(self):
        assert merge(Quantity(1, "cup"), Quantity(AmountRange(1, 2), "cup")).merged == \
            Quantity(AmountRange(2, 3), "cup")
        assert merge(Quantity(AmountRange(1, 2), "cup"), Quantity(1, "cup")).merged == \
            Quantity(AmountRange(2, 3), "cup")


class TestGroupedQuantity:

    def test_merges_compatible_and_keeps_the_rest(self):
        grouped = GroupedQuantity([Quantity(6, "large"), Quantity(2), Quantity(2)])
        assert str(grouped) == "6 large, 4"
        assert len(grouped) == 2

    def test_order_of_additions_does_not_change_totals(self):
        quantities = [Quantity(100, "g"), Quantity(2), Quantity(50, "g"), Quantity("a pinch"), Quantity(1)]
        expected = {str(q) for q in GroupedQuantity(quantities)}
        for ordering in itertools.permutations(quantities):
            assert {str(q) for q in GroupedQuantity(ordering)} == expected

    def test_to_dict(self):
        grouped = GroupedQuantity([Quantity(1.5, "cup")])
        assert grouped.to_dict() == [{"value": "1.5", "unit": "cup"}]

    def test_empty(self):
        grouped = GroupedQuantity()
        assert grouped.is_empty()
        assert str(grouped) == ""


class TestIngredientList:

    def test_finish_sorts_by_name(self):
        accumulator = IngredientList()
        accumulator.add_ingredient("sugar", Quantity(2, "tbsp"))
        accumulator.add_ingredient("milk", Quantity(200, "ml"))
        accumulator.add_ingredient("eggs")
        accumulator.add_ingredient("milk", Quantity(500, "ml"))

        entries = accumulator.finish()

        assert [e.name for e in entries] == ["eggs", "milk", "sugar"]
        assert [str(e) for e in entries] == ["eggs", "milk: 700 ml", "sugar: 2 tbsp"]

    def test_names_are_case_sensitive(self):
        accumulator = IngredientList()
        accumulator.add_ingredient("Flour", Quantity(1, "cup"))
        accumulator.add_ingredient("flour", Quantity(1, "cup"))
        assert len(accumulator) == 2

    def test_items_keep_insertion_order(self):
        accumulator = IngredientList()
        accumulator.add_ingredient("zucchini", Quantity(1))
        accumulator.add_ingredient("apple", Quantity(1))
        assert [name for name, _ in accumulator.items()] == ["zucchini", "apple"]

    def test_add_grouped(self):
        accumulator = IngredientList()
        accumulator.add_ingredient("eggs", Quantity(2))
        accumulator.add_grouped("eggs", GroupedQuantity([Quantity(3), Quantity(1, "large")]))
        assert str(accumulator.finish()[0]) == "eggs: 5, 1 large"
