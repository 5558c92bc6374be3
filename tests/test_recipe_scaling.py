"""Tests for the reference scaling resolver."""

import pytest

from cooklang_parser import Metadata
from recipe_quantity import AmountRange, Quantity
from recipe_scaling import ScalingResolver
from report_errors import MissingScalingMetadataError, UnitMismatchError, MalformedIngredientError


@pytest.fixture
def resolver():
    return ScalingResolver()


class TestScalingResolver:

    def test_no_quantity_means_unscaled(self, resolver):
        assert resolver.resolve(None, Metadata(), "Pancakes") == 1.0

    def test_bare_number_is_a_multiplier(self, resolver):
        assert resolver.resolve(Quantity(2), Metadata({"servings": 4}), "Pancakes") == 2.0

    def test_range_without_unit_uses_its_start(self, resolver):
        assert resolver.resolve(Quantity(AmountRange(2, 3)), Metadata(), "Pancakes") == 2.0

    @pytest.mark.parametrize("unit", ["servings", "serving", "Servings"])
    def test_servings_target(self, resolver, unit):
        assert resolver.resolve(Quantity(8, unit), Metadata({"servings": 4}), "Bread") == 2.0

    def test_servings_from_text_metadata(self, resolver):
        assert resolver.resolve(Quantity(3, "servings"), Metadata({"servings": "6 people"}), "Bread") == 0.5

    def test_missing_servings(self, resolver):
        with pytest.raises(MissingScalingMetadataError) as exc_info:
            resolver.resolve(Quantity(2, "servings"), Metadata(), "Bread")
        assert exc_info.value.recipe_name == "Bread"
        assert exc_info.value.field == "servings"
        assert "Bread" in str(exc_info.value)

    @pytest.mark.parametrize("servings", ["many", 0, -2])
    def test_unusable_servings(self, resolver, servings):
        with pytest.raises(MissingScalingMetadataError):
            resolver.resolve(Quantity(2, "servings"), Metadata({"servings": servings}), "Bread")

    def test_yield_target(self, resolver):
        metadata = Metadata({"yield": "500 g"})
        assert resolver.resolve(Quantity(250, "g"), metadata, "Dough") == 0.5

    def test_yield_unit_mismatch(self, resolver):
        with pytest.raises(UnitMismatchError) as exc_info:
            resolver.resolve(Quantity(250, "ml"), Metadata({"yield": "500 g"}), "Dough")
        assert exc_info.value.requested_unit == "ml"
        assert exc_info.value.yield_unit == "g"
        assert "Dough" in str(exc_info.value)

    def test_yield_unit_is_case_sensitive(self, resolver):
        with pytest.raises(UnitMismatchError):
            resolver.resolve(Quantity(250, "G"), Metadata({"yield": "500 g"}), "Dough")

    def test_missing_yield(self, resolver):
        with pytest.raises(MissingScalingMetadataError) as exc_info:
            resolver.resolve(Quantity(250, "g"), Metadata({"servings": 2}), "Dough")
        assert exc_info.value.field == "yield"

    def test_zero_yield(self, resolver):
        with pytest.raises(MissingScalingMetadataError):
            resolver.resolve(Quantity(250, "g"), Metadata({"yield": "0 g"}), "Dough")

    def test_text_target_is_malformed(self, resolver):
        with pytest.raises(MalformedIngredientError):
            resolver.resolve(Quantity("a few"), Metadata(), "Dough")
        with pytest.raises(MalformedIngredientError):
            resolver.resolve(Quantity(AmountRange(1, 2), "servings"), Metadata({"servings": 2}), "Dough")

    def test_custom_servings_keywords(self):
        resolver = ScalingResolver(servings_keywords=("portions",))
        assert resolver.resolve(Quantity(4, "portions"), Metadata({"servings": 2}), "Stew") == 2.0
        with pytest.raises(MissingScalingMetadataError) as exc_info:
            resolver.resolve(Quantity(4, "servings"), Metadata({"servings": 2}), "Stew")
        assert exc_info.value.field == "yield"

    def test_range_yield_is_not_an_amount(self, resolver):
        with pytest.raises(MissingScalingMetadataError) as exc_info:
            resolver.resolve(Quantity(1, "loaves"), Metadata({"yield": "1-2 loaves"}), "Bread")
        assert exc_info.value.field == "yield"
        assert "'1-2 loaves' is not an amount" in str(exc_info.value)
