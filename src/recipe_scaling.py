#!/usr/bin/env python3
"""
Recipe Scaling Resolver
Turns the quantity requested for a referenced recipe ("2", "4 servings",
"250 g") into a scaling factor using the referenced recipe's servings or
yield metadata.
"""

from typing import Optional, Sequence

import structlog

from cooklang_parser import Metadata
from recipe_quantity import Quantity
from report_config import DEFAULT_SERVINGS_KEYWORDS
from report_errors import MissingScalingMetadataError, UnitMismatchError, MalformedIngredientError

logger = structlog.get_logger(__name__)


class ScalingResolver:
    """Computes the scale factor for a recipe reference."""

    def __init__(self, servings_keywords: Sequence[str] = DEFAULT_SERVINGS_KEYWORDS):
        self.servings_keywords = {k.strip().lower() for k in servings_keywords if k.strip()}

    def is_servings_unit(self, unit: Optional[str]) -> bool:
        return unit is not None and unit.lower() in self.servings_keywords

    def resolve(self, requested: Optional[Quantity], metadata: Metadata, recipe_name: str) -> float:
        """
        Compute the scale factor for a reference.

        Args:
            requested: Quantity attached to the reference, or None
            metadata: Metadata of the referenced recipe
            recipe_name: Referenced recipe name, used in errors

        Returns:
            Factor to multiply the referenced recipe's ingredients by
        """
        if requested is None:
            return 1.0

        target = self._target_amount(requested, recipe_name)

        if requested.unit is None:
            return target

        if self.is_servings_unit(requested.unit):
            factor = self._by_servings(target, requested, metadata, recipe_name)
        else:
            factor = self._by_yield(target, requested, metadata, recipe_name)

        logger.debug("Resolved reference scale", recipe=recipe_name, requested=str(requested), factor=factor)
        return factor

    def _target_amount(self, requested: Quantity, recipe_name: str) -> float:
        if requested.is_number:
            return requested.amount
        if requested.is_range and requested.unit is None:
            return requested.amount.start
        raise MalformedIngredientError(
            f"Reference to '{recipe_name}' needs a single numeric amount, got '{requested}'",
            requested
        )

    def _by_servings(self, target: float, requested: Quantity, metadata: Metadata, recipe_name: str) -> float:
        if "servings" not in metadata:
            raise MissingScalingMetadataError(recipe_name, "servings", str(requested))

        servings = metadata.servings()
        if servings is None:
            raise MissingScalingMetadataError(
                recipe_name, "servings", str(requested),
                f"'{metadata.get('servings')}' is not a number"
            )
        if servings <= 0:
            raise MissingScalingMetadataError(
                recipe_name, "servings", str(requested), "servings must be positive"
            )

        return target / servings

    def _by_yield(self, target: float, requested: Quantity, metadata: Metadata, recipe_name: str) -> float:
        if "yield" not in metadata:
            raise MissingScalingMetadataError(recipe_name, "yield", str(requested))

        declared = metadata.yield_quantity()
        if declared is None:
            raise MissingScalingMetadataError(
                recipe_name, "yield", str(requested),
                f"'{metadata.get('yield')}' is not an amount"
            )

        if declared.unit != requested.unit:
            raise UnitMismatchError(recipe_name, str(requested), requested.unit, declared.unit)

        if declared.amount <= 0:
            raise MissingScalingMetadataError(
                recipe_name, "yield", str(requested), "yield must be positive"
            )

        return target / declared.amount
