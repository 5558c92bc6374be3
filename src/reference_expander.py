#!/usr/bin/env python3
"""
Reference Expansion Engine
Walks a recipe's ingredient list depth first, expanding references to other
recipes at their requested scale and merging every contribution into one
ingredient list.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import structlog

from cooklang_parser import Ingredient, normalize_reference_path
from ingredient_list import IngredientList, IngredientEntry
from recipe_loader import RecipeLoader
from recipe_scaling import ScalingResolver
from report_errors import (
    CircularDependencyError, RecipeNotFoundError, RecipeParseFailure,
    MissingScalingMetadataError, UnitMismatchError, MalformedIngredientError,
    ReferenceResolutionError
)

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]
IngredientLike = Union[Ingredient, Dict[str, Any]]

RESOLUTION_ERRORS = (
    RecipeNotFoundError,
    RecipeParseFailure,
    MissingScalingMetadataError,
    UnitMismatchError,
    MalformedIngredientError,
    ReferenceResolutionError,
)


class ReferenceExpander:
    """Aggregates ingredients, expanding recipe references recursively."""

    def __init__(self, loader: Optional[RecipeLoader] = None, resolver: Optional[ScalingResolver] = None,
                 expand_references: bool = True):
        self.loader = loader or RecipeLoader()
        self.resolver = resolver or ScalingResolver()
        self.expand_references = expand_references

    def expand(self, ingredients: Iterable[IngredientLike], base_paths: Sequence[PathLike],
               recipe_name: str = "recipe", source_path: Optional[str] = None) -> List[IngredientEntry]:
        """
        Aggregate an ingredient list into sorted entries.

        Args:
            ingredients: Ingredients of the top-level recipe
            base_paths: Search roots for referenced recipes
            recipe_name: Name of the top-level recipe, used in errors
            source_path: Reference path of the top-level recipe, if it is part
                of the corpus, so references back to it are reported as cycles

        Returns:
            Ingredient entries sorted by name
        """
        accumulator = IngredientList()
        resolving: Dict[str, float] = {}
        if source_path:
            resolving[normalize_reference_path(source_path)] = 1.0

        self._expand_list(ingredients, base_paths, 1.0, recipe_name, accumulator, resolving)
        entries = accumulator.finish()

        logger.debug("Aggregated ingredients", recipe=recipe_name, entries=len(entries),
                     expand_references=self.expand_references)
        return entries

    def _expand_list(self, ingredients: Iterable[IngredientLike], base_paths: Sequence[PathLike],
                     scale: float, recipe_name: str, accumulator: IngredientList,
                     resolving: Dict[str, float]) -> None:
        for raw in ingredients:
            ingredient = Ingredient.from_mapping(raw)

            if ingredient.reference and self.expand_references:
                self._expand_reference(ingredient, base_paths, scale, recipe_name, accumulator, resolving)
                continue

            quantity = ingredient.scaled(scale).quantity
            accumulator.add_ingredient(ingredient.display_name, quantity)

    def _expand_reference(self, ingredient: Ingredient, base_paths: Sequence[PathLike], scale: float,
                          recipe_name: str, accumulator: IngredientList,
                          resolving: Dict[str, float]) -> None:
        path = normalize_reference_path(ingredient.reference_path)
        if not path:
            raise MalformedIngredientError(
                f"Reference '{ingredient.name}' in recipe '{recipe_name}' has no path", ingredient
            )

        if path in resolving:
            raise CircularDependencyError(list(resolving) + [path])

        resolving[path] = scale
        try:
            try:
                recipe = self.loader.load(base_paths, path)
                reference_scale = self.resolver.resolve(ingredient.quantity, recipe.metadata, recipe.name or path)
                self._expand_list(recipe.ingredients, base_paths, reference_scale * scale,
                                  recipe.name or path, accumulator, resolving)
            except CircularDependencyError:
                raise
            except RESOLUTION_ERRORS as e:
                raise ReferenceResolutionError(recipe_name, path, e) from e
        finally:
            resolving.pop(path)


def aggregate(ingredients: Iterable[IngredientLike], base_paths: Sequence[PathLike],
              expand_references: bool = True, loader: Optional[RecipeLoader] = None,
              resolver: Optional[ScalingResolver] = None, recipe_name: str = "recipe",
              source_path: Optional[str] = None) -> List[IngredientEntry]:
    """
    Aggregate a recipe's ingredients into a deduplicated, scaled list.

    Args:
        ingredients: Ingredients of the top-level recipe
        base_paths: Search roots for referenced recipes
        expand_references: Expand references into their ingredients when True,
            list them as plain entries otherwise
        loader: Recipe loader, defaults to one using the shared parser
        resolver: Scaling resolver, defaults to the standard servings keywords
        recipe_name: Name of the top-level recipe, used in errors
        source_path: Reference path of the top-level recipe, if known

    Returns:
        Ingredient entries sorted by name
    """
    expander = ReferenceExpander(loader, resolver, expand_references)
    return expander.expand(ingredients, base_paths, recipe_name, source_path)
