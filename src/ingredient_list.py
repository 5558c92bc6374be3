#!/usr/bin/env python3
"""
Ingredient Accumulator
Name-keyed collection of grouped quantities built up during one
aggregation pass and drained into a sorted ingredient list.
"""

from typing import Dict, List, Optional, Iterator, Tuple
from dataclasses import dataclass

from recipe_quantity import Quantity
from grouped_quantity import GroupedQuantity


@dataclass
class IngredientEntry:
    """One line of a finished ingredient list."""
    name: str
    quantities: GroupedQuantity

    def __str__(self) -> str:
        if self.quantities.is_empty():
            return self.name
        return f"{self.name}: {self.quantities}"


class IngredientList:
    """Accumulates ingredient quantities by display name."""

    def __init__(self):
        self._entries: Dict[str, GroupedQuantity] = {}

    def add_ingredient(self, name: str, quantity: Optional[Quantity] = None) -> None:
        """
        Add one contribution for an ingredient.

        Args:
            name: Display name, matched exactly
            quantity: Amount to merge; None only ensures the entry exists
        """
        grouped = self._entries.setdefault(name, GroupedQuantity())
        if quantity is not None:
            grouped.add(quantity)

    def add_grouped(self, name: str, quantities: GroupedQuantity) -> None:
        grouped = self._entries.setdefault(name, GroupedQuantity())
        grouped.extend(quantities)

    def items(self) -> List[Tuple[str, GroupedQuantity]]:
        """Entries in insertion order."""
        return list(self._entries.items())

    def finish(self) -> List[IngredientEntry]:
        """Drain into entries sorted by name."""
        entries = [IngredientEntry(name, grouped) for name, grouped in sorted(self._entries.items())]
        self._entries = {}
        return entries

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
