#!/usr/bin/env python3
"""
Grouped Quantity
All contributions to one ingredient, merged as far as units allow.
"""

from typing import Iterable, Iterator, List, Optional

from recipe_quantity import Quantity, merge


class GroupedQuantity:
    """Ordered set of quantities that could not be merged any further."""

    def __init__(self, quantities: Optional[Iterable[Quantity]] = None):
        self._quantities: List[Quantity] = []
        for quantity in quantities or ():
            self.add(quantity)

    def add(self, quantity: Quantity) -> None:
        """Merge into the first compatible entry, or append a new one."""
        for index, existing in enumerate(self._quantities):
            result = merge(existing, quantity)
            if result.mergeable:
                self._quantities[index] = result.merged
                return
        self._quantities.append(quantity)

    def extend(self, other: "GroupedQuantity") -> None:
        for quantity in other:
            self.add(quantity)

    def is_empty(self) -> bool:
        return not self._quantities

    def to_dict(self) -> List[dict]:
        return [{"value": q.value, "unit": q.unit} for q in self._quantities]

    def __iter__(self) -> Iterator[Quantity]:
        return iter(self._quantities)

    def __len__(self) -> int:
        return len(self._quantities)

    def __getitem__(self, index: int) -> Quantity:
        return self._quantities[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GroupedQuantity):
            return NotImplemented
        return self._quantities == other._quantities

    def __str__(self) -> str:
        return ", ".join(str(q) for q in self._quantities)

    def __repr__(self) -> str:
        return f"GroupedQuantity({self._quantities!r})"
