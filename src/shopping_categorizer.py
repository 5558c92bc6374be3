#!/usr/bin/env python3
"""
Shopping List Categorization
Groups aggregated ingredients by store aisle and splits them by pantry
membership. Configuration problems never fail a report: they are logged
and the list falls back to a single "other" aisle or an empty pantry.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

import structlog

from report_errors import ReportError, ErrorCategory, ErrorSeverity

logger = structlog.get_logger(__name__)

OTHER_CATEGORY = "other"

PathLike = Union[str, Path]


class ShoppingConfigError(ReportError):
    """Aisle or pantry configuration could not be parsed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, severity=ErrorSeverity.LOW, **kwargs)


def entry_name(entry: Any) -> Optional[str]:
    """Name of an ingredient entry, ingredient object or mapping."""
    if isinstance(entry, dict):
        name = entry.get("name")
    else:
        name = getattr(entry, "name", None)
    return name if isinstance(name, str) else None


class AisleConfig:
    """
    Store aisles and the ingredients found in each.

    The file lists a ``[category]`` header followed by one ingredient per
    line; synonyms share a line separated by ``|``:

        [dairy]
        milk
        eggs|egg
    """

    def __init__(self, categories: Optional[Dict[str, List[List[str]]]] = None):
        self.categories: Dict[str, List[List[str]]] = categories or {}
        self._index: Dict[str, str] = {}
        for category, lines in self.categories.items():
            for names in lines:
                for name in names:
                    self._index.setdefault(name, category)

    @classmethod
    def parse(cls, text: str) -> "AisleConfig":
        """
        Parse aisle configuration text.

        Args:
            text: Aisle file content

        Returns:
            AisleConfig
        """
        categories: Dict[str, List[List[str]]] = {}
        seen: Dict[str, str] = {}
        current: Optional[str] = None

        for lineno, raw in enumerate(text.splitlines(), 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("["):
                if not line.endswith("]") or not line[1:-1].strip():
                    raise ShoppingConfigError(f"line {lineno}: invalid category header '{line}'")
                current = line[1:-1].strip()
                if current in categories:
                    raise ShoppingConfigError(f"line {lineno}: duplicate category '{current}'")
                categories[current] = []
                continue

            if current is None:
                raise ShoppingConfigError(f"line {lineno}: ingredient '{line}' outside of a category")

            names = [name.strip() for name in line.split("|") if name.strip()]
            for name in names:
                if name in seen:
                    logger.warning("Ingredient listed in more than one aisle", ingredient=name,
                                   first=seen[name], duplicate=current)
                else:
                    seen[name] = current
            categories[current].append(names)

        return cls(categories)

    @classmethod
    def parse_lenient(cls, text: Optional[str]) -> Optional["AisleConfig"]:
        """Parse, logging a warning and returning None on failure."""
        if text is None:
            return None
        try:
            return cls.parse(text)
        except ShoppingConfigError as e:
            logger.warning("Failed to parse aisle configuration, using 'other' for all ingredients",
                           error=e.message)
            return None

    def category_for(self, name: str) -> Optional[str]:
        return self._index.get(name)


class PantryConfig:
    """
    Items already at hand, from a TOML pantry file.

    Every key of every table names an item:

        [pantry]
        flour = "5%kg"
        salt = { quantity = "1%kg" }
    """

    def __init__(self, items: Optional[Iterable[str]] = None):
        self.items: Set[str] = set(items or ())

    @classmethod
    def parse(cls, text: str) -> "PantryConfig":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ShoppingConfigError(f"invalid pantry file: {e}") from e

        items = []
        for key, value in data.items():
            if isinstance(value, dict):
                items.extend(value.keys())
            elif isinstance(value, list):
                items.extend(str(v) for v in value if isinstance(v, str))
            else:
                items.append(key)
        return cls(items)

    @classmethod
    def parse_lenient(cls, text: Optional[str]) -> Optional["PantryConfig"]:
        """Parse, logging a warning and returning None on failure."""
        if text is None:
            return None
        try:
            return cls.parse(text)
        except ShoppingConfigError as e:
            logger.warning("Failed to parse pantry configuration, treating pantry as empty", error=e.message)
            return None

    def has_ingredient(self, name: str) -> bool:
        return name in self.items

    def __contains__(self, name: str) -> bool:
        return self.has_ingredient(name)

    def __len__(self) -> int:
        return len(self.items)


def read_config_text(path: Optional[PathLike], kind: str) -> Optional[str]:
    """Read an aisle or pantry file, logging a warning when it cannot be read."""
    if path is None:
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to read {kind} file", path=str(path), error=str(e))
        return None


def categorize(entries: Iterable[Any], aisle_config: Optional[AisleConfig]) -> Dict[str, List[Any]]:
    """
    Group ingredients by aisle.

    Args:
        entries: Ingredient entries (anything with a name)
        aisle_config: Parsed aisle configuration, or None

    Returns:
        Mapping of category to entries in aisle-file order, with unmatched
        ingredients under "other" and empty categories left out
    """
    entries = list(entries)
    if aisle_config is None:
        logger.debug("No aisle configuration available, using 'other' for all ingredients")
        return {OTHER_CATEGORY: entries} if entries else {}

    grouped: Dict[str, List[Any]] = {category: [] for category in aisle_config.categories}
    other: List[Any] = []
    for entry in entries:
        name = entry_name(entry)
        category = aisle_config.category_for(name) if name else None
        if category is None:
            other.append(entry)
        else:
            grouped[category].append(entry)

    result = {category: items for category, items in grouped.items() if items}
    if other:
        result.setdefault(OTHER_CATEGORY, []).extend(other)
    return result


def partition(entries: Iterable[Any], pantry_config: Optional[PantryConfig]) -> Tuple[List[Any], List[Any]]:
    """
    Split ingredients by pantry membership.

    Returns:
        (in_pantry, retained) preserving input order
    """
    entries = list(entries)
    if pantry_config is None:
        return [], entries

    in_pantry, retained = [], []
    for entry in entries:
        name = entry_name(entry)
        if name is not None and pantry_config.has_ingredient(name):
            in_pantry.append(entry)
        else:
            retained.append(entry)
    return in_pantry, retained


def excluding_pantry(entries: Iterable[Any], pantry_config: Optional[PantryConfig]) -> List[Any]:
    """Ingredients still to buy."""
    return partition(entries, pantry_config)[1]


def from_pantry(entries: Iterable[Any], pantry_config: Optional[PantryConfig]) -> List[Any]:
    """Ingredients already in the pantry."""
    return partition(entries, pantry_config)[0]
