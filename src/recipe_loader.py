#!/usr/bin/env python3
"""
Recipe Loader
Locates referenced recipe files under the configured base paths and parses
them into structured recipes.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import structlog

from cooklang_parser import CooklangParser, ParsedRecipe, get_parser
from report_config import RECIPE_EXTENSION
from report_errors import RecipeNotFoundError, RecipeParseFailure

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class RecipeLoader:
    """Finds and parses recipe files referenced from other recipes."""

    def __init__(self, parser: Optional[CooklangParser] = None, extension: str = RECIPE_EXTENSION):
        self.parser = parser or get_parser()
        self.extension = "." + extension.lstrip(".")

    def _candidates(self, base_paths: Sequence[PathLike], reference: str) -> List[Path]:
        raw = Path(reference)
        if raw.suffix != self.extension:
            raw = raw.with_name(raw.name + self.extension)

        candidates = []
        if raw.is_absolute():
            candidates.append(raw)

        relative = str(raw).replace("\\", "/")
        while relative.startswith("./"):
            relative = relative[2:]
        relative = relative.lstrip("/")

        for base in base_paths:
            candidates.append(Path(base) / relative)
        return candidates

    def find(self, base_paths: Sequence[PathLike], reference: str) -> Path:
        """
        Resolve a reference to an existing recipe file.

        Args:
            base_paths: Search roots, tried in order
            reference: Reference path such as './Pancakes' or 'sub/Bread.cook'

        Returns:
            Path of the first matching file
        """
        for candidate in self._candidates(base_paths, reference):
            if candidate.is_file():
                logger.debug("Resolved recipe reference", reference=reference, path=str(candidate))
                return candidate

        raise RecipeNotFoundError(reference, [str(p) for p in base_paths])

    def load(self, base_paths: Sequence[PathLike], reference: str) -> ParsedRecipe:
        """
        Locate, read and parse a referenced recipe.

        Args:
            base_paths: Search roots, tried in order
            reference: Reference path

        Returns:
            Parsed recipe, named after its file stem
        """
        path = self.find(base_paths, reference)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RecipeParseFailure(reference, [f"could not read {path}: {e}"]) from e

        result = self.parser.parse(text)
        if result.has_errors() or result.recipe is None:
            raise RecipeParseFailure(reference, result.errors, result.warnings)

        for warning in result.warnings:
            logger.warning("Parse warning in referenced recipe", reference=reference, warning=warning)

        recipe = result.recipe
        recipe.name = path.stem
        return recipe
