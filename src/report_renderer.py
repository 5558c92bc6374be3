#!/usr/bin/env python3
"""
Recipe Report Renderer
Renders a recipe through a Jinja2 template. The template sees the scaled
recipe (sections, ingredients, cookware, timers, metadata) plus functions
for aggregated ingredient lists, aisle and pantry grouping, datastore
lookups and number/string formatting.
"""

import traceback
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import structlog
from jinja2 import Environment, Undefined, pass_context
from jinja2.exceptions import TemplateError, TemplateSyntaxError, UndefinedError
from jinja2.runtime import Context

from cooklang_parser import CooklangParser, Metadata, ParsedRecipe, get_parser
from recipe_datastore import Datastore
from recipe_loader import RecipeLoader
from recipe_scaling import ScalingResolver
from reference_expander import aggregate
from report_config import ReportConfig
from report_errors import ReportError, TemplateRenderError
from report_filters import NUMBER_HELPERS, STRING_HELPERS, QUANTITY_FILTERS
from shopping_categorizer import (
    AisleConfig, PantryConfig, categorize, excluding_pantry, from_pantry, read_config_text
)

logger = structlog.get_logger(__name__)

TEMPLATE_FILENAME = "<template>"


class MetadataView(dict):
    """Metadata as seen by templates: key access, YAML block when printed."""

    def __init__(self, metadata: Metadata):
        super().__init__(metadata.items())
        self._metadata = metadata

    def __str__(self) -> str:
        return str(self._metadata)


class ReportRenderer:
    """Renders recipe reports from Jinja2 templates."""

    def __init__(self, config: Optional[ReportConfig] = None, parser: Optional[CooklangParser] = None):
        """
        Initialize the renderer.

        Args:
            config: Report configuration, defaults to ReportConfig()
            parser: Recipe parser, defaults to the shared CooklangParser
        """
        self.config = config or ReportConfig()
        self.parser = parser or get_parser()
        self.loader = RecipeLoader(self.parser, self.config.recipe_extension)
        self.resolver = ScalingResolver(self.config.servings_keywords)
        self.environment = self._create_environment()

    def _create_environment(self) -> Environment:
        environment = Environment(undefined=Undefined)

        environment.globals["get_ingredient_list"] = self.get_ingredient_list
        environment.globals["aisled"] = self.aisled
        environment.globals["excluding_pantry"] = self.excluding_pantry
        environment.globals["from_pantry"] = self.from_pantry
        environment.globals["db"] = self.db

        # Helpers work both as functions and as filters
        for helpers in (NUMBER_HELPERS, STRING_HELPERS, QUANTITY_FILTERS):
            environment.globals.update(helpers)
            environment.filters.update(helpers)

        return environment

    @pass_context
    def get_ingredient_list(self, context: Context, ingredients: Iterable[Any],
                            expand_references: bool = True) -> List[Any]:
        """Aggregate ingredients, expanding recipe references unless disabled."""
        base_paths = context.get("base_paths") or [context.get("base_path") or Path.cwd()]
        return aggregate(
            ingredients,
            base_paths,
            expand_references=bool(expand_references),
            loader=self.loader,
            resolver=self.resolver,
            recipe_name=context.get("recipe_name") or "recipe",
            source_path=context.get("source_path"),
        )

    @pass_context
    def aisled(self, context: Context, ingredients: Iterable[Any]) -> Dict[str, List[Any]]:
        return categorize(ingredients, context.get("aisle_config"))

    @pass_context
    def excluding_pantry(self, context: Context, ingredients: Iterable[Any]) -> List[Any]:
        return excluding_pantry(ingredients, context.get("pantry_config"))

    @pass_context
    def from_pantry(self, context: Context, ingredients: Iterable[Any]) -> List[Any]:
        return from_pantry(ingredients, context.get("pantry_config"))

    @pass_context
    def db(self, context: Context, key_path: str) -> Any:
        datastore = context.get("datastore")
        if datastore is None:
            logger.warning("Datastore lookup without a datastore configured", key_path=key_path)
            return ""
        return datastore.lookup(key_path)

    def build_context(self, recipe: ParsedRecipe, recipe_name: Optional[str] = None,
                      source_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the template context for a recipe.

        Args:
            recipe: Parsed, already scaled recipe
            recipe_name: Name used in error messages
            source_path: Reference path of the recipe within the corpus, if any

        Returns:
            Template context dictionary
        """
        aisle_content = read_config_text(self.config.aisle_path, "aisle")
        pantry_content = read_config_text(self.config.pantry_path, "pantry")

        datastore = Datastore(self.config.datastore_path) if self.config.datastore_path else None

        return {
            "scale": self.config.scale,
            "sections": recipe.sections,
            "ingredients": recipe.ingredients,
            "cookware": recipe.cookware,
            "timers": recipe.timers,
            "metadata": MetadataView(recipe.metadata),
            "base_path": str(self.config.base_path),
            "base_paths": [str(p) for p in self.config.base_paths],
            "datastore": datastore,
            "aisle_content": aisle_content,
            "pantry_content": pantry_content,
            "aisle_config": AisleConfig.parse_lenient(aisle_content),
            "pantry_config": PantryConfig.parse_lenient(pantry_content),
            "recipe_name": recipe_name or recipe.title,
            "source_path": source_path,
        }

    def render(self, recipe_text: str, template: str, recipe_name: Optional[str] = None,
               source_path: Optional[str] = None) -> str:
        """
        Parse, scale and render a recipe.

        Args:
            recipe_text: Recipe source
            template: Jinja2 template source
            recipe_name: Name used in error messages
            source_path: Reference path of the recipe within the corpus, if any

        Returns:
            Rendered report
        """
        recipe, warnings = self.parser.parse(recipe_text).into_result()
        for warning in warnings:
            logger.warning("Recipe parse warning", warning=warning)

        recipe = recipe.scaled(self.config.scale)
        context = self.build_context(recipe, recipe_name, source_path)

        try:
            compiled = self.environment.from_string(template)
        except TemplateSyntaxError as e:
            raise TemplateRenderError(
                e.message or str(e), kind="syntax", lineno=e.lineno,
                source_line=_source_line(template, e.lineno)
            ) from e

        logger.debug("Rendering report", recipe=context["recipe_name"], scale=self.config.scale)

        try:
            return compiled.render(context)
        except TemplateRenderError as e:
            if e.lineno is None:
                e.lineno = _template_lineno(e)
                e.source_line = _source_line(template, e.lineno)
            raise
        except UndefinedError as e:
            lineno = _template_lineno(e)
            raise TemplateRenderError(
                e.message or str(e), kind="undefined", lineno=lineno,
                source_line=_source_line(template, lineno)
            ) from e
        except (ReportError, TemplateError, TypeError, ValueError, KeyError, ZeroDivisionError) as e:
            lineno = _template_lineno(e)
            raise TemplateRenderError(
                str(e), kind="invalid_operation", lineno=lineno,
                source_line=_source_line(template, lineno)
            ) from e


def _template_lineno(error: BaseException) -> Optional[int]:
    """Template line of the innermost template frame in the traceback."""
    lineno = None
    for frame, line in traceback.walk_tb(error.__traceback__):
        if frame.f_code.co_filename == TEMPLATE_FILENAME:
            lineno = line
    return lineno


def _source_line(template: str, lineno: Optional[int]) -> Optional[str]:
    if lineno is None:
        return None
    lines = template.splitlines()
    if 0 < lineno <= len(lines):
        return lines[lineno - 1].strip()
    return None


def render_template(recipe_text: str, template: str) -> str:
    """Render a recipe with the default configuration."""
    return render_template_with_config(recipe_text, template, ReportConfig())


def render_template_with_config(recipe_text: str, template: str, config: ReportConfig,
                                recipe_name: Optional[str] = None,
                                source_path: Optional[str] = None) -> str:
    """
    Render a recipe with the given configuration.

    Args:
        recipe_text: Recipe source
        template: Jinja2 template source
        config: Report configuration
        recipe_name: Name used in error messages
        source_path: Reference path of the recipe within the corpus, if any

    Returns:
        Rendered report
    """
    return ReportRenderer(config).render(recipe_text, template, recipe_name, source_path)
