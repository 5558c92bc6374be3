#!/usr/bin/env python3
"""
Report Configuration
Options for rendering a recipe report: scaling, recipe search paths,
datastore, aisle and pantry files, and the servings keywords used when
resolving recipe references.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, Union
from dataclasses import dataclass, field

import yaml

from report_errors import ReportError, ErrorCategory

DEFAULT_SERVINGS_KEYWORDS = ("servings", "serving")
RECIPE_EXTENSION = "cook"

PathLike = Union[str, Path]


class ReportSettings:
    """Environment defaults for report generation."""

    def __init__(self):
        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # json or text

        # Recipe corpus
        self.BASE_PATH = os.getenv("RECIPE_REPORT_BASE_PATH")
        self.DATASTORE_PATH = os.getenv("RECIPE_REPORT_DATASTORE")
        self.AISLE_PATH = os.getenv("RECIPE_REPORT_AISLE")
        self.PANTRY_PATH = os.getenv("RECIPE_REPORT_PANTRY")

        keywords = os.getenv("RECIPE_REPORT_SERVINGS_KEYWORDS")
        self.SERVINGS_KEYWORDS = (
            tuple(k.strip() for k in keywords.split(",") if k.strip())
            if keywords else DEFAULT_SERVINGS_KEYWORDS
        )


@dataclass
class ReportConfig:
    """Configuration for rendering one report."""
    scale: float = 1.0
    base_paths: List[Path] = None
    datastore_path: Optional[Path] = None
    aisle_path: Optional[Path] = None
    pantry_path: Optional[Path] = None
    servings_keywords: Tuple[str, ...] = DEFAULT_SERVINGS_KEYWORDS
    recipe_extension: str = RECIPE_EXTENSION

    def __post_init__(self):
        if not self.base_paths:
            self.base_paths = [Path.cwd()]
        self.base_paths = [Path(p) for p in self.base_paths]
        for name in ("datastore_path", "aisle_path", "pantry_path"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, Path(value))
        self.servings_keywords = tuple(self.servings_keywords)
        self.scale = float(self.scale)

    @property
    def base_path(self) -> Path:
        """Primary search root, also exposed to templates."""
        return self.base_paths[0]

    @classmethod
    def builder(cls) -> "ReportConfigBuilder":
        return ReportConfigBuilder()

    @classmethod
    def from_env(cls) -> "ReportConfig":
        """Build a configuration from environment settings."""
        settings = ReportSettings()
        return cls(
            base_paths=[settings.BASE_PATH] if settings.BASE_PATH else None,
            datastore_path=settings.DATASTORE_PATH,
            aisle_path=settings.AISLE_PATH,
            pantry_path=settings.PANTRY_PATH,
            servings_keywords=settings.SERVINGS_KEYWORDS,
        )

    @classmethod
    def from_file(cls, config_path: PathLike, **overrides: Any) -> "ReportConfig":
        """
        Load a configuration from a YAML file.

        Args:
            config_path: YAML file with keys matching the dataclass fields
            overrides: Values taking precedence over the file

        Returns:
            Report configuration
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ReportError(
                f"Failed to load config from {config_path}: {e}",
                category=ErrorCategory.CONFIGURATION
            ) from e

        if not isinstance(data, dict):
            raise ReportError(
                f"Config file {config_path} must contain a mapping",
                category=ErrorCategory.CONFIGURATION
            )

        if "base_path" in data and "base_paths" not in data:
            data["base_paths"] = [data.pop("base_path")]

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ReportError(
                f"Unknown config keys in {config_path}: {', '.join(unknown)}",
                category=ErrorCategory.CONFIGURATION
            )

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)


@dataclass
class ReportConfigBuilder:
    """Fluent builder for ReportConfig."""
    _options: Dict[str, Any] = field(default_factory=dict)

    def scale(self, scale: float) -> "ReportConfigBuilder":
        self._options["scale"] = scale
        return self

    def base_path(self, base_path: PathLike) -> "ReportConfigBuilder":
        self._options.setdefault("base_paths", []).append(Path(base_path))
        return self

    def datastore_path(self, datastore_path: PathLike) -> "ReportConfigBuilder":
        self._options["datastore_path"] = Path(datastore_path)
        return self

    def aisle_path(self, aisle_path: PathLike) -> "ReportConfigBuilder":
        self._options["aisle_path"] = Path(aisle_path)
        return self

    def pantry_path(self, pantry_path: PathLike) -> "ReportConfigBuilder":
        self._options["pantry_path"] = Path(pantry_path)
        return self

    def servings_keywords(self, *keywords: str) -> "ReportConfigBuilder":
        self._options["servings_keywords"] = tuple(keywords)
        return self

    def build(self) -> ReportConfig:
        return ReportConfig(**self._options)
