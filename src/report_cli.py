#!/usr/bin/env python3
"""
Command line interface for rendering recipe reports.

    recipe-report "Recipe With Reference.cook" shopping.md.jinja --base-path recipes
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import structlog

from report_config import ReportConfig
from report_errors import ReportError, format_with_source
from report_logging import configure_logging
from report_renderer import ReportRenderer

logger = structlog.get_logger(__name__)


def _source_path(recipe_path: Path, base_paths: List[Path]) -> Optional[str]:
    """Reference path of the recipe relative to the first base path containing it."""
    resolved = recipe_path.resolve()
    for base in base_paths:
        try:
            return resolved.relative_to(Path(base).resolve()).with_suffix("").as_posix()
        except ValueError:
            continue
    return None


def build_config(args) -> ReportConfig:
    """Apply command line options over the config file, or over environment defaults."""
    overrides = {
        "scale": args.scale,
        "base_paths": args.base_path,
        "datastore_path": args.datastore,
        "aisle_path": args.aisle,
        "pantry_path": args.pantry,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    if args.config:
        return ReportConfig.from_file(args.config, **overrides)
    return replace(ReportConfig.from_env(), **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Render a recipe report."""
    import argparse

    parser = argparse.ArgumentParser(description='Render a recipe report from a Jinja2 template')
    parser.add_argument('recipe', help='Recipe file')
    parser.add_argument('template', help='Template file')
    parser.add_argument('--scale', type=float, help='Scale factor for the recipe')
    parser.add_argument('--base-path', action='append', help='Directory searched for referenced recipes (repeatable)')
    parser.add_argument('--datastore', help='Datastore directory of YAML files')
    parser.add_argument('--aisle', help='Aisle configuration file')
    parser.add_argument('--pantry', help='Pantry configuration file (TOML)')
    parser.add_argument('--config', help='Configuration file (YAML)')
    parser.add_argument('--output', '-o', help='Write the report to this file instead of stdout')
    parser.add_argument('--log-level', help='Log level (DEBUG, INFO, WARNING, ERROR)')
    parser.add_argument('--log-format', choices=['json', 'text'], help='Log output format')

    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    recipe_path = Path(args.recipe)
    try:
        config = build_config(args)
        recipe_text = recipe_path.read_text(encoding='utf-8')
        template = Path(args.template).read_text(encoding='utf-8')

        renderer = ReportRenderer(config)
        report = renderer.render(
            recipe_text,
            template,
            recipe_name=recipe_path.stem,
            source_path=_source_path(recipe_path, config.base_paths),
        )
    except ReportError as e:
        logger.error("Report generation failed", error_code=e.error_code, recipe=str(recipe_path))
        print(format_with_source(e), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(report, encoding='utf-8')
        logger.info("Report written", output=args.output)
    else:
        print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
