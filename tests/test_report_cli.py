"""Tests for the recipe-report command line interface."""

import logging

import pytest
import structlog

import report_cli
from report_cli import main

ENV_VARS = (
    "RECIPE_REPORT_BASE_PATH",
    "RECIPE_REPORT_DATASTORE",
    "RECIPE_REPORT_AISLE",
    "RECIPE_REPORT_PANTRY",
    "RECIPE_REPORT_SERVINGS_KEYWORDS",
)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep log output off stdout without caching module loggers."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def configure(level=None, log_format=None, stream=None):
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))

    monkeypatch.setattr(report_cli, "configure_logging", configure)


@pytest.fixture
def report_path(data_dir):
    def _path(name):
        return str(data_dir / "reports" / f"{name}.md.jinja")
    return _path


class TestMain:

    def test_writes_report_to_file(self, recipes_dir, report_path, tmp_path):
        output = tmp_path / "report.md"
        exit_code = main([
            str(recipes_dir / "Recipe With Reference.cook"),
            report_path("ingredients"),
            "--base-path", str(recipes_dir),
            "--output", str(output),
        ])

        assert exit_code == 0
        assert "* milk: 700 ml" in output.read_text()

    def test_prints_report(self, recipes_dir, report_path, capsys):
        exit_code = main([str(recipes_dir / "Pancakes.cook"), report_path("ingredients"), "--scale", "2"])

        assert exit_code == 0
        assert "* eggs: 6 large" in capsys.readouterr().out

    def test_shopping_options(self, data_dir, recipes_dir, report_path, capsys):
        exit_code = main([
            str(recipes_dir / "Pancakes.cook"),
            report_path("smart_shopping"),
            "--aisle", str(data_dir / "aisle.conf"),
            "--pantry", str(data_dir / "pantry.conf"),
            "--datastore", str(data_dir / "db"),
        ])

        assert exit_code == 0
        assert "✓ Flour: 125 g" in capsys.readouterr().out

    def test_config_file(self, recipes_dir, report_path, tmp_path, capsys):
        config = tmp_path / "report.yml"
        config.write_text(f"base_path: {recipes_dir}\nscale: 3\n")

        exit_code = main([
            str(recipes_dir / "Recipe With Reference.cook"),
            report_path("ingredients"),
            "--config", str(config),
            "--scale", "1",
        ])

        assert exit_code == 0
        assert "* milk: 700 ml" in capsys.readouterr().out

    def test_reference_failure_exits_with_chain(self, write_recipes, report_path, capsys):
        base = write_recipes({"Dinner": "Serve @./Ghost{1}."})
        exit_code = main([str(base / "Dinner.cook"), report_path("ingredients"), "--base-path", str(base)])

        assert exit_code == 1
        err = capsys.readouterr().err
        assert "Failed to resolve reference 'Ghost' in recipe 'Dinner'" in err
        assert "Caused by:" in err

    def test_cycle_through_rendered_recipe(self, write_recipes, report_path, capsys):
        base = write_recipes({"A": "Make @./B{1}.", "B": "Make @./A{1}."})
        exit_code = main([str(base / "A.cook"), report_path("ingredients"), "--base-path", str(base)])

        assert exit_code == 1
        assert "A -> B -> A" in capsys.readouterr().err

    def test_missing_recipe_file(self, tmp_path, report_path, capsys):
        exit_code = main([str(tmp_path / "Nowhere.cook"), report_path("ingredients")])

        assert exit_code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_template_error(self, recipes_dir, tmp_path, capsys):
        template = tmp_path / "broken.md.jinja"
        template.write_text("{% for x in %}")
        exit_code = main([str(recipes_dir / "Pancakes.cook"), str(template)])

        assert exit_code == 1
        assert "Hint: This is a syntax error" in capsys.readouterr().err
