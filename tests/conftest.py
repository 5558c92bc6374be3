"""Shared fixtures for the recipe report tests."""

import sys
from pathlib import Path

import pytest
import structlog

sys.path.append(str(Path(__file__).parent.parent / "src"))

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def recipes_dir():
    return DATA_DIR / "recipes"


@pytest.fixture
def read_recipe(recipes_dir):
    """Read a recipe file from the test corpus by name."""
    def _read(name):
        return (recipes_dir / f"{name}.cook").read_text(encoding="utf-8")
    return _read


@pytest.fixture
def write_recipes(tmp_path):
    """Write an ad-hoc recipe corpus into tmp_path."""
    def _write(recipes):
        for name, text in recipes.items():
            path = tmp_path / f"{name}.cook"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return tmp_path
    return _write
