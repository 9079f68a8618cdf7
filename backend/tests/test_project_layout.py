"""The installable distribution must pick up every package under backend/app."""
from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parents[2]


def test_app_packages_found_without_init_files():
    config = tomllib.loads((ROOT / "pyproject.toml").read_text())
    find = config["tool"]["setuptools"]["packages"]["find"]

    assert find["namespaces"] is True
    assert find["where"] == ["backend"]
    # app/ and app/api/ carry no __init__.py, so only namespace discovery sees them
    assert not (ROOT / "backend" / "app" / "__init__.py").exists()
    assert (ROOT / "backend" / "app" / "api" / "routes.py").exists()
