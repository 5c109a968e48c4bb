"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from algagen.catalog import Catalog, default_catalog
from algagen.spec.schema import Target


@pytest.fixture
def catalog() -> Catalog:
    """The built-in structure catalog."""
    return default_catalog()


@pytest.fixture
def target() -> Target:
    """A plain, non-generic target type."""
    return Target(name="W")


@pytest.fixture
def write_file():
    """Write text to a path, creating parent directories."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
