from __future__ import annotations

from pathlib import Path

import pytest

from algagen.config import find_config, load_options
from algagen.emit.matrix import GuardPolicy
from algagen.errors import DeclarationError


def test_defaults_from_empty_config(tmp_path: Path, write_file) -> None:
    options = load_options(write_file(tmp_path / "algagen.toml", ""))
    assert options.crate == "alga"
    assert options.approx is False
    assert options.guard == GuardPolicy()
    assert options.catalog_path is None


def test_standalone_config(tmp_path: Path, write_file) -> None:
    path = write_file(
        tmp_path / "algagen.toml",
        """
crate = "alga_fork"

[guard]
"Quasigroup(Multiplicative)" = ""
"Quasigroup(Additive)" = "Multiplicative"
""",
    )
    options = load_options(path)
    assert options.crate == "alga_fork"
    assert options.guard.enabled is True
    assert options.guard.overrides == {
        "Quasigroup(Multiplicative)": None,
        "Quasigroup(Additive)": "Multiplicative",
    }


def test_pyproject_section(tmp_path: Path, write_file) -> None:
    path = write_file(
        tmp_path / "pyproject.toml",
        """
[project]
name = "demo"

[tool.algagen]
approx = true
guard = false
catalog = "kinds.toml"
""",
    )
    options = load_options(path)
    assert options.approx is True
    assert options.guard.enabled is False
    assert options.catalog_path == tmp_path / "kinds.toml"


def test_catalog_extension_through_options(tmp_path: Path, write_file) -> None:
    write_file(
        tmp_path / "kinds.toml",
        """
[[kinds]]
name = "Band"
arity = 1
slot0 = ["Semigroup"]
""",
    )
    options = load_options(write_file(tmp_path / "algagen.toml", 'catalog = "kinds.toml"\n'))
    catalog = options.build_catalog()
    assert "Band" in catalog
    assert "Field" in catalog


def test_invalid_guard_value(tmp_path: Path, write_file) -> None:
    with pytest.raises(DeclarationError):
        load_options(write_file(tmp_path / "algagen.toml", 'guard = "yes"\n'))


def test_broken_toml(tmp_path: Path, write_file) -> None:
    with pytest.raises(DeclarationError):
        load_options(write_file(tmp_path / "algagen.toml", "crate = \n"))


def test_find_config_walks_up(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "pyproject.toml", '[tool.algagen]\ncrate = "alga"\n')
    nested = tmp_path / "src" / "deep"
    nested.mkdir(parents=True)

    assert find_config(nested) == (tmp_path / "pyproject.toml").resolve()


def test_find_config_skips_unrelated_pyproject(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "pyproject.toml", '[project]\nname = "demo"\n')
    write_file(tmp_path / "algagen.toml", "")
    nested = tmp_path / "crate"
    nested.mkdir()
    write_file(nested / "pyproject.toml", '[project]\nname = "inner"\n')

    assert find_config(nested) == (tmp_path / "algagen.toml").resolve()
