"""
Generator options.

Read from `[tool.algagen]` in `pyproject.toml` or from a standalone
`algagen.toml`:

    [tool.algagen]
    crate = "alga"
    approx = false
    catalog = "kinds.toml"        # optional catalog extension

    [tool.algagen.guard]
    enabled = true
    "Quasigroup(Multiplicative)" = "Additive"
    "Quasigroup(Additive)" = ""   # empty string drops a guard
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .catalog import Catalog, default_catalog, load_catalog_extension
from .emit.matrix import GuardPolicy
from .emit.stubs import DEFAULT_CRATE
from .errors import DeclarationError

CONFIG_FILENAMES = ("algagen.toml", "pyproject.toml")


@dataclass(frozen=True)
class GeneratorOptions:
    crate: str = DEFAULT_CRATE
    approx: bool = False
    guard: GuardPolicy = field(default_factory=GuardPolicy)
    catalog_path: Path | None = None

    def build_catalog(self) -> Catalog:
        base = default_catalog()
        if self.catalog_path is None:
            return base
        return base.extended(load_catalog_extension(self.catalog_path))


def guard_policy(raw: Any) -> GuardPolicy:
    if raw is None:
        return GuardPolicy()
    if isinstance(raw, bool):
        return GuardPolicy(enabled=raw)
    if not isinstance(raw, dict):
        raise DeclarationError("guard must be a boolean or a table")
    overrides = {
        str(k): (str(v).strip() or None)
        for k, v in raw.items()
        if k != "enabled"
    }
    return GuardPolicy(enabled=bool(raw.get("enabled", True)), overrides=overrides)


def options_from_dict(data: dict[str, Any], base_dir: Path | None = None) -> GeneratorOptions:
    crate = str(data.get("crate", DEFAULT_CRATE)).strip() or DEFAULT_CRATE
    catalog_path = None
    if isinstance(data.get("catalog"), str) and data["catalog"].strip():
        catalog_path = Path(data["catalog"].strip())
        if base_dir is not None and not catalog_path.is_absolute():
            catalog_path = base_dir / catalog_path
    return GeneratorOptions(
        crate=crate,
        approx=bool(data.get("approx", False)),
        guard=guard_policy(data.get("guard")),
        catalog_path=catalog_path,
    )


def load_options(path: Path) -> GeneratorOptions:
    """Load options from a TOML file; `pyproject.toml` is read under `[tool.algagen]`."""
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except Exception as e:
            raise DeclarationError(f"Failed to parse config TOML {path}: {e}") from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("algagen", {})
    elif "tool" in data and "algagen" in data.get("tool", {}):
        data = data["tool"]["algagen"]
    return options_from_dict(data, base_dir=path.parent)


def find_config(start: Path) -> Path | None:
    """Find the nearest config file by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        for filename in CONFIG_FILENAMES:
            candidate = p / filename
            if not candidate.is_file():
                continue
            if filename == "pyproject.toml":
                with open(candidate, "rb") as f:
                    try:
                        if "algagen" not in tomllib.load(f).get("tool", {}):
                            continue
                    except Exception:
                        continue
            return candidate
    return None
