from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

import yaml

from ..errors import DeclarationError
from .parser import parse_attribute, parse_generics
from .schema import RawEntry, Target, TargetDecl


def _coerce_str_list(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DeclarationError(f"{where} must be a string or a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def _coerce_entry(raw: Any, where: str) -> RawEntry:
    """
    A trait entry is either compact text (`"Group(Additive)"`) or a single-key
    map (`{Group: [Additive]}`, `{Where: "T: Copy"}`).
    """
    if isinstance(raw, str):
        return parse_attribute(raw)
    if isinstance(raw, dict) and len(raw) == 1:
        ((key, value),) = raw.items()
        return (str(key), value)
    raise DeclarationError(f"{where}: cannot read trait entry {raw!r}")


def target_from_dict(raw: dict[str, Any], position: int = 0) -> TargetDecl:
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise DeclarationError(f"targets[{position}] needs a name")
    name = name.strip()

    traits = raw.get("traits", [])
    if not isinstance(traits, list):
        raise DeclarationError(f"{name}.traits must be a list")
    entries = tuple(_coerce_entry(t, f"{name}.traits") for t in traits)

    quickcheck_raw = raw.get("quickcheck", False)
    instantiations: tuple[Any, ...] = ()
    approx: bool | None = None
    guard: Any = None
    if isinstance(quickcheck_raw, dict):
        enabled = bool(quickcheck_raw.get("enabled", True))
        checks = quickcheck_raw.get("check")
        # A single instantiation may be given without the outer list.
        instantiations = tuple(checks) if isinstance(checks, list) else ((checks,) if checks is not None else ())
        if "approx" in quickcheck_raw:
            approx = bool(quickcheck_raw["approx"])
        guard = quickcheck_raw.get("guard")
    else:
        enabled = bool(quickcheck_raw)

    target = Target(
        name=name,
        generics=parse_generics(raw.get("generics")),
        where_predicates=_coerce_str_list(raw.get("where"), f"{name}.where"),
    )
    return TargetDecl(
        target=target,
        entries=entries,
        quickcheck=enabled,
        instantiations=instantiations,
        approx=approx,
        guard=guard,
    )


def load_declarations(path: Path) -> list[TargetDecl]:
    """
    Load target declarations from YAML or TOML.

    The document has a top-level `targets` list; see the README for the
    shape of a target.
    """
    if not path.exists():
        raise DeclarationError(f"Declaration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text)
    except Exception as e:
        raise DeclarationError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("targets"), list):
        raise DeclarationError(f"{path}: expected a top-level `targets` list")

    decls: list[TargetDecl] = []
    for i, raw in enumerate(data["targets"]):
        if not isinstance(raw, dict):
            raise DeclarationError(f"{path}: targets[{i}] must be a table")
        decls.append(target_from_dict(raw, i))
    return decls
