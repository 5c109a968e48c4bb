"""
Hierarchy catalog of algebraic structure kinds.

Each entry records the operator arity of a kind, the weaker kinds it
implies per operator slot and the law-checking functions it contributes.
Dependency lists are stored pre-flattened: every list already holds the
full transitive set, so expansion is a plain table walk. `check_consistency`
verifies that the table is closed.

The lattice mirrors the `alga` crate:

    Magma > {Semigroup, Quasigroup}
    Semigroup + identity     -> Monoid
    Quasigroup + identity    -> Loop
    Loop & Monoid            -> Group
    Group + commutativity    -> GroupAbelian
    GroupAbelian(+) & Monoid(*) -> Ring
    Ring + commutativity(*)  -> RingCommutative
    RingCommutative & GroupAbelian(*) -> Field

Magma itself is not derivable (it carries the user's `operate`) and is
therefore not part of the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import CatalogError, DeclarationError, UnknownKind


@dataclass(frozen=True)
class Property:
    """A law-checking function exposed by a structure trait."""

    name: str
    arity: int

    def variant(self, approx: bool) -> str:
        return f"{self.name}_approx" if approx else self.name


@dataclass(frozen=True)
class CatalogEntry:
    kind: str
    arity: int
    slot0: tuple[str, ...] = ()
    slot1: tuple[str, ...] = ()
    joint: tuple[str, ...] = ()  # 2-ary kinds implied under the full operator tuple
    properties: tuple[Property, ...] = ()
    guarded: bool = False  # properties undefined at a companion operator's identity

    @property
    def trait_name(self) -> str:
        return f"Abstract{self.kind}"

    def dependencies(self) -> tuple[str, ...]:
        seen: list[str] = []
        for name in (*self.joint, *self.slot0, *self.slot1):
            if name not in seen:
                seen.append(name)
        return tuple(seen)


_GROUP_ABELIAN_CLOSURE = ("GroupAbelian", "Group", "Monoid", "Semigroup", "Loop", "Quasigroup")

# Canonical order; also the tie-break order for suggestions.
DEFAULT_ENTRIES: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        kind="Quasigroup",
        arity=1,
        properties=(Property("prop_inv_is_latin_square", 2),),
        guarded=True,
    ),
    CatalogEntry(
        kind="Semigroup",
        arity=1,
        properties=(Property("prop_is_associative", 3),),
    ),
    CatalogEntry(kind="Loop", arity=1, slot0=("Quasigroup",)),
    CatalogEntry(
        kind="Monoid",
        arity=1,
        slot0=("Semigroup",),
        properties=(Property("prop_operating_identity_element_is_noop", 1),),
    ),
    CatalogEntry(kind="Group", arity=1, slot0=("Monoid", "Semigroup", "Loop", "Quasigroup")),
    CatalogEntry(
        kind="GroupAbelian",
        arity=1,
        slot0=_GROUP_ABELIAN_CLOSURE[1:],
        properties=(Property("prop_is_commutative", 2),),
    ),
    CatalogEntry(
        kind="Ring",
        arity=2,
        slot0=_GROUP_ABELIAN_CLOSURE,
        slot1=("Monoid", "Semigroup"),
        properties=(Property("prop_mul_and_add_are_distributive", 3),),
    ),
    CatalogEntry(
        kind="RingCommutative",
        arity=2,
        joint=("Ring",),
        slot0=_GROUP_ABELIAN_CLOSURE,
        slot1=("Monoid", "Semigroup"),
        properties=(Property("prop_mul_is_commutative", 2),),
    ),
    CatalogEntry(
        kind="Field",
        arity=2,
        joint=("RingCommutative", "Ring"),
        slot0=_GROUP_ABELIAN_CLOSURE,
        slot1=_GROUP_ABELIAN_CLOSURE,
    ),
)


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


@dataclass(frozen=True)
class Catalog:
    """Read-only kind table, shared by reference between all targets."""

    entries: tuple[CatalogEntry, ...]
    _by_kind: dict[str, CatalogEntry] = field(default_factory=dict, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        for entry in self.entries:
            self._by_kind[entry.kind] = entry

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_kind

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.entries]

    def closest(self, name: str) -> str | None:
        """Known kind closest to `name` by edit distance (case-insensitive)."""
        best: tuple[int, str] | None = None
        for kind in self.kinds():
            d = edit_distance(name.lower(), kind.lower())
            if best is None or d < best[0]:
                best = (d, kind)
        return best[1] if best else None

    def lookup(self, kind: str) -> CatalogEntry:
        entry = self._by_kind.get(kind)
        if entry is None:
            raise UnknownKind(kind, self.closest(kind))
        return entry

    def dependencies(self, kind: str) -> tuple[str, ...]:
        return self.lookup(kind).dependencies()

    def check_consistency(self) -> list[str]:
        """
        Verify the pre-flattened tables.

        Returns a list of human-readable problems; empty when the catalog
        is internally consistent.
        """
        problems: list[str] = []
        for entry in self.entries:
            if entry.arity not in (1, 2):
                problems.append(f"{entry.kind}: arity must be 1 or 2, got {entry.arity}")
                continue
            if entry.arity == 1 and (entry.slot1 or entry.joint):
                problems.append(f"{entry.kind}: 1-ary kinds cannot declare slot1 or joint dependencies")

            for slot_name, deps in (("slot0", entry.slot0), ("slot1", entry.slot1)):
                for dep in deps:
                    dep_entry = self._by_kind.get(dep)
                    if dep_entry is None:
                        problems.append(f"{entry.kind}: {slot_name} dependency `{dep}` is not a known kind")
                        continue
                    if dep_entry.arity != 1:
                        problems.append(f"{entry.kind}: {slot_name} dependency `{dep}` must be 1-ary")
                        continue
                    missing = [d for d in dep_entry.slot0 if d not in deps]
                    if missing:
                        problems.append(
                            f"{entry.kind}: {slot_name} is not closed under `{dep}` (missing {', '.join(missing)})"
                        )

            for dep in entry.joint:
                dep_entry = self._by_kind.get(dep)
                if dep_entry is None:
                    problems.append(f"{entry.kind}: joint dependency `{dep}` is not a known kind")
                    continue
                if dep_entry.arity != 2:
                    problems.append(f"{entry.kind}: joint dependency `{dep}` must be 2-ary")
                    continue
                for inherited, own, label in (
                    (dep_entry.joint, entry.joint, "joint"),
                    (dep_entry.slot0, entry.slot0, "slot0"),
                    (dep_entry.slot1, entry.slot1, "slot1"),
                ):
                    missing = [d for d in inherited if d not in own]
                    if missing:
                        problems.append(
                            f"{entry.kind}: {label} is not closed under `{dep}` (missing {', '.join(missing)})"
                        )
        return problems

    def extended(self, extra: list[CatalogEntry]) -> "Catalog":
        """Return a new catalog with `extra` entries added or replacing existing ones."""
        replaced = {e.kind: e for e in extra}
        entries = [replaced.pop(e.kind, e) for e in self.entries]
        entries.extend(e for e in extra if e.kind in replaced)
        catalog = Catalog(entries=tuple(entries))
        problems = catalog.check_consistency()
        if problems:
            raise CatalogError(problems)
        return catalog


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    return Catalog(entries=DEFAULT_ENTRIES)


def _str_tuple(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DeclarationError(f"{where} must be a list of kind names")
    return tuple(v.strip() for v in value if v.strip())


def _int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise DeclarationError(f"{where} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DeclarationError(f"{where} must be an integer, got {value!r}") from None


def load_catalog_extension(path: Path) -> list[CatalogEntry]:
    """
    Load additional kinds from TOML.

    Each `[[kinds]]` table takes `name`, `arity`, optional `slot0`, `slot1`,
    `joint`, `guarded` and `properties = [{ name = ..., arity = ... }]`.
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except Exception as e:
            raise DeclarationError(f"Failed to parse catalog TOML {path}: {e}") from e

    entries: list[CatalogEntry] = []
    for raw in data.get("kinds", []):
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("name", "")).strip()
        if not name:
            raise DeclarationError(f"{path}: every [[kinds]] entry needs a name")

        props: list[Property] = []
        for p in raw.get("properties", []):
            if not isinstance(p, dict) or not isinstance(p.get("name"), str):
                raise DeclarationError(f"{path}: properties of `{name}` must be tables with name and arity")
            props.append(Property(name=p["name"], arity=_int(p.get("arity", 1), f"{name}.{p['name']}.arity")))

        entries.append(
            CatalogEntry(
                kind=name,
                arity=_int(raw.get("arity", 1), f"{name}.arity"),
                slot0=_str_tuple(raw.get("slot0"), f"{name}.slot0"),
                slot1=_str_tuple(raw.get("slot1"), f"{name}.slot1"),
                joint=_str_tuple(raw.get("joint"), f"{name}.joint"),
                properties=tuple(props),
                guarded=bool(raw.get("guarded", False)),
            )
        )
    return entries
