"""Render implementation stubs for a target's obligations."""

from __future__ import annotations

import re

from ..catalog import Catalog
from ..spec.parser import split_top_level
from ..spec.schema import ImplStub, Obligation, Target

DEFAULT_CRATE = "alga"


def scope_name(target: Target, prefix: str = "_ALGA_DERIVE_") -> str:
    """Per-target discriminator for the enclosing scope."""
    return prefix + re.sub(r"\W", "_", target.name)


def merge_where(target: Target, clause: str | None) -> tuple[str, ...]:
    """The target's own predicates first, then the obligation's."""
    predicates = list(target.where_predicates)
    if clause:
        predicates.extend(split_top_level(clause))
    return tuple(predicates)


def emit(target: Target, obligations: list[Obligation], catalog: Catalog) -> list[ImplStub]:
    return [
        ImplStub(
            kind=ob.kind,
            trait_name=catalog.lookup(ob.kind).trait_name,
            operators=ob.operators,
            where_clause=merge_where(target, ob.where_clause),
        )
        for ob in obligations
    ]


def render_where(predicates: tuple[str, ...]) -> str:
    if not predicates:
        return ""
    return " where " + ", ".join(predicates)


def render_stub(target: Target, stub: ImplStub) -> str:
    return (
        f"impl{target.generics.impl_generics()} "
        f"_alga::general::{stub.trait_name}<{', '.join(stub.operators)}> "
        f"for {target.type_expr()}{render_where(stub.where_clause)} {{}}"
    )


def render_stubs(target: Target, stubs: list[ImplStub], crate: str = DEFAULT_CRATE) -> str:
    lines = [
        "#[allow(non_upper_case_globals, unused_attributes, unused_qualifications)]",
        f"const {scope_name(target)}: () = {{",
        f"    extern crate {crate} as _alga;",
    ]
    for stub in stubs:
        lines.append("    #[automatically_derived]")
        lines.append(f"    {render_stub(target, stub)}")
    lines.append("};")
    return "\n".join(lines) + "\n"
