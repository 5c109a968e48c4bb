from __future__ import annotations

from algagen.catalog import Catalog
from algagen.emit.stubs import emit, merge_where, render_stub, render_stubs, scope_name
from algagen.expand import expand_all
from algagen.spec.parser import parse_entries, parse_generics
from algagen.spec.schema import Target


def _stubs(target: Target, entries, catalog: Catalog):
    obligations = expand_all(parse_entries(entries, catalog), catalog)
    return emit(target, obligations, catalog)


def test_one_stub_per_obligation(target: Target, catalog: Catalog) -> None:
    stubs = _stubs(target, [("Field", ["Additive", "Multiplicative"])], catalog)
    assert len(stubs) == 15
    assert stubs[0].trait_name == "AbstractField"
    assert stubs[0].operators == ("Additive", "Multiplicative")
    assert len({(s.trait_name, s.operators) for s in stubs}) == 15


def test_render_plain_stub(target: Target, catalog: Catalog) -> None:
    stub = _stubs(target, [("Semigroup", ["Additive"])], catalog)[0]
    assert render_stub(target, stub) == "impl _alga::general::AbstractSemigroup<Additive> for W {}"


def test_generics_and_where_clauses_are_carried(catalog: Catalog) -> None:
    target = Target(
        name="Wrapper",
        generics=parse_generics(["T: Clone"]),
        where_predicates=("T: PartialEq",),
    )
    stubs = _stubs(
        target,
        [("Group", ["Additive"]), ("Where", "T: Copy, T: Default"), ("Semigroup", ["Multiplicative"])],
        catalog,
    )

    group = stubs[0]
    assert group.where_clause == ("T: PartialEq", "T: Copy", "T: Default")
    assert render_stub(target, group) == (
        "impl<T: Clone> _alga::general::AbstractGroup<Additive> for Wrapper<T> "
        "where T: PartialEq, T: Copy, T: Default {}"
    )

    mul = [s for s in stubs if s.operators == ("Multiplicative",)]
    assert [s.where_clause for s in mul] == [("T: PartialEq",)]


def test_merge_where_keeps_nested_commas() -> None:
    target = Target(name="W")
    assert merge_where(target, "T: Foo<A, B>, U: Copy") == ("T: Foo<A, B>", "U: Copy")
    assert merge_where(target, "F: Fn(u8) -> u8, T: Copy") == ("F: Fn(u8) -> u8", "T: Copy")
    assert merge_where(target, None) == ()


def test_render_stubs_block(target: Target, catalog: Catalog) -> None:
    stubs = _stubs(target, [("Monoid", ["Additive"])], catalog)
    text = render_stubs(target, stubs)

    assert "const _ALGA_DERIVE_W: () = {" in text
    assert "extern crate alga as _alga;" in text
    assert text.count("#[automatically_derived]") == 2
    assert "impl _alga::general::AbstractMonoid<Additive> for W {}" in text
    assert "impl _alga::general::AbstractSemigroup<Additive> for W {}" in text
    assert text.rstrip().endswith("};")


def test_crate_alias_is_configurable(target: Target, catalog: Catalog) -> None:
    stubs = _stubs(target, [("Semigroup", ["Additive"])], catalog)
    assert "extern crate alga_fork as _alga;" in render_stubs(target, stubs, crate="alga_fork")


def test_scope_names_are_distinct_per_target() -> None:
    assert scope_name(Target(name="A")) != scope_name(Target(name="B"))
    assert scope_name(Target(name="Vec3")) == "_ALGA_DERIVE_Vec3"
