"""
Property-test matrix generation.

For every obligation, every law its kind contributes and every concrete
instantiation, one uniquely named test function is produced. Laws that are
undefined at a companion operator's identity (division by the additive
zero) get a guard that discards such inputs instead of failing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping

from ..catalog import Catalog, CatalogEntry
from ..errors import DeclarationError, MalformedInstantiationList
from ..spec.schema import Guard, Obligation, Target, TestFunction
from .stubs import DEFAULT_CRATE

logger = logging.getLogger(__name__)


def obligation_label(kind: str, operators: tuple[str, ...]) -> str:
    return f"{kind}({', '.join(operators)})"


@dataclass(frozen=True)
class GuardPolicy:
    """
    Decides which obligations get an identity guard.

    By default a guard is attached to obligations of `guarded` kinds that
    were reached through slot 1 of a 2-ary request; the identity checked is
    the request's operator 0. `overrides` maps an obligation label such as
    `"Quasigroup(Multiplicative)"` to the operator whose identity to check,
    or to None to drop the guard.
    """

    enabled: bool = True
    overrides: Mapping[str, str | None] = field(default_factory=dict)

    def guard_for(self, obligation: Obligation, entry: CatalogEntry) -> Guard | None:
        if not self.enabled:
            return None
        label = obligation_label(obligation.kind, obligation.operators)
        if label in self.overrides:
            operator = self.overrides[label]
            return Guard(operator=operator) if operator else None
        if entry.guarded and obligation.companion:
            return Guard(operator=obligation.companion)
        return None


def _ident(text: str) -> str:
    # `a::b` and `a_b` must not produce the same identifier
    return re.sub(r"\W+", "_", text.replace("::", "__")).strip("_")


def property_test_name(
    prop: str,
    target: Target,
    instantiation: tuple[str, ...],
    kind: str,
    operators: tuple[str, ...],
) -> str:
    args = "_".join(_ident(t) for t in instantiation)
    ops = "".join(f"_{_ident(op)}" for op in operators)
    middle = f"_{args}" if args else ""
    return f"{prop}_for_{_ident(target.name)}{middle}_as_{kind}{ops}"


def _report_collision(
    target: Target,
    name: str,
    first: tuple[Obligation, tuple[str, ...]],
    second: tuple[Obligation, tuple[str, ...]],
) -> None:
    (ob_a, inst_a), (ob_b, inst_b) = first, second
    if inst_a != inst_b:
        raise MalformedInstantiationList(
            f"Instantiations ({', '.join(inst_a)}) and ({', '.join(inst_b)}) of `{target.name}` "
            f"produce the same test name `{name}`."
        )
    raise DeclarationError(
        f"{obligation_label(ob_a.kind, ob_a.operators)} and {obligation_label(ob_b.kind, ob_b.operators)} "
        f"of `{target.name}` produce the same test name `{name}`; rename one of the operators."
    )


def generate(
    target: Target,
    obligations: list[Obligation],
    instantiations: list[tuple[str, ...]],
    enabled: bool,
    catalog: Catalog,
    *,
    policy: GuardPolicy | None = None,
    approx: bool = False,
) -> list[TestFunction]:
    """Build the test matrix for one target; empty when `enabled` is false."""
    if not enabled:
        return []

    policy = policy or GuardPolicy()
    matrix: list[tuple[str, ...] | None] = list(instantiations) or [None]

    tests: list[TestFunction] = []
    names: dict[str, tuple[Obligation, tuple[str, ...]]] = {}
    for ob in obligations:
        entry = catalog.lookup(ob.kind)
        guard = policy.guard_for(ob, entry)
        for prop in entry.properties:
            prop_name = prop.variant(approx)
            for inst in matrix:
                ty = target.type_expr(inst)
                name = property_test_name(prop_name, target, inst or (), ob.kind, ob.operators)
                if name in names:
                    _report_collision(target, name, names[name], (ob, inst or ()))
                names[name] = (ob, inst or ())
                tests.append(
                    TestFunction(
                        name=name,
                        kind=ob.kind,
                        property=prop_name,
                        operators=ob.operators,
                        instantiation=inst or (),
                        parameters=tuple(ty for _ in range(prop.arity)),
                        invocation=(
                            f"<{ty} as _alga::general::{entry.trait_name}<{', '.join(ob.operators)}>>"
                            f"::{prop_name}(args)"
                        ),
                        guard=guard,
                    )
                )

    logger.debug("generated %d property tests for %s", len(tests), target.name)
    return tests


def _indent(text: str, prefix: str) -> list[str]:
    return [prefix + line for line in text.splitlines()]


def render_test(test: TestFunction) -> list[str]:
    params = ", ".join(test.parameters)
    if len(test.parameters) == 1:
        params += ","
    lines = ["#[::quickcheck_macros::quickcheck]"]
    if test.guard is None:
        lines.append(f"fn {test.name}(args: ({params})) -> bool {{")
        lines.append(f"    {test.invocation}")
    else:
        lines.append(f"fn {test.name}(args: ({params})) -> ::quickcheck::TestResult {{")
        lines.extend(_indent(test.guard.expression(test.parameters[0], len(test.parameters)), "    "))
        lines.append(f"    ::quickcheck::TestResult::from_bool({test.invocation})")
    lines.append("}")
    return lines


def render_tests(target: Target, tests: list[TestFunction], crate: str = DEFAULT_CRATE) -> str:
    if not tests:
        return ""
    lines = [
        "#[cfg(test)]",
        "#[allow(non_snake_case)]",
        f"mod _alga_quickcheck_{_ident(target.name)} {{",
        f"    extern crate {crate} as _alga;",
        "    use super::*;",
    ]
    for test in tests:
        lines.append("")
        lines.extend(_indent("\n".join(render_test(test)), "    "))
    lines.append("}")
    return "\n".join(lines) + "\n"
