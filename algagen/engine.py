"""
Per-target derivation pipeline.

parse -> expand -> emit stubs / generate tests. A target either yields its
full output or a single diagnostic; other targets in the same batch are
unaffected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from .catalog import Catalog
from .config import GeneratorOptions, guard_policy
from .emit.matrix import generate, render_tests
from .emit.stubs import emit, render_stubs
from .errors import DeriveError, MalformedInstantiationList
from .expand import expand_all
from .spec.parser import parse_entries, parse_instantiations
from .spec.schema import ImplStub, Obligation, StructureRequest, Target, TargetDecl, TestFunction

logger = logging.getLogger(__name__)


@dataclass
class DeriveResult:
    target: Target
    requests: list[StructureRequest] = field(default_factory=list)
    obligations: list[Obligation] = field(default_factory=list)
    stubs: list[ImplStub] = field(default_factory=list)
    tests: list[TestFunction] = field(default_factory=list)
    crate: str = "alga"

    def render(self) -> str:
        parts = [render_stubs(self.target, self.stubs, crate=self.crate)]
        if self.tests:
            parts.append(render_tests(self.target, self.tests, crate=self.crate))
        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target.name,
            "obligations": [
                {"kind": ob.kind, "operators": list(ob.operators), "where": ob.where_clause}
                for ob in self.obligations
            ],
            "tests": [
                {
                    "name": t.name,
                    "kind": t.kind,
                    "property": t.property,
                    "operators": list(t.operators),
                    "instantiation": list(t.instantiation),
                    "guard": t.guard.operator if t.guard else None,
                }
                for t in self.tests
            ],
        }


@dataclass
class Diagnostic:
    """A failed target."""

    target: str
    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"ERROR: [{self.code}] {self.target} - {self.message}"


@dataclass
class BatchResult:
    results: list[DeriveResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def render(self) -> str:
        return "\n".join(r.render() for r in self.results)


def derive(
    decl: TargetDecl,
    catalog: Catalog,
    options: GeneratorOptions | None = None,
    *,
    with_tests: bool = True,
) -> DeriveResult:
    """Run the whole pipeline for one target. Raises DeriveError on any invalid input."""
    options = options or GeneratorOptions()
    target = decl.target

    requests = parse_entries(decl.entries, catalog)
    obligations = expand_all(requests, catalog, target=target.name)
    stubs = emit(target, obligations, catalog)

    tests: list[TestFunction] = []
    if with_tests and decl.quickcheck:
        instantiations = parse_instantiations(list(decl.instantiations), target.generics)
        if target.generics.instantiable and not instantiations:
            raise MalformedInstantiationList(f"`{target.name}` is generic; property tests need at least one instantiation.")
        approx = options.approx if decl.approx is None else decl.approx
        policy = options.guard if decl.guard is None else guard_policy(decl.guard)
        tests = generate(
            target,
            obligations,
            instantiations,
            enabled=True,
            catalog=catalog,
            policy=policy,
            approx=approx,
        )

    logger.info(
        "%s: %d requests, %d impls, %d tests", target.name, len(requests), len(stubs), len(tests)
    )
    return DeriveResult(
        target=target,
        requests=requests,
        obligations=obligations,
        stubs=stubs,
        tests=tests,
        crate=options.crate,
    )


def derive_all(
    decls: Iterable[TargetDecl],
    catalog: Catalog,
    options: GeneratorOptions | None = None,
    *,
    with_tests: bool = True,
) -> BatchResult:
    batch = BatchResult()
    for decl in decls:
        try:
            batch.results.append(derive(decl, catalog, options, with_tests=with_tests))
        except DeriveError as e:
            logger.warning("%s: %s", decl.target.name, e.message)
            batch.diagnostics.append(
                Diagnostic(target=decl.target.name, code=e.code, message=e.message, context=e.context())
            )
    return batch
