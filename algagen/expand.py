"""Closure expansion of structure requests into implementation obligations."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from .catalog import Catalog
from .errors import ArityMismatch, EmptyStructureList
from .spec.schema import Obligation, StructureRequest

logger = logging.getLogger(__name__)


def expand(request: StructureRequest, catalog: Catalog) -> list[Obligation]:
    """
    Expand one request into every (kind, operators) pair it implies.

    Order: the requested kind, its 2-ary dependencies under the full operator
    tuple, its slot-0 dependencies under `operators[0]`, then (2-ary kinds
    only) its slot-1 dependencies under `operators[1]`.
    """
    entry = catalog.lookup(request.kind)
    ops = request.operators
    if len(ops) != entry.arity:
        raise ArityMismatch(request.kind, entry.arity, len(ops))

    def make(kind: str, operators: tuple[str, ...], companion: str | None = None) -> Obligation:
        return Obligation(
            kind=kind,
            operators=operators,
            where_clause=request.where_clause,
            source_index=request.index,
            companion=companion,
        )

    obligations = [make(request.kind, ops)]
    obligations.extend(make(dep, ops) for dep in entry.joint)
    obligations.extend(make(dep, (ops[0],)) for dep in entry.slot0)
    if entry.arity == 2:
        obligations.extend(make(dep, (ops[1],), companion=ops[0]) for dep in entry.slot1)
    return obligations


def dedupe(obligations: Iterable[Obligation]) -> list[Obligation]:
    """
    Keep the first obligation for every (kind, operators) pair.

    A companion operator reached through any later duplicate is kept, so
    identity guards do not depend on declaration order.
    """
    position: dict[tuple[str, tuple[str, ...]], int] = {}
    result: list[Obligation] = []
    for ob in obligations:
        if ob.key not in position:
            position[ob.key] = len(result)
            result.append(ob)
            continue
        kept = result[position[ob.key]]
        if kept.companion is None and ob.companion is not None:
            result[position[ob.key]] = replace(kept, companion=ob.companion)
    return result


def expand_all(requests: list[StructureRequest], catalog: Catalog, target: str | None = None) -> list[Obligation]:
    """Expand all requests of one target, in request order, without duplicates."""
    if not requests:
        raise EmptyStructureList(target)

    expanded: list[Obligation] = []
    for request in requests:
        expanded.extend(expand(request, catalog))

    result = dedupe(expanded)
    logger.debug(
        "expanded %d requests into %d obligations (%d duplicates dropped)",
        len(requests),
        len(result),
        len(expanded) - len(result),
    )
    return result
