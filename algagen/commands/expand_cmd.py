"""Expand/check command implementations - show what declarations imply."""

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import GeneratorOptions
from ..engine import derive, derive_all
from ..errors import DeriveError
from ..spec.load import load_declarations
from ..spec.parser import parse_attribute, parse_generics
from ..spec.schema import Target, TargetDecl


def run_expand(
    attributes: list[str],
    options: GeneratorOptions,
    target_name: str = "T",
    generics: str | None = None,
    output_json: bool = False,
) -> int:
    """Expand inline attributes such as `Field(Additive, Multiplicative)`.

    Returns:
        Exit code (0 = success, 1 = invalid attributes)
    """
    console = Console(stderr=True)

    try:
        catalog = options.build_catalog()
        decl = TargetDecl(
            target=Target(name=target_name, generics=parse_generics(generics)),
            entries=tuple(parse_attribute(a) for a in attributes),
        )
        result = derive(decl, catalog, options, with_tests=False)
    except DeriveError as e:
        console.print(e.message, style="bold red", markup=False, highlight=False)
        return 1

    if output_json:
        print(json.dumps(result.to_dict()["obligations"], indent=2))
        return 0

    table = Table(title=f"Obligations for {target_name}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Operators")
    table.add_column("Where")
    for i, ob in enumerate(result.obligations, start=1):
        table.add_row(str(i), ob.kind, ", ".join(ob.operators), ob.where_clause or "")

    Console().print(table)
    return 0


def run_check(decl_path: Path, options: GeneratorOptions) -> int:
    """Parse and expand a declaration file, reporting diagnostics only.

    Returns:
        Exit code (0 = all targets valid, 1 = diagnostics found)
    """
    console = Console(stderr=True)

    try:
        catalog = options.build_catalog()
        decls = load_declarations(decl_path)
    except DeriveError as e:
        console.print(e.message, style="bold red", markup=False, highlight=False)
        return 1

    batch = derive_all(decls, catalog, options)
    for result in batch.results:
        console.print(
            f"ok  {result.target.name}: {len(result.obligations)} impls, {len(result.tests)} tests",
            style="green",
            highlight=False,
        )
    for diag in batch.diagnostics:
        console.print(str(diag), style="red", markup=False, highlight=False)

    if batch.diagnostics:
        console.print(f"\n❌ {len(batch.diagnostics)} target(s) failed", style="bold red")
        return 1
    return 0
