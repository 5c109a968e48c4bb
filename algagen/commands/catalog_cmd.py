"""Catalog command implementation - list, explain and check structure kinds."""

from rich.console import Console
from rich.table import Table

from ..catalog import Catalog
from ..errors import UnknownKind


def run_list(catalog: Catalog) -> int:
    console = Console()

    table = Table(title="Structure kinds")
    table.add_column("Kind", style="cyan")
    table.add_column("Arity", justify="right")
    table.add_column("Implies")
    table.add_column("Laws")

    for entry in catalog:
        table.add_row(
            entry.kind,
            str(entry.arity),
            ", ".join(entry.dependencies()) or "-",
            ", ".join(f"{p.name}/{p.arity}" for p in entry.properties) or "-",
        )

    console.print(table)
    return 0


def run_explain(catalog: Catalog, kind: str) -> int:
    """Explain one kind: operator slots, implied kinds and contributed laws.

    Returns:
        Exit code (0 = success, 1 = kind not found)
    """
    console = Console()

    try:
        entry = catalog.lookup(kind)
    except UnknownKind as e:
        console.print(e.message, style="bold red")
        console.print(f"Known kinds: {', '.join(catalog.kinds())}", style="dim")
        return 1

    slots = "Operator" if entry.arity == 1 else "Operator1, Operator2"
    console.print(f"[bold]{entry.kind}[/bold]({slots})  ->  {entry.trait_name}", highlight=False)
    if entry.joint:
        console.print(f"  implies with both operators: {', '.join(entry.joint)}")
    if entry.slot0:
        console.print(f"  implies under Operator{'1' if entry.arity == 2 else ''}: {', '.join(entry.slot0)}")
    if entry.slot1:
        console.print(f"  implies under Operator2: {', '.join(entry.slot1)}")
    for prop in entry.properties:
        console.print(f"  law: {prop.name} ({prop.arity} args)")
    if entry.guarded:
        console.print("  inputs equal to a companion identity are discarded in tests", style="dim")
    return 0


def run_check(catalog: Catalog) -> int:
    """Check that every pre-flattened dependency list is closed."""
    console = Console(stderr=True)

    problems = catalog.check_consistency()
    if not problems:
        console.print(f"Catalog is consistent ({len(catalog)} kinds)", style="green")
        return 0

    for problem in problems:
        console.print(f"ERROR: {problem}", style="red", markup=False, highlight=False)
    return 1
