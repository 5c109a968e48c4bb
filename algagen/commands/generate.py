"""Generate command implementation - render impls and property tests from declarations."""

import difflib
import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from ..config import GeneratorOptions
from ..engine import BatchResult, derive_all
from ..errors import DeriveError
from ..planning import GeneratePlan, GenerateResult
from ..spec.load import load_declarations

START_MARKER = "// <algagen> generated below; do not edit by hand"
END_MARKER = "// </algagen>"

HEADER = "// @generated by algagen\n"


def compute_generate_plan(
    decl_path: Path,
    options: GeneratorOptions,
    *,
    with_tests: bool = True,
    in_place: Path | None = None,
) -> GeneratePlan:
    """
    Compute what generation would produce without writing.

    Raises DeriveError when the declaration file or catalog cannot be read;
    per-target failures are collected in the plan's batch instead.
    """
    catalog = options.build_catalog()
    decls = load_declarations(decl_path)
    batch = derive_all(decls, catalog, options, with_tests=with_tests)
    generated = batch.render()

    existing = ""
    updated = ""
    if in_place is not None:
        existing = in_place.read_text(encoding="utf-8") if in_place.exists() else ""
        updated = upsert_generated_region(existing, generated)

    return GeneratePlan(
        source_path=decl_path,
        batch=batch,
        in_place=in_place is not None,
        target_path=in_place,
        generated_content=generated,
        existing_content=existing,
        updated_content=updated,
    )


def execute_generate_plan(plan: GeneratePlan, out: Path | None = None) -> GenerateResult:
    """Write the plan's output; returns what was written."""
    if plan.in_place:
        if plan.target_path is None:
            return GenerateResult(success=False, error="No target path for in-place update")
        plan.target_path.write_text(plan.updated_content, encoding="utf-8")
        return GenerateResult(
            bytes_written=len(plan.updated_content.encode("utf-8")),
            output_path=plan.target_path,
        )

    content = HEADER + "\n" + plan.generated_content
    if out is not None:
        out.write_text(content, encoding="utf-8")
        return GenerateResult(bytes_written=len(content.encode("utf-8")), output_path=out)

    print(content, end="")
    return GenerateResult()


def upsert_generated_region(existing: str, generated: str) -> str:
    """Insert or replace the generated region in an existing Rust source file."""
    block = START_MARKER + "\n" + generated.rstrip() + "\n" + END_MARKER
    if START_MARKER in existing and END_MARKER in existing:
        before, rest = existing.split(START_MARKER, 1)
        _, after = rest.split(END_MARKER, 1)
        return before + block + after
    if not existing.strip():
        return block + "\n"
    return existing.rstrip() + "\n\n" + block + "\n"


def _print_diagnostics(console: Console, batch: BatchResult) -> None:
    for diag in batch.diagnostics:
        console.print(f"[bold red]ERROR[/] {escape('[' + diag.code + ']')} [bold]{escape(diag.target)}[/]")
        for line in diag.message.splitlines():
            console.print(f"  {line}", markup=False, highlight=False)


def _output_json(batch: BatchResult) -> None:
    output = {
        "targets": [r.to_dict() for r in batch.results],
        "diagnostics": [
            {"target": d.target, "code": d.code, "message": d.message, **d.context} for d in batch.diagnostics
        ],
        "summary": {
            "targets": len(batch.results),
            "failed": len(batch.diagnostics),
            "impls": sum(len(r.stubs) for r in batch.results),
            "tests": sum(len(r.tests) for r in batch.results),
        },
    }
    print(json.dumps(output, indent=2))


def run_generate(
    decl_path: Path,
    options: GeneratorOptions,
    out: Path | None = None,
    in_place: Path | None = None,
    with_tests: bool = True,
    output_json: bool = False,
    dry_run: bool = False,
) -> int:
    """Generate impl stubs and property tests.

    Args:
        decl_path: YAML or TOML declaration file
        options: Generator options (crate alias, guards, catalog extension)
        out: Output file path (None = stdout)
        in_place: Existing Rust file whose generated region is replaced
        with_tests: Emit property tests for targets that request them
        output_json: Print the expansion as JSON instead of source code
        dry_run: Show what would be done without writing

    Returns:
        Exit code (0 = all targets generated, 1 = at least one failed)
    """
    console = Console(stderr=True)

    # Phase 1: Compute (diagnostic) - pure, no side effects
    try:
        plan = compute_generate_plan(decl_path, options, with_tests=with_tests, in_place=in_place)
    except DeriveError as e:
        console.print(e.message, style="bold red", markup=False)
        return 1

    _print_diagnostics(console, plan.batch)

    if output_json:
        _output_json(plan.batch)
        return 0 if plan.batch.ok else 1

    if dry_run:
        console.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        console.print(plan.summary(), highlight=False)
        if plan.in_place:
            diff = "".join(
                difflib.unified_diff(
                    plan.existing_content.splitlines(keepends=True),
                    plan.updated_content.splitlines(keepends=True),
                    fromfile="existing",
                    tofile="generated",
                )
            )
            if diff:
                console.print(Syntax(diff, "diff", theme="monokai"))
        return 0 if plan.batch.ok else 1

    # Phase 2: Execute (action) - performs writes
    result = execute_generate_plan(plan, out=out)
    if not result.success:
        console.print(str(result.error), style="red")
        return 1

    if result.output_path:
        console.print(
            f"Wrote {len(plan.batch.results)} targets to {result.output_path}", style="green", highlight=False
        )
    return 0 if plan.batch.ok else 1
