"""CLI entrypoint for algagen."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import GeneratorOptions, find_config, load_options
from .errors import DeriveError


@click.group()
@click.version_option(__version__, prog_name="algagen")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="algagen.toml or pyproject.toml with [tool.algagen] (defaults to auto-detected)",
)
@click.option("--verbose", "-V", is_flag=True, help="Log pipeline details to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """algagen - Derive algebraic structure impls and law tests.

    Expand declarations such as `Field(Additive, Multiplicative)` into every
    implied structure and generate the matching property tests.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    if config_path is None:
        config_path = find_config(Path.cwd())

    try:
        options = load_options(config_path) if config_path else GeneratorOptions()
    except DeriveError as e:
        raise click.ClickException(e.message)
    ctx.obj["options"] = options


@cli.command()
@click.argument("declarations", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option(
    "--in-place",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Replace the generated region of an existing Rust file (preserves hand-written code)",
)
@click.option("--tests/--no-tests", "with_tests", default=True, help="Emit property tests for targets that request them")
@click.option("--json", "output_json", is_flag=True, help="Output expansion as JSON")
@click.option("--dry-run", is_flag=True, help="Show what would be done without writing")
@click.pass_context
def generate(
    ctx: click.Context,
    declarations: Path,
    out: Path | None,
    in_place: Path | None,
    with_tests: bool,
    output_json: bool,
    dry_run: bool,
) -> None:
    """Generate impl stubs and property tests from a declaration file.

    Examples:

        algagen generate algebra.yml -o src/derived.rs

        algagen generate algebra.yml --in-place src/lib.rs --dry-run
    """
    from .commands.generate import run_generate

    if out is not None and in_place is not None:
        raise click.UsageError("--out and --in-place are mutually exclusive")

    exit_code = run_generate(
        declarations,
        ctx.obj["options"],
        out=out,
        in_place=in_place,
        with_tests=with_tests,
        output_json=output_json,
        dry_run=dry_run,
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("attributes", nargs=-1, required=True)
@click.option("--target", "target_name", default="T", show_default=True, help="Target type name")
@click.option("--generics", default=None, help="Generic parameter list, e.g. \"<T: Clone>\"")
@click.option("--json", "output_json", is_flag=True, help="Output obligations as JSON")
@click.pass_context
def expand(
    ctx: click.Context,
    attributes: tuple[str, ...],
    target_name: str,
    generics: str | None,
    output_json: bool,
) -> None:
    """Show every structure implied by inline attributes.

    Examples:

        algagen expand "Field(Additive, Multiplicative)"

        algagen expand "Group(Additive)" 'Where = "T: Copy"' "Monoid(Multiplicative)"
    """
    from .commands.expand_cmd import run_expand

    sys.exit(run_expand(list(attributes), ctx.obj["options"], target_name, generics, output_json))


@cli.command()
@click.argument("declarations", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def check(ctx: click.Context, declarations: Path) -> None:
    """Validate a declaration file without generating code."""
    from .commands.expand_cmd import run_check

    sys.exit(run_check(declarations, ctx.obj["options"]))


@cli.command()
@click.argument("kind", required=False)
@click.option("--check", "check_consistency", is_flag=True, help="Verify the catalog's dependency tables are closed")
@click.pass_context
def catalog(ctx: click.Context, kind: str | None, check_consistency: bool) -> None:
    """List structure kinds, or explain one KIND."""
    from .commands.catalog_cmd import run_check, run_explain, run_list

    try:
        kinds = ctx.obj["options"].build_catalog()
    except DeriveError as e:
        raise click.ClickException(e.message)

    if check_consistency:
        sys.exit(run_check(kinds))
    if kind:
        sys.exit(run_explain(kinds, kind))
    sys.exit(run_list(kinds))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
