"""Typer application and CLI entry point for apicatalog.

The CLI is a thin consumer of :class:`~apicatalog.session.CatalogSession`:
every command resolves the configuration, opens a session, and prints a
projection of the catalog. It is mainly used to review navigation and to run
``apicatalog check`` in CI when the description or the ruleset changes.

Commands:

* ``sections`` / ``resources`` -- the navigation tree.
* ``operations`` -- operations in catalog order, optionally for one category.
* ``show`` -- one operation with parameter defaults applied.
* ``search`` -- ranked category matches.
* ``check`` -- umbrella routes not covered by the subsection ruleset.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import typer

from apicatalog import __version__
from apicatalog.exceptions import ApiCatalogError, NotFoundError
from apicatalog.exit_codes import EXIT_GENERIC_FAILURE, EXIT_RULESET_INCONSISTENCY
from apicatalog.output import error, format_response, info, print_table

app = typer.Typer(
    name="apicatalog",
    help="Index and search OpenAPI descriptions for API reference docs.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apicatalog {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    spec: Optional[str] = typer.Option(
        None, "--spec", "-s", help="URL, file path or '-' for the API description."
    ),
    ruleset: Optional[str] = typer.Option(
        None, "--ruleset", "-r", help="JSON/YAML subsection ruleset file."
    ),
    umbrella: Optional[str] = typer.Option(
        None, "--umbrella", help="Category split by the ruleset."
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Fail on umbrella routes matching no rule."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install output and logging, and stash the config flags in ``ctx.obj``."""
    from apicatalog.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)

    package_logger = logging.getLogger("apicatalog")
    package_logger.handlers = [output.log_handler()]
    package_logger.setLevel(logging.DEBUG if output.is_verbose else logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["spec"] = spec
    ctx.obj["ruleset"] = ruleset
    ctx.obj["umbrella"] = umbrella
    ctx.obj["strict"] = strict


def _open_session(ctx: typer.Context, strict: Optional[bool] = None):  # noqa: ANN202
    """Resolve config and return an initialized session.

    Raises:
        typer.Exit: With the error's exit code when config, loading or
            indexing fails, or with code 2 when no description is configured.
    """
    from apicatalog.config import build_classifier, resolve_config
    from apicatalog.parser import DescriptionLoader
    from apicatalog.session import open_catalog

    obj = ctx.obj or {}
    try:
        config = resolve_config(
            cli_spec=obj.get("spec"),
            cli_ruleset=obj.get("ruleset"),
            cli_umbrella=obj.get("umbrella"),
            cli_strict=obj.get("strict") if strict is None else strict,
        )
        if config.spec is None:
            error("No API description configured. Pass --spec or set APICATALOG_SPEC.")
            raise typer.Exit(code=2)
        return asyncio.run(
            open_catalog(
                DescriptionLoader(config.spec),
                build_classifier(config),
                strict_ruleset=config.strict_ruleset,
            )
        )
    except ApiCatalogError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@app.command("sections")
def sections_command(ctx: typer.Context) -> None:
    """List top-level sections."""
    session = _open_session(ctx)
    rows = [
        [s.id, s.name, str(len(session.resources_for_section(s.id)))]
        for s in session.sections
    ]
    print_table(["ID", "Name", "Resources"], rows, title=f"Sections ({len(rows)})")


@app.command("resources")
def resources_command(
    ctx: typer.Context,
    section: Optional[str] = typer.Option(
        None, "--section", help="Only resources under this section id."
    ),
) -> None:
    """List resources, optionally for one section."""
    session = _open_session(ctx)
    resources = (
        session.resources_for_section(section) if section else list(session.resources)
    )
    rows = [
        [r.name, r.section_id, str(len(session.operations_for_category(r.name)))]
        for r in resources
    ]
    print_table(["Name", "Section", "Operations"], rows, title=f"Resources ({len(rows)})")


@app.command("operations")
def operations_command(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Only operations filed under this category."
    ),
) -> None:
    """List operations in description order."""
    session = _open_session(ctx)
    operations = (
        session.operations_for_category(category) if category else session.operations
    )
    rows = [
        [
            op.verb.value.upper(),
            op.path,
            op.operation_id or "-",
            op.primary_category or "-",
            op.summary or "-",
        ]
        for op in operations
    ]
    print_table(
        ["Method", "Path", "Operation ID", "Category", "Summary"],
        rows,
        title=f"Operations ({len(rows)})",
    )


@app.command("show")
def show_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(..., help="operationId to display."),
) -> None:
    """Show one operation with its parameter defaults applied."""
    session = _open_session(ctx)
    try:
        operation = session.find_operation_with_defaults(operation_id)
    except NotFoundError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    data = operation.model_dump(mode="json", by_alias=True)
    try:
        data["resource"] = session.find_category_for_operation(operation_id).model_dump()
    except NotFoundError:
        data["resource"] = None
    format_response(data)


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text."),
    prefix: bool = typer.Option(
        False, "--prefix", "-p", help="Treat words as name prefixes (as-you-type filtering)."
    ),
) -> None:
    """Search section and resource names and descriptions."""
    session = _open_session(ctx)
    index = session.search_index
    try:
        hits = index.filter(query) if prefix else index.search(query)
    except ApiCatalogError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows = [
        [
            hit.ref,
            type(hit.category).__name__,
            getattr(hit.category, "section_id", "-"),
            f"{hit.score:.3f}",
        ]
        for hit in hits
    ]
    print_table(["Name", "Kind", "Section", "Score"], rows, title=f"Matches ({len(rows)})")


@app.command("check")
def check_command(ctx: typer.Context) -> None:
    """Report umbrella routes not covered by the subsection ruleset."""
    session = _open_session(ctx, strict=False)
    problems = session.inconsistencies
    if not problems:
        info("Ruleset covers every umbrella route.")
        return

    rows = [
        [p.verb.value.upper(), p.path, p.operation_id or "-", p.umbrella]
        for p in problems
    ]
    print_table(
        ["Method", "Path", "Operation ID", "Umbrella"],
        rows,
        title=f"Uncovered routes ({len(rows)})",
    )
    raise typer.Exit(code=EXIT_RULESET_INCONSISTENCY)


def main() -> None:
    """CLI entry point invoked by the ``apicatalog`` console script."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except ApiCatalogError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
