"""Inspect commands -- preview what a document imports to.

Provides the ``apicol inspect`` sub-command group with read-only views of
the collection built from a document: a summary, the request list, and the
environments. Nothing is written to disk.
"""

from __future__ import annotations

from typing import Optional

import typer

from apicol.exceptions import ApicolError
from apicol.models import ImportResult
from apicol.output import error, get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


def _import_source(source: str, order: Optional[str] = None) -> ImportResult:
    """Read and import *source*, turning import errors into a clean exit.

    Raises:
        typer.Exit: With the error's exit code when the document cannot be
            read or imported.
    """
    from apicol.config import resolve_settings
    from apicol.importer import import_collection
    from apicol.parser.loader import read_source

    try:
        settings = resolve_settings(cli_order=order)
        text, hint = read_source(source)
        return import_collection(text, hint=hint, settings=settings)
    except ApicolError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@inspect_app.command("summary")
def inspect_summary(
    source: str = typer.Argument(help="OpenAPI document: file path, URL, or '-'."),
) -> None:
    """Show the collection name, version and counts.

    Example::

        apicol inspect summary petstore.yaml
        apicol --json inspect summary petstore.yaml
    """
    result = _import_source(source)
    collection = result.collection

    rows = [
        ["name", collection.name],
        ["version", result.version.value],
        ["environments", str(len(collection.environments))],
        ["folders", str(len(collection.folders))],
        ["root requests", str(len(collection.requests))],
        ["requests", str(sum(1 for _ in collection.iter_requests()))],
        ["skipped", str(len(result.skipped))],
    ]
    get_output().print_table(["Field", "Value"], rows, title=collection.name)


@inspect_app.command("requests")
def inspect_requests(
    source: str = typer.Argument(help="OpenAPI document: file path, URL, or '-'."),
    order: Optional[str] = typer.Option(
        None, "--order", help="Operation order inside a path: document or priority."
    ),
) -> None:
    """List every request with its folder, method, URL and body mode.

    Example::

        apicol inspect requests petstore.yaml --order document
    """
    result = _import_source(source, order=order)

    rows: list[list[str]] = []
    for folder, request in result.collection.iter_requests():
        rows.append([
            folder or "-",
            request.http_method,
            request.name,
            request.url,
            request.body.mode.value if request.body else "-",
        ])
    get_output().print_table(
        ["Folder", "Method", "Name", "URL", "Body"],
        rows,
        title=f"{result.collection.name} -- Requests ({len(rows)})",
    )

    for skipped in result.skipped:
        info(f"Skipped {skipped.method} {skipped.path}: {skipped.reason}")


@inspect_app.command("environments")
def inspect_environments(
    source: str = typer.Argument(help="OpenAPI document: file path, URL, or '-'."),
) -> None:
    """List the environments and their variables.

    Example::

        apicol inspect environments petstore.yaml
    """
    result = _import_source(source)

    if not result.collection.environments:
        info("No servers declared; the collection has no environments.")
        return

    rows: list[list[str]] = []
    for environment in result.collection.environments:
        for variable in environment.variables:
            rows.append([environment.name, variable.key, variable.value])
    get_output().print_table(["Environment", "Variable", "Value"], rows, title="Environments")
