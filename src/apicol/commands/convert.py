"""Convert command -- import a document and write the resulting collection.

Reads the document from a file path, an ``http(s)`` URL, or ``-`` for stdin,
imports it with the resolved :class:`~apicol.models.ImportSettings`, and
writes the collection to stdout (or ``--output``). Skipped operations are
reported as warnings on stderr; they do not change the exit code.
"""

from __future__ import annotations

from typing import Optional

import typer

from apicol.exceptions import ApicolError, InvalidUsageError
from apicol.output import debug, emit_document, error, get_output, success, warning


def convert_command(
    source: str = typer.Argument(
        help="OpenAPI document: file path, http(s) URL, or '-' for stdin."
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", help="Collection format: json or yaml."
    ),
    hint: Optional[str] = typer.Option(
        None, "--hint", help="Force the document syntax: json or yaml."
    ),
    order: Optional[str] = typer.Option(
        None, "--order", help="Operation order inside a path: document or priority."
    ),
    base_url_var: Optional[str] = typer.Option(
        None, "--base-url-var", help="Name of the environment variable holding the server URL."
    ),
) -> None:
    """Convert an OpenAPI document into a request collection.

    Example::

        apicol convert petstore.yaml
        apicol -o petstore.collection.json convert https://example.com/openapi.json
        cat openapi.yaml | apicol convert - --format yaml
    """
    from apicol.config import load_global_config, resolve_settings
    from apicol.export import SUPPORTED_FORMATS, dump_collection
    from apicol.importer import import_collection
    from apicol.parser.loader import read_source

    try:
        settings = resolve_settings(cli_order=order, cli_base_url_var=base_url_var)
        collection_format = fmt or load_global_config().output.collection_format
        if collection_format not in SUPPORTED_FORMATS:
            raise InvalidUsageError(
                f"Unsupported collection format: {collection_format}. "
                f"Use one of: {', '.join(SUPPORTED_FORMATS)}"
            )

        text, detected_hint = read_source(source)
        result = import_collection(text, hint=hint or detected_hint, settings=settings)
        debug(f"Detected {result.version.value} document")

        emit_document(dump_collection(result.collection, collection_format), collection_format)
    except ApicolError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for skipped in result.skipped:
        warning(f"Skipped {skipped.method} {skipped.path}: {skipped.reason}")

    destination = get_output().output_file
    if destination:
        success(
            f"Wrote '{result.collection.name}' "
            f"({sum(1 for _ in result.collection.iter_requests())} requests) to {destination}"
        )
