"""apicol -- Import OpenAPI documents as request collections.

This package converts a Swagger 2.0 or OpenAPI 3.x document (JSON or YAML)
into a tool-agnostic request collection: folders of HTTP requests grouped by
tag, plus one environment per declared server carrying a ``BaseUrl``
variable.

Typical usage::

    from apicol import try_import

    ok, collection = try_import(Path("openapi.yaml").read_text())

or from the shell::

    apicol convert openapi.yaml -o collection.json

Modules:
    importer: ``try_import`` / ``import_collection`` entry points.
    models: Pydantic models shared across the entire package.
    export: JSON/YAML rendering of a collection.
    config: XDG-aware configuration and settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"

from apicol.importer import import_collection, try_import  # noqa: E402

__all__ = ["__version__", "import_collection", "try_import"]
