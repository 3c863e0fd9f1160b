"""Load OpenAPI documents from text, a URL, a local file, or stdin.

This module turns raw OpenAPI text into a plain ``dict`` tree and works out
which OpenAPI generation the document belongs to. It supports both JSON and
YAML with automatic format detection. Mapping order is preserved in both
cases: folder and request order in the imported collection follow the order
in which the document declares tags, paths, and parameters.

The public functions are:

* :func:`parse_document` -- Parse text that the caller already holds.
* :func:`load_spec` -- Read text from a file, URL, or stdin, then parse it.
* :func:`detect_version` -- Return the :class:`~apicol.models.SpecVersion`
  declared by the ``swagger``/``openapi`` discriminator.

After loading, the tree should be passed to
:func:`~apicol.parser.normalizer.normalize`.
"""

from __future__ import annotations

import json
import math
import re
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from apicol.exceptions import UnparsableDocumentError, UnsupportedVersionError
from apicol.models import SpecVersion


class _DocumentLoader(yaml.SafeLoader):
    """``SafeLoader`` that keeps dates and timestamps as plain strings.

    Examples such as ``dataDeVencimento: 2020-12-31`` must survive being
    re-serialised as JSON, which ``datetime.date`` values would not.
    """


_DocumentLoader.yaml_implicit_resolvers = {
    first_char: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

_DECIMAL_LITERAL = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?")


class LiteralFloat(float):
    """A ``float`` that remembers the text it was parsed from.

    ``1.50`` and ``1.5`` are the same number, but query strings and form
    bodies built from an example should show what the document wrote.
    """

    literal: str

    def __new__(cls, text: str) -> "LiteralFloat":
        value = super().__new__(cls, text)
        value.literal = text
        return value


def _construct_float(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> float:
    value = loader.construct_yaml_float(node)
    text = str(node.value)
    if math.isfinite(value) and _DECIMAL_LITERAL.fullmatch(text):
        return LiteralFloat(text)
    return value


_DocumentLoader.add_constructor("tag:yaml.org,2002:float", _construct_float)


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        UnparsableDocumentError: If the source cannot be loaded or parsed.
    """
    text, hint = read_source(source)
    return parse_document(text, hint=hint)


def read_source(source: str) -> tuple[str, str]:
    """Read raw document text without parsing it.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        A ``(text, hint)`` tuple where *hint* is ``"json"``, ``"yaml"`` or
        ``""`` depending on the file extension or response content type.

    Raises:
        UnparsableDocumentError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        return _read_url(source)
    else:
        return _read_file(source)


def _read_stdin() -> str:
    """Read the whole document from stdin.

    Raises:
        UnparsableDocumentError: If stdin is empty or cannot be read.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise UnparsableDocumentError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise UnparsableDocumentError("No input received from stdin")

    return content


def _read_url(url: str) -> tuple[str, str]:
    """Fetch a document from URL. Supports JSON and YAML responses.

    Args:
        url: The HTTP(S) URL to fetch.

    Returns:
        The response text and a format hint taken from its content type.

    Raises:
        UnparsableDocumentError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise UnparsableDocumentError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise UnparsableDocumentError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a document from a local file.

    Supports .json, .yaml, and .yml extensions. Any other extension leaves
    format detection to the content.

    Args:
        path: Path to the local file.

    Returns:
        The file text and a format hint taken from its extension.

    Raises:
        UnparsableDocumentError: If the file cannot be read or is empty.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise UnparsableDocumentError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnparsableDocumentError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise UnparsableDocumentError(f"Document file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return content, hint


def parse_document(content: str, hint: str = "") -> dict[str, Any]:
    """Parse document text as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content, already decoded by the caller.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary, with keys in document order.

    Raises:
        UnparsableDocumentError: If the content cannot be parsed as either
            format, or its root is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content, parse_float=LiteralFloat)
            return _require_mapping(result)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise UnparsableDocumentError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.load(content, Loader=_DocumentLoader)  # noqa: S506
        return _require_mapping(result)
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise UnparsableDocumentError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise UnparsableDocumentError(
            "Document must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def detect_version(doc: dict[str, Any]) -> SpecVersion:
    """Return the OpenAPI generation declared by the document.

    ``swagger: "2.0"`` selects :attr:`SpecVersion.SWAGGER_2`;
    ``openapi: "3.x"`` selects :attr:`SpecVersion.OPENAPI_3`. Numeric
    values (``swagger: 2.0`` unquoted in YAML) are accepted.

    Args:
        doc: The parsed document dictionary.

    Returns:
        The detected :class:`~apicol.models.SpecVersion`.

    Raises:
        UnsupportedVersionError: If neither discriminator is present, or the
            declared version is outside 2.x/3.x.
    """
    if "swagger" in doc:
        swagger_ver = str(doc["swagger"])
        if swagger_ver.startswith("2."):
            return SpecVersion.SWAGGER_2
        raise UnsupportedVersionError(
            f"Unsupported Swagger version: {swagger_ver}. Only Swagger 2.0 is supported."
        )

    openapi_version = doc.get("openapi")
    if openapi_version is None:
        raise UnsupportedVersionError(
            "Missing 'swagger' or 'openapi' field. Is this an OpenAPI document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return SpecVersion.OPENAPI_3

    raise UnsupportedVersionError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only Swagger 2.0 and OpenAPI 3.x are supported."
    )
