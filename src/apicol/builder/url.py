"""Build request URLs from path templates and query parameters.

The URL of every imported request has the shape::

    {{BaseUrl}}/pets/{{petId}}?limit=10&status=

* OpenAPI ``{name}`` placeholders become collection ``{{name}}`` placeholders.
* Every query parameter contributes ``name=value`` in declaration order. A
  parameter without an example or default still appears, as ``name=``.
* Header, path and cookie parameters never appear in the query string.

No percent-encoding is applied: the query string is a template too, and the
values it carries are meant to be edited before the request is sent.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional

from apicol.models import ImportSettings, ParameterLocation, ParameterSpec
from apicol.parser.loader import LiteralFloat

_PATH_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def build_url(
    path: str,
    parameters: Iterable[ParameterSpec],
    settings: Optional[ImportSettings] = None,
) -> str:
    """Return the collection URL for an operation.

    Args:
        path: The OpenAPI path template, e.g. ``/cob/{txid}``.
        parameters: The operation's merged parameters.
        settings: Supplies the base URL variable name.

    Returns:
        ``{{BaseUrl}}`` + rewritten path + optional ``?`` + query string.
    """
    settings = settings or ImportSettings()
    url = "{{" + settings.base_url_variable + "}}" + rewrite_path_template(path)

    query = build_query_string(parameters)
    if query:
        url += "?" + query
    return url


def rewrite_path_template(path: str) -> str:
    """Rewrite ``{x}`` placeholders as ``{{x}}``, leaving everything else intact.

    Example::

        >>> rewrite_path_template("/pix/{e2eid}/devolucao/{id}")
        '/pix/{{e2eid}}/devolucao/{{id}}'
    """
    return _PATH_PLACEHOLDER.sub(r"{{\1}}", path)


def build_query_string(parameters: Iterable[ParameterSpec]) -> str:
    """Join the query parameters as ``name=value`` pairs with ``&``."""
    return "&".join(
        f"{param.name}={stringify(param.example)}"
        for param in parameters
        if param.location == ParameterLocation.QUERY
    )


def stringify(value: Any) -> str:
    """Render an example or default value as text.

    ``None`` becomes ``""``; booleans become ``True``/``False``; numbers
    keep their literal form, so a document's ``1.50`` stays ``1.50``; mappings
    and sequences become compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, LiteralFloat):
        return value.literal
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)
