"""Normalize Swagger 2.0 and OpenAPI 3.x documents into one representation.

This module walks a parsed document and builds a
:class:`~apicol.models.NormalizedSpec`: servers, operations, parameters and
request-body candidates expressed the same way regardless of the OpenAPI
generation that produced them.

The single public entry point is :func:`normalize`. It dispatches on
:class:`~apicol.models.SpecVersion` through :data:`_NORMALIZERS`, a table
holding one :class:`_VersionRules` per generation. The rules differ in how
servers are declared (``host``/``basePath``/``schemes`` vs. ``servers``) and
how request bodies are expressed (``in: body``/``in: formData`` parameters
vs. ``requestBody.content``); everything else is shared.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.

A single operation whose shape cannot be mapped is recorded as a
:class:`~apicol.models.SkippedOperation` and the walk continues. Only a
``paths`` value that is not a mapping fails the whole document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Union

from apicol.exceptions import MalformedOperationError, UnparsableDocumentError
from apicol.models import (
    BodyCandidate,
    HTTPMethod,
    ImportSettings,
    NormalizedSpec,
    ObjectSchema,
    OperationOrder,
    OperationSpec,
    ParameterLocation,
    ParameterSpec,
    SchemaProperty,
    ServerEntry,
    SkippedOperation,
    SpecVersion,
)
from apicol.parser.resolver import RefTable
from apicol.parser.schema import parse_schema

logger = logging.getLogger(__name__)

# HTTP methods recognised by OpenAPI, in priority order
_HTTP_METHODS = tuple(m.value for m in HTTPMethod)

# Path-item keys that are not operations
_PATH_ITEM_FIELDS = frozenset({"parameters", "summary", "description", "servers", "$ref"})

_FORM_URLENCODED = "application/x-www-form-urlencoded"
_MULTIPART = "multipart/form-data"

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")

ServerReader = Callable[[dict[str, Any]], list[ServerEntry]]
BodyReader = Callable[
    [dict[str, Any], list[dict[str, Any]], dict[str, Any], RefTable],
    list[BodyCandidate],
]


@dataclass(frozen=True)
class _VersionRules:
    """The version-specific halves of normalization."""

    read_servers: ServerReader
    read_bodies: BodyReader
    body_locations: frozenset[str]


def normalize(
    doc: dict[str, Any],
    version: SpecVersion,
    settings: Optional[ImportSettings] = None,
) -> NormalizedSpec:
    """Build the version-neutral view of a parsed document.

    Args:
        doc: The parsed document, as returned by
            :func:`~apicol.parser.loader.parse_document`.
        version: The generation returned by
            :func:`~apicol.parser.loader.detect_version`.
        settings: Import settings; only ``operation_order`` is read here.

    Returns:
        A :class:`~apicol.models.NormalizedSpec` whose ``operations`` hold
        one entry per walked operation, skipped ones included.

    Raises:
        UnparsableDocumentError: If ``paths`` is present but not a mapping.
    """
    settings = settings or ImportSettings()
    rules = _NORMALIZERS[version]
    refs = RefTable(doc)

    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        raise UnparsableDocumentError(
            f"'paths' must be an object (got {type(paths).__name__})"
        )

    operations = list(_walk_operations(paths, doc, refs, rules, settings.operation_order))

    return NormalizedSpec(
        version=version,
        title=_extract_title(doc),
        servers=tuple(rules.read_servers(doc)),
        operations=tuple(operations),
        refs=refs,
    )


def _extract_title(doc: dict[str, Any]) -> str:
    info = doc.get("info")
    title = info.get("title") if isinstance(info, dict) else None
    if isinstance(title, str) and title.strip():
        return title
    return "Untitled API"


# --- Operations ---


def _walk_operations(
    paths: dict[str, Any],
    doc: dict[str, Any],
    refs: RefTable,
    rules: _VersionRules,
    order: OperationOrder,
) -> Iterator[Union[OperationSpec, SkippedOperation]]:
    """Yield every operation of the document, in path then method order."""
    for path, path_item in paths.items():
        path = str(path)
        try:
            path_item = refs.resolve(path_item)
        except MalformedOperationError as exc:
            yield _skip("*", path, str(exc))
            continue
        if not isinstance(path_item, dict):
            yield _skip("*", path, f"path item must be an object (got {type(path_item).__name__})")
            continue

        for key in _operation_keys(path_item, order):
            method = key.lower()
            if method not in _HTTP_METHODS:
                yield _skip(key, path, "unsupported method")
                continue
            try:
                yield _normalize_operation(
                    HTTPMethod(method), path, path_item, path_item[key], doc, refs, rules
                )
            except MalformedOperationError as exc:
                yield _skip(method, path, str(exc))


def _operation_keys(path_item: dict[str, Any], order: OperationOrder) -> list[str]:
    """Return the operation keys of a path item in the configured order."""
    keys = [
        str(key)
        for key in path_item
        if str(key) not in _PATH_ITEM_FIELDS and not str(key).startswith("x-")
    ]
    if order == OperationOrder.DOCUMENT:
        return keys

    def priority(key: str) -> int:
        method = key.lower()
        return _HTTP_METHODS.index(method) if method in _HTTP_METHODS else len(_HTTP_METHODS)

    # sorted() is stable, so unknown keys keep their relative order at the end
    return sorted(keys, key=priority)


def _skip(method: str, path: str, reason: str) -> SkippedOperation:
    logger.warning("Skipping %s %s: %s", method.upper(), path, reason)
    return SkippedOperation(method=method.upper(), path=path, reason=reason)


def _normalize_operation(
    method: HTTPMethod,
    path: str,
    path_item: dict[str, Any],
    operation: Any,
    doc: dict[str, Any],
    refs: RefTable,
    rules: _VersionRules,
) -> OperationSpec:
    """Normalize one operation object.

    Raises:
        MalformedOperationError: If the operation cannot be mapped.
    """
    if not isinstance(operation, dict):
        raise MalformedOperationError(
            f"operation must be an object (got {type(operation).__name__})"
        )

    merged = _merge_parameters(
        _resolve_parameter_list(path_item.get("parameters"), refs),
        _resolve_parameter_list(operation.get("parameters"), refs),
    )

    parameters = [
        param
        for param in (_to_parameter_spec(raw) for raw in merged if raw.get("in") not in rules.body_locations)
        if param is not None
    ]

    summary = operation.get("summary")
    tags = operation.get("tags") or []
    if not isinstance(tags, list):
        raise MalformedOperationError(f"'tags' must be a list (got {type(tags).__name__})")

    return OperationSpec(
        method=method,
        path=path,
        summary=summary if isinstance(summary, str) else None,
        tags=tuple(str(tag) for tag in tags),
        parameters=tuple(parameters),
        body_candidates=tuple(rules.read_bodies(operation, merged, doc, refs)),
    )


def _resolve_parameter_list(raw: Any, refs: RefTable) -> list[dict[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedOperationError(f"'parameters' must be a list (got {type(raw).__name__})")

    resolved: list[dict[str, Any]] = []
    for item in raw:
        param = refs.resolve(item)
        if not isinstance(param, dict):
            raise MalformedOperationError(
                f"parameter must be an object (got {type(param).__name__})"
            )
        for field in ("name", "in"):
            if field in param and not isinstance(param[field], str):
                raise MalformedOperationError(
                    f"parameter '{field}' must be a string (got {type(param[field]).__name__})"
                )
        resolved.append(param)
    return resolved


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.

    Args:
        path_params: Parameters defined at the path level.
        op_params: Parameters defined at the operation level.

    Returns:
        A merged list of parameter dicts: surviving path-level ones first,
        then all operation-level ones, each group in declaration order.
    """
    op_keys = {(param.get("name", ""), param.get("in", "")) for param in op_params}

    merged = [
        param
        for param in path_params
        if (param.get("name", ""), param.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)

    return merged


def _to_parameter_spec(param: dict[str, Any]) -> Optional[ParameterSpec]:
    """Convert a raw parameter dict; unknown ``in`` locations are skipped."""
    try:
        location = ParameterLocation(param.get("in", "query"))
    except ValueError:
        return None

    name = param.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedOperationError(f"{location.value} parameter without a name")

    return ParameterSpec(name=name, location=location, example=parameter_example(param))


def parameter_example(param: dict[str, Any]) -> Any:
    """Return the literal example or default a parameter declares.

    Lookup order: ``example``, ``schema.example``, the first entry of
    ``examples`` (3.x), ``default``, ``schema.default``, ``x-example`` (2.0).
    ``None`` when nothing is declared.
    """
    schema = param.get("schema") if isinstance(param.get("schema"), dict) else {}

    candidates = [param.get("example"), schema.get("example")]

    examples = param.get("examples")
    if isinstance(examples, dict) and examples:
        first = next(iter(examples.values()))
        candidates.append(first.get("value") if isinstance(first, dict) else first)

    candidates += [param.get("default"), schema.get("default"), param.get("x-example")]

    for value in candidates:
        if value is not None:
            return value
    return None


# --- Swagger 2.0 ---


def _swagger_servers(doc: dict[str, Any]) -> list[ServerEntry]:
    """Synthesise the single server of a Swagger 2.0 document.

    ``schemes[0]://host + basePath``; the scheme defaults to ``https``. A
    document without ``host`` declares no server.
    """
    host = doc.get("host")
    if not isinstance(host, str) or not host:
        return []

    schemes = doc.get("schemes")
    scheme = schemes[0] if isinstance(schemes, list) and schemes else "https"
    base_path = doc.get("basePath") if isinstance(doc.get("basePath"), str) else ""

    return [ServerEntry(url_template=f"{scheme}://{host}{base_path}")]


def _swagger_bodies(
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    doc: dict[str, Any],
    refs: RefTable,
) -> list[BodyCandidate]:
    """Turn ``in: body`` / ``in: formData`` parameters into body candidates."""
    consumes = operation.get("consumes") or doc.get("consumes") or ["application/json"]
    if not isinstance(consumes, list):
        raise MalformedOperationError(f"'consumes' must be a list (got {type(consumes).__name__})")
    consumes = [str(media_type) for media_type in consumes]

    body_param = next((p for p in params if p.get("in") == "body"), None)
    if body_param is not None:
        raw_schema = body_param.get("schema")
        schema = parse_schema(raw_schema) if raw_schema is not None else None
        example = body_param.get("x-example")
        return [
            BodyCandidate(
                content_type=media_type,
                schema=schema,
                example=example,
                has_example=example is not None,
            )
            for media_type in consumes
        ]

    form_params = [p for p in params if p.get("in") == "formData"]
    if not form_params:
        return []

    properties = []
    for param in form_params:
        name = param.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedOperationError("formData parameter without a name")
        node = parse_schema({k: v for k, v in param.items() if k not in ("name", "in", "required")})
        literal = parameter_example(param)
        if literal is not None and node.example is None:
            node = node.model_copy(update={"example": literal})
        properties.append(SchemaProperty(name=name, schema=node))

    form_types = [media_type for media_type in consumes if media_type in (_FORM_URLENCODED, _MULTIPART)]
    schema = ObjectSchema(properties=tuple(properties))
    return [
        BodyCandidate(content_type=media_type, schema=schema)
        for media_type in (form_types or [_FORM_URLENCODED])
    ]


# --- OpenAPI 3.x ---


def _openapi_servers(doc: dict[str, Any]) -> list[ServerEntry]:
    """Read ``servers[]``, substituting server variables with their defaults."""
    servers = doc.get("servers") or []
    if not isinstance(servers, list):
        return []

    entries: list[ServerEntry] = []
    for server in servers:
        if not isinstance(server, dict) or not isinstance(server.get("url"), str):
            logger.warning("Ignoring server entry without a url: %r", server)
            continue
        description = server.get("description")
        entries.append(
            ServerEntry(
                url_template=_expand_server_variables(server["url"], server.get("variables")),
                name=description if isinstance(description, str) and description.strip() else None,
            )
        )
    return entries


def _expand_server_variables(url: str, variables: Any) -> str:
    if not isinstance(variables, dict):
        return url

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and variable.get("default") is not None:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(substitute, url)


def _openapi_bodies(
    operation: dict[str, Any],
    params: list[dict[str, Any]],
    doc: dict[str, Any],
    refs: RefTable,
) -> list[BodyCandidate]:
    """Turn ``requestBody.content`` into one candidate per media type."""
    request_body = operation.get("requestBody")
    if request_body is None:
        return []

    request_body = refs.resolve(request_body)
    if not isinstance(request_body, dict):
        raise MalformedOperationError(
            f"'requestBody' must be an object (got {type(request_body).__name__})"
        )

    content = request_body.get("content") or {}
    if not isinstance(content, dict):
        raise MalformedOperationError(f"'content' must be an object (got {type(content).__name__})")

    candidates: list[BodyCandidate] = []
    for media_type, media in content.items():
        media = media if isinstance(media, dict) else {}
        raw_schema = media.get("schema")
        example, has_example = _media_example(media, refs)
        candidates.append(
            BodyCandidate(
                content_type=str(media_type),
                schema=parse_schema(raw_schema) if raw_schema is not None else None,
                example=example,
                has_example=has_example,
            )
        )
    return candidates


def _media_example(media: dict[str, Any], refs: RefTable) -> tuple[Any, bool]:
    """Return the media type's literal example and whether one was declared."""
    if "example" in media:
        return media["example"], True

    examples = media.get("examples")
    if isinstance(examples, dict):
        for example in examples.values():
            example = refs.resolve(example)
            if isinstance(example, dict) and "value" in example:
                return example["value"], True
    return None, False


_NORMALIZERS: dict[SpecVersion, _VersionRules] = {
    SpecVersion.SWAGGER_2: _VersionRules(
        read_servers=_swagger_servers,
        read_bodies=_swagger_bodies,
        body_locations=frozenset({"body", "formData"}),
    ),
    SpecVersion.OPENAPI_3: _VersionRules(
        read_servers=_openapi_servers,
        read_bodies=_openapi_bodies,
        body_locations=frozenset(),
    ),
}
