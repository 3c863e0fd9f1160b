"""Parse JSON Schema objects into schema nodes and synthesise example values.

:func:`parse_schema` maps a raw schema dict onto the closed set of node
variants declared in :mod:`apicol.models` (scalar, object, array,
reference, composite). References are kept as :class:`~apicol.models.RefSchema`
nodes and only followed when an example is synthesised, through the
document's :class:`~apicol.parser.resolver.RefTable`.

:func:`synthesize_example` builds a minimally populated instance for a
node. Literal values always win: ``example``, then ``default``, then the
first ``enum`` entry. Otherwise a placeholder is chosen by type, following
the conventions of Swagger UI (``"string"``, ``0``, ``true``).
"""

from __future__ import annotations

from typing import Any, Optional

from apicol.exceptions import MalformedOperationError
from apicol.models import (
    ArraySchema,
    CompositeSchema,
    ObjectSchema,
    RefSchema,
    ScalarSchema,
    SchemaNode,
    SchemaProperty,
)
from apicol.parser.resolver import RefTable

MAX_DEPTH = 12

_COMBINATORS = ("allOf", "oneOf", "anyOf")

_STRING_FORMATS = {
    "date": "2020-01-01",
    "date-time": "2020-01-01T00:00:00Z",
    "email": "user@example.com",
    "uuid": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
    "uri": "https://example.com",
    "hostname": "example.com",
    "ipv4": "127.0.0.1",
}


class SchemaError(MalformedOperationError):
    """Raised when a schema object has a shape that cannot be mapped."""


def parse_schema(raw: Any) -> SchemaNode:
    """Convert a raw schema object into a schema node.

    Handles OpenAPI 3.1 type arrays (``["string", "null"]``) by taking the
    first non-null type, and OpenAPI 3.1 boolean schemas (``true``) as an
    unconstrained node.

    Args:
        raw: The schema value from the document.

    Returns:
        The matching :class:`~apicol.models.SchemaNode` variant.

    Raises:
        SchemaError: If *raw* or one of its sub-schemas is not a mapping, or
            ``properties`` is not a mapping, or ``enum`` is not a list.
    """
    if isinstance(raw, bool):
        return ObjectSchema()
    if not isinstance(raw, dict):
        raise SchemaError(f"Schema must be an object (got {type(raw).__name__})")

    enum_values = raw.get("enum")
    if enum_values is not None and not isinstance(enum_values, list):
        raise SchemaError(f"'enum' must be a list (got {type(enum_values).__name__})")

    common = _common_fields(raw)

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return RefSchema(pointer=ref, **common)

    for combinator in _COMBINATORS:
        if combinator in raw:
            return _parse_composite(raw, combinator, common)

    schema_type = _schema_type(raw)

    if schema_type == "object" or "properties" in raw:
        return ObjectSchema(properties=_parse_properties(raw.get("properties")), **common)

    if schema_type == "array" or "items" in raw:
        items = raw.get("items")
        return ArraySchema(items=parse_schema(items) if items is not None else None, **common)

    if schema_type is None and not enum_values:
        return ObjectSchema(**common)

    if schema_type is None:
        schema_type = _type_of_value(enum_values[0])

    return ScalarSchema(
        type=schema_type,
        format=raw.get("format") if isinstance(raw.get("format"), str) else None,
        enum_values=tuple(enum_values) if enum_values is not None else None,
        **common,
    )


def _common_fields(raw: dict[str, Any]) -> dict[str, Any]:
    example = raw.get("example")
    if example is None and isinstance(raw.get("examples"), list) and raw["examples"]:
        # JSON Schema 2020-12 (OpenAPI 3.1) lists examples
        example = raw["examples"][0]

    xml = raw.get("xml")
    xml_name = xml.get("name") if isinstance(xml, dict) else None

    return {
        "example": example,
        "default": raw.get("default"),
        "xml_name": xml_name if isinstance(xml_name, str) else None,
    }


def _parse_composite(
    raw: dict[str, Any], combinator: str, common: dict[str, Any]
) -> CompositeSchema:
    members = raw[combinator]
    if not isinstance(members, list):
        raise SchemaError(f"'{combinator}' must be a list (got {type(members).__name__})")

    variants = [parse_schema(member) for member in members]
    if combinator == "allOf" and "properties" in raw:
        # Properties written next to allOf extend the merged object
        variants.append(ObjectSchema(properties=_parse_properties(raw["properties"])))

    return CompositeSchema(combinator=combinator, variants=tuple(variants), **common)


def _parse_properties(raw: Any) -> tuple[SchemaProperty, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, dict):
        raise SchemaError(f"'properties' must be an object (got {type(raw).__name__})")
    return tuple(
        SchemaProperty(name=str(name), schema=parse_schema(value))
        for name, value in raw.items()
    )


def _schema_type(raw: dict[str, Any]) -> Optional[str]:
    type_value = raw.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else "null"
    if type_value is None:
        return None
    return str(type_value)


def _type_of_value(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


# --- Example synthesis ---


def synthesize_example(
    node: SchemaNode,
    refs: RefTable,
    *,
    depth: int = 0,
    seen: frozenset[str] = frozenset(),
) -> Any:
    """Build an example value for *node*.

    Args:
        node: The schema node.
        refs: Reference table of the document the node came from.
        depth: Current nesting depth (internal).
        seen: Pointers currently being expanded (internal), used to stop at
            recursive schemas.

    Returns:
        A JSON-compatible value. Recursive references and nesting beyond
        :data:`MAX_DEPTH` yield ``{}`` for references and ``None`` otherwise.

    Raises:
        RefResolutionError: If a reference cannot be resolved.
        SchemaError: If a referenced schema is malformed.
    """
    literal = literal_value(node)
    if literal is not None:
        return literal
    if depth > MAX_DEPTH:
        return None

    if isinstance(node, RefSchema):
        if node.pointer in seen:
            return {}
        target = parse_schema(refs.lookup(node.pointer))
        return synthesize_example(
            target, refs, depth=depth + 1, seen=seen | {node.pointer}
        )

    if isinstance(node, ObjectSchema):
        return {
            prop.name: synthesize_example(prop.schema_, refs, depth=depth + 1, seen=seen)
            for prop in node.properties
        }

    if isinstance(node, ArraySchema):
        if node.items is None:
            return []
        return [synthesize_example(node.items, refs, depth=depth + 1, seen=seen)]

    if isinstance(node, CompositeSchema):
        return _synthesize_composite(node, refs, depth, seen)

    return _scalar_placeholder(node)


def _synthesize_composite(
    node: CompositeSchema, refs: RefTable, depth: int, seen: frozenset[str]
) -> Any:
    if not node.variants:
        return None
    if node.combinator != "allOf":
        return synthesize_example(node.variants[0], refs, depth=depth + 1, seen=seen)

    merged: dict[str, Any] = {}
    fallback: Any = None
    for variant in node.variants:
        value = synthesize_example(variant, refs, depth=depth + 1, seen=seen)
        if isinstance(value, dict):
            merged.update(value)
        elif value is not None:
            fallback = value
    if merged or fallback is None:
        return merged
    return fallback


def _scalar_placeholder(node: ScalarSchema) -> Any:
    if node.enum_values:
        return node.enum_values[0]
    if node.type == "string":
        return _STRING_FORMATS.get(node.format or "", "string")
    if node.type in ("integer", "number"):
        return 0
    if node.type == "boolean":
        return True
    return None


def literal_value(node: SchemaNode) -> Any:
    """Return the node's own ``example`` or ``default``, or ``None``."""
    if node.example is not None:
        return node.example
    return node.default


def dereference(node: SchemaNode, refs: RefTable) -> SchemaNode:
    """Follow :class:`~apicol.models.RefSchema` nodes to a concrete node.

    Literal ``example``/``default`` values written next to a ``$ref`` are
    kept when the target carries none.

    Raises:
        RefResolutionError: If a pointer cannot be resolved or loops.
    """
    seen: set[str] = set()
    overrides = {"example": node.example, "default": node.default}
    while isinstance(node, RefSchema):
        if node.pointer in seen:
            return ObjectSchema()
        seen.add(node.pointer)
        node = parse_schema(refs.lookup(node.pointer))
    missing = {k: v for k, v in overrides.items() if v is not None and getattr(node, k) is None}
    return node.model_copy(update=missing) if missing else node


def object_properties(
    node: SchemaNode, refs: RefTable, *, depth: int = 0
) -> list[SchemaProperty]:
    """Return the ordered properties of an object-like schema.

    References are followed and ``allOf`` members are merged in order; a
    property redeclared by a later member keeps its first position but takes
    the later schema. ``oneOf``/``anyOf`` contribute their first variant.

    Args:
        node: The schema node, typically a form body schema.
        refs: Reference table of the document.

    Returns:
        The properties in declaration order; empty for non-object schemas.
    """
    if depth > MAX_DEPTH:
        return []
    node = dereference(node, refs)

    if isinstance(node, ObjectSchema):
        return list(node.properties)

    if isinstance(node, CompositeSchema) and node.variants:
        members = node.variants if node.combinator == "allOf" else node.variants[:1]
        merged: dict[str, SchemaProperty] = {}
        for member in members:
            for prop in object_properties(member, refs, depth=depth + 1):
                merged[prop.name] = prop
        return list(merged.values())

    return []
