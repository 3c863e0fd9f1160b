"""Pick and build the request body of an imported operation.

An operation may accept several media types. :func:`resolve_body` scans the
candidates in a fixed preference order and builds exactly one
:class:`~apicol.models.Body` from the first match:

1. JSON (``application/json`` or any ``+json`` type) -- raw, compact JSON.
2. ``application/x-www-form-urlencoded`` -- URL-encoded key/value entries.
3. ``multipart/form-data`` -- multipart key/value entries.
4. XML (``application/xml``, ``text/xml`` or any ``+xml`` type) -- raw XML.
5. ``text/plain`` -- raw text.

The other media types are dropped. When nothing matches, the operation has
no body at all (``None``), not an empty raw body.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any, Callable, Optional, Sequence

from apicol.builder.url import stringify
from apicol.models import (
    Body,
    BodyCandidate,
    BodyMode,
    ImportSettings,
    KeyValueParam,
    RefSchema,
)
from apicol.parser.resolver import RefTable
from apicol.parser.schema import dereference, literal_value, object_properties, synthesize_example

_XML_ROOT = "root"
_XML_ITEM = "item"


def media_type_of(content_type: str) -> str:
    """Strip parameters and case from a content type (``"A/B; charset=x"`` -> ``"a/b"``)."""
    return content_type.split(";", 1)[0].strip().lower()


def is_json(content_type: str) -> bool:
    media_type = media_type_of(content_type)
    return media_type == "application/json" or media_type.endswith("+json")


def is_form_urlencoded(content_type: str) -> bool:
    return media_type_of(content_type) == "application/x-www-form-urlencoded"


def is_multipart(content_type: str) -> bool:
    return media_type_of(content_type) == "multipart/form-data"


def is_xml(content_type: str) -> bool:
    media_type = media_type_of(content_type)
    return media_type in ("application/xml", "text/xml") or media_type.endswith("+xml")


def is_plain_text(content_type: str) -> bool:
    return media_type_of(content_type) == "text/plain"


BodyBuilder = Callable[[BodyCandidate, RefTable, ImportSettings], Body]


def resolve_body(
    candidates: Sequence[BodyCandidate],
    refs: RefTable,
    settings: Optional[ImportSettings] = None,
) -> Optional[Body]:
    """Build the body for the most preferred candidate.

    Args:
        candidates: The operation's body candidates, in declaration order.
        refs: Reference table of the document, for ``$ref`` schemas.
        settings: Import settings (``synthesize_examples``).

    Returns:
        The built :class:`~apicol.models.Body`, or ``None`` when no
        candidate has a supported media type.

    Raises:
        RefResolutionError: If the chosen schema references something that
            cannot be resolved.
        SchemaError: If a referenced schema is malformed.
    """
    settings = settings or ImportSettings()
    for matches, builder in _PREFERENCE:
        for candidate in candidates:
            if matches(candidate.content_type):
                return builder(candidate, refs, settings)
    return None


def _example_payload(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Any:
    """Return the literal example, else a synthesised one, else ``None``."""
    if candidate.has_example:
        return candidate.example
    if candidate.schema_ is None:
        return None
    if not settings.synthesize_examples:
        return literal_value(candidate.schema_)
    return synthesize_example(candidate.schema_, refs)


def _json_body(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Body:
    payload = _example_payload(candidate, refs, settings)
    if payload is None:
        raw = ""
    elif isinstance(payload, str) and candidate.has_example:
        # Literal examples written as JSON text are kept verbatim
        raw = _minify_json_text(payload)
    else:
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return Body(mode=BodyMode.RAW, content_type=candidate.content_type, raw_content=raw)


def _minify_json_text(text: str) -> str:
    try:
        return json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)
    except json.JSONDecodeError:
        return json.dumps(text, ensure_ascii=False)


def _form_entries(candidate: BodyCandidate, refs: RefTable) -> tuple[KeyValueParam, ...]:
    """One enabled entry per declared property, valued by its example/default."""
    if candidate.schema_ is None:
        return ()

    literal = candidate.example if isinstance(candidate.example, dict) else {}
    entries = []
    for prop in object_properties(candidate.schema_, refs):
        value = literal.get(prop.name)
        if value is None:
            value = literal_value(dereference(prop.schema_, refs))
        entries.append(KeyValueParam(enabled=True, key=prop.name, value=stringify(value)))
    return tuple(entries)


def _url_encoded_body(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Body:
    return Body(mode=BodyMode.URL_ENCODED, encoded_values=_form_entries(candidate, refs))


def _multipart_body(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Body:
    return Body(mode=BodyMode.MULTIPART, encoded_values=_form_entries(candidate, refs))


def _xml_body(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Body:
    if candidate.has_example and isinstance(candidate.example, str):
        raw = candidate.example
    else:
        payload = _example_payload(candidate, refs, settings)
        if isinstance(payload, str):
            raw = payload
        elif payload is None:
            raw = ""
        else:
            raw = to_xml(payload, _xml_root_name(candidate, refs))
    return Body(mode=BodyMode.RAW, content_type=candidate.content_type, raw_content=raw)


def _text_body(candidate: BodyCandidate, refs: RefTable, settings: ImportSettings) -> Body:
    raw = stringify(candidate.example) if candidate.has_example else ""
    if not raw and candidate.schema_ is not None:
        raw = stringify(literal_value(candidate.schema_))
    return Body(mode=BodyMode.RAW, content_type=candidate.content_type, raw_content=raw)


def _xml_root_name(candidate: BodyCandidate, refs: RefTable) -> str:
    """Root element: ``xml.name`` of the schema, else the referenced component name."""
    schema = candidate.schema_
    if schema is None:
        return _XML_ROOT
    if schema.xml_name:
        return schema.xml_name
    if isinstance(schema, RefSchema):
        target = dereference(schema, refs)
        if target.xml_name:
            return target.xml_name
        return schema.pointer.rsplit("/", 1)[-1] or _XML_ROOT
    return _XML_ROOT


def to_xml(value: Any, root_name: str) -> str:
    """Serialise a JSON-like value as an XML document fragment.

    Mappings become child elements, sequences repeat the element, scalars
    become text (booleans as ``true``/``false``).

    Example::

        >>> to_xml({"id": 1, "tags": ["a", "b"]}, "Pet")
        '<Pet><id>1</id><tags>a</tags><tags>b</tags></Pet>'
    """
    root = ET.Element(root_name)
    _fill_element(root, value)
    return ET.tostring(root, encoding="unicode")


def _fill_element(element: ET.Element, value: Any) -> None:
    if isinstance(value, dict):
        for key, child_value in value.items():
            if isinstance(child_value, list):
                for item in child_value:
                    _fill_element(ET.SubElement(element, str(key)), item)
            else:
                _fill_element(ET.SubElement(element, str(key)), child_value)
    elif isinstance(value, list):
        for item in value:
            _fill_element(ET.SubElement(element, _XML_ITEM), item)
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    elif value is not None:
        element.text = str(value)


_PREFERENCE: tuple[tuple[Callable[[str], bool], BodyBuilder], ...] = (
    (is_json, _json_body),
    (is_form_urlencoded, _url_encoded_body),
    (is_multipart, _multipart_body),
    (is_xml, _xml_body),
    (is_plain_text, _text_body),
)
