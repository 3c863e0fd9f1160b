"""Tests for apicol.parser.schema -- schema nodes and example synthesis."""

from __future__ import annotations

import pytest

from apicol.models import (
    ArraySchema,
    CompositeSchema,
    ObjectSchema,
    RefSchema,
    ScalarSchema,
)
from apicol.parser.resolver import RefResolutionError, RefTable
from apicol.parser.schema import (
    MAX_DEPTH,
    SchemaError,
    dereference,
    object_properties,
    parse_schema,
    synthesize_example,
)


COMPONENTS = {
    "components": {
        "schemas": {
            "Category": {
                "type": "object",
                "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
            },
            "Pet": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "category": {"$ref": "#/components/schemas/Category"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            },
            "Node": {
                "type": "object",
                "properties": {
                    "value": {"type": "string", "example": "leaf"},
                    "children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}},
                },
            },
            "Named": {"type": "object", "properties": {"name": {"type": "string", "default": "rex"}}},
        }
    }
}


@pytest.fixture
def refs() -> RefTable:
    return RefTable(COMPONENTS)


# ---------------------------------------------------------------------------
# parse_schema
# ---------------------------------------------------------------------------


class TestParseSchema:
    """Raw schema dicts map onto the closed set of node variants."""

    def test_scalar(self) -> None:
        node = parse_schema({"type": "string", "format": "uuid", "example": "x"})
        assert node == ScalarSchema(type="string", format="uuid", example="x")

    def test_object_by_properties(self) -> None:
        node = parse_schema({"properties": {"b": {"type": "string"}, "a": {"type": "integer"}}})
        assert isinstance(node, ObjectSchema)
        assert [p.name for p in node.properties] == ["b", "a"]

    def test_array(self) -> None:
        node = parse_schema({"type": "array", "items": {"type": "integer"}})
        assert isinstance(node, ArraySchema)
        assert node.items == ScalarSchema(type="integer")

    def test_ref(self) -> None:
        assert parse_schema({"$ref": "#/components/schemas/Pet"}) == RefSchema(
            pointer="#/components/schemas/Pet"
        )

    @pytest.mark.parametrize("combinator", ["allOf", "oneOf", "anyOf"])
    def test_composite(self, combinator: str) -> None:
        node = parse_schema({combinator: [{"type": "string"}, {"type": "integer"}]})
        assert isinstance(node, CompositeSchema)
        assert node.combinator == combinator
        assert len(node.variants) == 2

    def test_all_of_sibling_properties_become_a_variant(self) -> None:
        node = parse_schema({
            "allOf": [{"$ref": "#/components/schemas/Category"}],
            "properties": {"extra": {"type": "boolean"}},
        })
        assert isinstance(node.variants[-1], ObjectSchema)
        assert node.variants[-1].properties[0].name == "extra"

    def test_type_array_picks_first_non_null(self) -> None:
        assert parse_schema({"type": ["null", "integer"]}) == ScalarSchema(type="integer")

    def test_enum_without_type_infers_type(self) -> None:
        node = parse_schema({"enum": [1, 2]})
        assert node == ScalarSchema(type="integer", enum_values=(1, 2))

    def test_non_list_enum_rejected(self) -> None:
        with pytest.raises(SchemaError, match="enum"):
            parse_schema({"enum": 5})

    def test_empty_schema_is_object(self) -> None:
        assert parse_schema({}) == ObjectSchema()

    def test_boolean_schema(self) -> None:
        assert parse_schema(True) == ObjectSchema()

    def test_examples_list_fallback(self) -> None:
        assert parse_schema({"type": "string", "examples": ["first", "second"]}).example == "first"

    def test_xml_name(self) -> None:
        assert parse_schema({"type": "object", "xml": {"name": "pet"}}).xml_name == "pet"

    @pytest.mark.parametrize("raw", ["string", 3, ["a"]])
    def test_non_mapping_raises(self, raw: object) -> None:
        with pytest.raises(SchemaError, match="Schema must be an object"):
            parse_schema(raw)

    def test_non_mapping_properties_raises(self) -> None:
        with pytest.raises(SchemaError, match="'properties' must be an object"):
            parse_schema({"type": "object", "properties": ["a"]})

    def test_non_list_combinator_raises(self) -> None:
        with pytest.raises(SchemaError, match="'oneOf' must be a list"):
            parse_schema({"oneOf": {"type": "string"}})


# ---------------------------------------------------------------------------
# synthesize_example
# ---------------------------------------------------------------------------


class TestSynthesizeExample:
    """Literal values win; otherwise Swagger UI style placeholders."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ({"type": "string"}, "string"),
            ({"type": "string", "format": "date"}, "2020-01-01"),
            ({"type": "string", "format": "date-time"}, "2020-01-01T00:00:00Z"),
            ({"type": "string", "format": "email"}, "user@example.com"),
            ({"type": "string", "format": "uuid"}, "3fa85f64-5717-4562-b3fc-2c963f66afa6"),
            ({"type": "integer"}, 0),
            ({"type": "number", "format": "double"}, 0),
            ({"type": "boolean"}, True),
            ({"type": "string", "enum": ["b", "a"]}, "b"),
            ({"type": "string", "default": "dflt"}, "dflt"),
            ({"type": "integer", "example": 7, "default": 1}, 7),
            ({"type": "null"}, None),
        ],
    )
    def test_scalars(self, raw: dict, expected: object, refs: RefTable) -> None:
        assert synthesize_example(parse_schema(raw), refs) == expected

    def test_false_default_is_kept(self, refs: RefTable) -> None:
        assert synthesize_example(parse_schema({"type": "boolean", "default": False}), refs) is False

    def test_object_follows_refs_in_order(self, refs: RefTable) -> None:
        value = synthesize_example(RefSchema(pointer="#/components/schemas/Pet"), refs)
        assert value == {"id": 0, "category": {"id": 0, "name": "string"}, "tags": ["string"]}
        assert list(value) == ["id", "category", "tags"]

    def test_object_example_wins(self, refs: RefTable) -> None:
        node = parse_schema({"type": "object", "example": {"k": "v"}, "properties": {"a": {}}})
        assert synthesize_example(node, refs) == {"k": "v"}

    def test_array_without_items(self, refs: RefTable) -> None:
        assert synthesize_example(parse_schema({"type": "array"}), refs) == []

    def test_recursive_schema_stops(self, refs: RefTable) -> None:
        value = synthesize_example(RefSchema(pointer="#/components/schemas/Node"), refs)
        assert value == {"value": "leaf", "children": [{}]}

    def test_all_of_merges_objects(self, refs: RefTable) -> None:
        node = parse_schema({
            "allOf": [
                {"$ref": "#/components/schemas/Category"},
                {"type": "object", "properties": {"extra": {"type": "boolean"}}},
            ]
        })
        assert synthesize_example(node, refs) == {"id": 0, "name": "string", "extra": True}

    def test_one_of_uses_first_variant(self, refs: RefTable) -> None:
        node = parse_schema({"oneOf": [{"type": "integer"}, {"type": "string"}]})
        assert synthesize_example(node, refs) == 0

    def test_depth_limit(self, refs: RefTable) -> None:
        raw: dict = {"type": "string"}
        for _ in range(MAX_DEPTH + 5):
            raw = {"type": "object", "properties": {"n": raw}}
        value = synthesize_example(parse_schema(raw), refs)
        depth = 0
        while isinstance(value, dict):
            value = value["n"]
            depth += 1
        assert value is None
        assert depth == MAX_DEPTH + 1

    def test_dangling_ref_raises(self, refs: RefTable) -> None:
        with pytest.raises(RefResolutionError):
            synthesize_example(RefSchema(pointer="#/components/schemas/Missing"), refs)


# ---------------------------------------------------------------------------
# dereference / object_properties
# ---------------------------------------------------------------------------


class TestDereference:
    def test_follows_refs(self, refs: RefTable) -> None:
        node = dereference(RefSchema(pointer="#/components/schemas/Category"), refs)
        assert isinstance(node, ObjectSchema)

    def test_keeps_sibling_example(self, refs: RefTable) -> None:
        node = dereference(
            RefSchema(pointer="#/components/schemas/Category", example={"id": 3}), refs
        )
        assert node.example == {"id": 3}

    def test_concrete_node_unchanged(self, refs: RefTable) -> None:
        node = ScalarSchema(type="string")
        assert dereference(node, refs) is node


class TestObjectProperties:
    def test_plain_object(self, refs: RefTable) -> None:
        props = object_properties(RefSchema(pointer="#/components/schemas/Pet"), refs)
        assert [p.name for p in props] == ["id", "category", "tags"]

    def test_all_of_merge_keeps_first_position(self, refs: RefTable) -> None:
        node = parse_schema({
            "allOf": [
                {"$ref": "#/components/schemas/Category"},
                {"$ref": "#/components/schemas/Named"},
            ]
        })
        props = object_properties(node, refs)
        assert [p.name for p in props] == ["id", "name"]
        assert props[1].schema_.default == "rex"

    def test_scalar_has_no_properties(self, refs: RefTable) -> None:
        assert object_properties(ScalarSchema(), refs) == []
