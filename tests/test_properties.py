"""Property-based tests for collection ordering and determinism.

Uses Hypothesis to generate small OpenAPI 3 documents with arbitrary paths,
methods and tags, and checks the grouping and ordering rules of the import
against a straightforward model of them.
"""

from __future__ import annotations

import json

from hypothesis import given, settings
from hypothesis import strategies as st

from apicol.importer import import_collection
from apicol.models import ImportSettings, OperationOrder

PRIORITY = ["get", "put", "post", "delete", "options", "head", "patch", "trace"]
TAG_POOL = ["alpha", "beta", "gamma", "delta"]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@st.composite
def operation_layout(draw: st.DrawFn) -> list[tuple[str, list[tuple[str, list[str]]]]]:
    """Generate ``[(path, [(method, tags), ...]), ...]`` in document order.

    Paths are unique; each path carries a permutation of a subset of the
    HTTP methods so document order and priority order usually disagree.
    """
    n_paths = draw(st.integers(min_value=0, max_value=6))
    layout = []
    for index in range(n_paths):
        methods = draw(st.permutations(PRIORITY))
        count = draw(st.integers(min_value=1, max_value=len(PRIORITY)))
        operations = [
            (method, draw(st.lists(st.sampled_from(TAG_POOL), max_size=2)))
            for method in methods[:count]
        ]
        layout.append((f"/resource{index}", operations))
    return layout


def _document(layout: list[tuple[str, list[tuple[str, list[str]]]]]) -> str:
    paths = {}
    for path, operations in layout:
        item = {}
        for method, tags in operations:
            operation = {"summary": f"{method.upper()} {path}"}
            if tags:
                operation["tags"] = tags
            item[method] = operation
        paths[path] = item
    return json.dumps({"openapi": "3.0.3", "info": {"title": "Generated"}, "paths": paths})


def _walk(layout, order: OperationOrder) -> list[tuple[str, str, list[str]]]:
    walked = []
    for path, operations in layout:
        if order == OperationOrder.PRIORITY:
            operations = sorted(operations, key=lambda op: PRIORITY.index(op[0]))
        walked.extend((method, path, tags) for method, tags in operations)
    return walked


def _expected(layout, order: OperationOrder) -> tuple[dict[str, list[str]], list[str]]:
    folders: dict[str, list[str]] = {}
    root: list[str] = []
    for method, path, tags in _walk(layout, order):
        name = f"{method.upper()} {path}"
        if tags:
            folders.setdefault(tags[0], []).append(name)
        else:
            root.append(name)
    return folders, root


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestOrderingProperties:
    @given(layout=operation_layout(), order=st.sampled_from(list(OperationOrder)))
    @settings(max_examples=75, deadline=None)
    def test_grouping_and_order_match_model(self, layout, order: OperationOrder) -> None:
        """Folders appear in first-seen tag order; requests keep walk order."""
        result = import_collection(_document(layout), settings=ImportSettings(operation_order=order))
        collection = result.collection

        expected_folders, expected_root = _expected(layout, order)
        assert [f.name for f in collection.folders] == list(expected_folders)
        for folder in collection.folders:
            assert [r.name for r in folder.requests] == expected_folders[folder.name]
        assert [r.name for r in collection.requests] == expected_root
        assert result.skipped == ()

    @given(layout=operation_layout())
    @settings(max_examples=50, deadline=None)
    def test_every_operation_becomes_exactly_one_request(self, layout) -> None:
        collection = import_collection(_document(layout)).collection
        names = [request.name for _, request in collection.iter_requests()]
        total = sum(len(operations) for _, operations in layout)
        assert len(names) == total
        assert len(set(names)) == total

    @given(layout=operation_layout())
    @settings(max_examples=50, deadline=None)
    def test_default_is_declaration_order(self, layout) -> None:
        collection = import_collection(_document(layout)).collection
        expected_folders, expected_root = _expected(layout, OperationOrder.DOCUMENT)
        assert {f.name: [r.name for r in f.requests] for f in collection.folders} == expected_folders
        assert [r.name for r in collection.requests] == expected_root

    @given(layout=operation_layout())
    @settings(max_examples=50, deadline=None)
    def test_priority_order_within_a_path(self, layout) -> None:
        import_settings = ImportSettings(operation_order=OperationOrder.PRIORITY)
        collection = import_collection(_document(layout), settings=import_settings).collection
        # Within one folder (or the root), requests of one path follow priority.
        for folder in (*collection.folders, None):
            requests = folder.requests if folder is not None else collection.requests
            by_path: dict[str, list[int]] = {}
            for request in requests:
                method, path = request.name.split(" ", 1)
                by_path.setdefault(path, []).append(PRIORITY.index(method.lower()))
            for ranks in by_path.values():
                assert ranks == sorted(ranks)


class TestDeterminismProperties:
    @given(layout=operation_layout(), order=st.sampled_from(list(OperationOrder)))
    @settings(max_examples=50, deadline=None)
    def test_same_input_same_collection(self, layout, order: OperationOrder) -> None:
        text = _document(layout)
        import_settings = ImportSettings(operation_order=order)
        first = import_collection(text, settings=import_settings).collection
        second = import_collection(text, settings=import_settings).collection
        assert first == second
        assert first.model_dump() == second.model_dump()

    @given(layout=operation_layout())
    @settings(max_examples=30, deadline=None)
    def test_json_and_yaml_hints_agree(self, layout) -> None:
        text = _document(layout)
        assert import_collection(text, hint="json").collection == import_collection(text, hint="yaml").collection
