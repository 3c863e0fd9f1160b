"""Look up ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. Rather than
inlining every reference up front, the importer keeps references as they are
and resolves them on demand through a :class:`RefTable`: an explicit lookup
table keyed by pointer string, filled lazily as pointers are followed.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise :class:`RefResolutionError`.

Chains of references (a ``$ref`` whose target is itself a ``$ref``) are
followed to the end; a chain that loops back on itself also raises
:class:`RefResolutionError`. Recursive *schemas* are fine: schema traversal
tracks the pointers on its own stack and stops at the cycle point (see
:func:`~apicol.parser.schema.synthesize_example`).
"""

from __future__ import annotations

from typing import Any

from apicol.exceptions import MalformedOperationError


class RefResolutionError(MalformedOperationError):
    """Raised when a ``$ref`` is external, dangling, or part of a reference loop."""


class RefTable:
    """Pointer-keyed lookup table over one parsed document.

    The table never copies or mutates the document. Each successful lookup is
    memoised, so repeated references to the same component cost one dict hit.

    Args:
        root: The parsed document, as returned by
            :func:`~apicol.parser.loader.parse_document`.

    Example::

        refs = RefTable(doc)
        pet = refs.lookup("#/components/schemas/Pet")
        param = refs.resolve({"$ref": "#/parameters/limit"})
    """

    def __init__(self, root: dict[str, Any]) -> None:
        self._root = root
        self._cache: dict[str, Any] = {}

    def __contains__(self, pointer: str) -> bool:
        try:
            self.lookup(pointer)
        except RefResolutionError:
            return False
        return True

    def lookup(self, pointer: str) -> Any:
        """Return the value a single pointer refers to.

        Args:
            pointer: The ``$ref`` string (e.g., ``"#/definitions/Pet"``).

        Returns:
            The value found at the referenced path. ``$ref`` values inside
            it are left untouched.

        Raises:
            RefResolutionError: If the reference is external or does not
                exist in the document.
        """
        if pointer in self._cache:
            return self._cache[pointer]
        value = _navigate(pointer, self._root)
        self._cache[pointer] = value
        return value

    def resolve(self, node: Any) -> Any:
        """Follow *node* through any chain of ``$ref`` objects.

        Non-reference values are returned unchanged.

        Args:
            node: Any document value, usually a parameter, request body,
                path item or schema dict.

        Returns:
            The first value in the chain that is not a ``$ref`` object.

        Raises:
            RefResolutionError: If a pointer in the chain cannot be resolved
                or the chain loops.
        """
        seen: list[str] = []
        while is_ref(node):
            pointer = node["$ref"]
            if pointer in seen:
                chain = " -> ".join(seen + [pointer])
                raise RefResolutionError(f"Circular $ref chain: {chain}")
            seen.append(pointer)
            node = self.lookup(pointer)
        return node


def is_ref(node: Any) -> bool:
    """Return ``True`` when *node* is a ``{"$ref": "..."}`` object."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def _navigate(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the root dict to locate the referenced value. Handles
    RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Raises:
        RefResolutionError: If the reference is external (does not start
            with ``#/``), or if any segment in the pointer path does not
            exist in the document.
    """
    if ref == "#":
        return root
    if not ref.startswith("#/"):
        raise RefResolutionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise RefResolutionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise RefResolutionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise RefResolutionError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current
