"""Assemble the request collection from a normalized document.

:func:`build_collection` folds over the normalized operations in walk order.
Each :class:`~apicol.models.OperationSpec` becomes one
:class:`~apicol.models.Request`, appended either to the folder named after
the operation's first tag (created the first time the tag is seen) or, for
tagless operations, to the collection root. Operations that were skipped
during normalization, or that fail while their request is being built, are
collected into the returned skip list and never interrupt the fold.

Folders and requests keep first-appearance order; the result is frozen into
an immutable :class:`~apicol.models.Collection` once the fold is complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from apicol.builder.body import resolve_body
from apicol.builder.environments import build_environments
from apicol.builder.url import build_url
from apicol.exceptions import MalformedOperationError
from apicol.models import (
    Collection,
    Folder,
    ImportSettings,
    NormalizedSpec,
    OperationSpec,
    Request,
    SkippedOperation,
)
from apicol.parser.resolver import RefTable

logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    """Mutable state of the fold; frozen into a Collection at the end."""

    folders: dict[str, list[Request]] = field(default_factory=dict)
    root: list[Request] = field(default_factory=list)
    skipped: list[SkippedOperation] = field(default_factory=list)

    def add(self, tag: Optional[str], request: Request) -> None:
        if tag is None:
            self.root.append(request)
        else:
            # dicts keep insertion order, so folder order is first-seen tag order
            self.folders.setdefault(tag, []).append(request)


def build_collection(
    spec: NormalizedSpec,
    settings: Optional[ImportSettings] = None,
) -> tuple[Collection, tuple[SkippedOperation, ...]]:
    """Build the collection for a normalized document.

    Args:
        spec: Output of :func:`~apicol.parser.normalizer.normalize`.
        settings: Import settings shared with the URL and body resolvers.

    Returns:
        A ``(collection, skipped)`` tuple. ``skipped`` lists every operation
        left out of the collection, in walk order.
    """
    settings = settings or ImportSettings()
    refs = spec.refs if isinstance(spec.refs, RefTable) else RefTable({})
    acc = _Accumulator()

    for entry in spec.operations:
        outcome = _fold_entry(entry, refs, settings)
        if isinstance(outcome, SkippedOperation):
            acc.skipped.append(outcome)
        else:
            tag, request = outcome
            acc.add(tag, request)

    collection = Collection(
        name=spec.title,
        environments=build_environments(spec.servers, settings),
        folders=tuple(
            Folder(name=name, requests=tuple(requests))
            for name, requests in acc.folders.items()
        ),
        requests=tuple(acc.root),
    )
    logger.debug(
        "Built collection '%s': %d folders, %d root requests, %d skipped",
        collection.name,
        len(collection.folders),
        len(collection.requests),
        len(acc.skipped),
    )
    return collection, tuple(acc.skipped)


def _fold_entry(
    entry: Union[OperationSpec, SkippedOperation],
    refs: RefTable,
    settings: ImportSettings,
) -> Union[tuple[Optional[str], Request], SkippedOperation]:
    if isinstance(entry, SkippedOperation):
        return entry
    try:
        request = build_request(entry, refs, settings)
    except (MalformedOperationError, TypeError, ValueError) as exc:
        # TypeError/ValueError: example values that json.dumps or ElementTree cannot render
        logger.warning("Skipping %s %s: %s", entry.method.value.upper(), entry.path, exc)
        return SkippedOperation(
            method=entry.method.value.upper(), path=entry.path, reason=str(exc)
        )
    return (entry.tags[0] if entry.tags else None), request


def build_request(
    operation: OperationSpec,
    refs: RefTable,
    settings: Optional[ImportSettings] = None,
) -> Request:
    """Build the request for a single operation.

    Raises:
        MalformedOperationError: If the body schema cannot be resolved.
        TypeError: If an example value cannot be serialised (e.g. YAML
            ``!!binary`` bytes in a JSON body).
    """
    settings = settings or ImportSettings()
    method = operation.method.value.upper()
    return Request(
        name=request_name(operation),
        http_method=method,
        url=build_url(operation.path, operation.parameters, settings),
        body=resolve_body(operation.body_candidates, refs, settings),
    )


def request_name(operation: OperationSpec) -> str:
    """The operation summary, or ``"{METHOD} {path}"`` when it is blank."""
    if operation.summary and operation.summary.strip():
        return operation.summary
    return f"{operation.method.value.upper()} {operation.path}"
