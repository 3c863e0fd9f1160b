"""Import an OpenAPI document into a request collection.

This is the outer boundary of the import pipeline::

    text --parse_document--> dict --detect_version--> SpecVersion
         --normalize--> NormalizedSpec --build_collection--> Collection

:func:`import_collection` raises on documents that cannot be imported at
all and reports skipped operations alongside the collection.
:func:`try_import` wraps it in an all-or-nothing ``(success, collection)``
contract for callers that only need a yes/no answer.

Both functions are pure: no I/O, no state kept between calls. Independent
calls may run concurrently.
"""

from __future__ import annotations

import logging
from typing import Optional

from apicol.builder.collection import build_collection
from apicol.exceptions import UnparsableDocumentError, UnsupportedVersionError
from apicol.models import Collection, ImportResult, ImportSettings
from apicol.parser.loader import detect_version, parse_document
from apicol.parser.normalizer import normalize

logger = logging.getLogger(__name__)


def import_collection(
    text: str,
    hint: str = "",
    settings: Optional[ImportSettings] = None,
) -> ImportResult:
    """Import a document and report what was left out.

    Args:
        text: The OpenAPI document, JSON or YAML, already decoded.
        hint: Optional syntax hint (``"json"`` or ``"yaml"``).
        settings: Import settings; defaults apply when omitted.

    Returns:
        An :class:`~apicol.models.ImportResult` holding the collection,
        the detected version, and the skipped operations.

    Raises:
        UnparsableDocumentError: If the text is not a JSON/YAML mapping, or
            its ``paths`` is not a mapping.
        UnsupportedVersionError: If no ``swagger: 2.x``/``openapi: 3.x``
            discriminator is present.
    """
    settings = settings or ImportSettings()

    doc = parse_document(text, hint=hint)
    version = detect_version(doc)
    logger.debug("Detected %s document", version.value)

    spec = normalize(doc, version, settings)
    collection, skipped = build_collection(spec, settings)

    if skipped:
        logger.info("Imported '%s' with %d operation(s) skipped", collection.name, len(skipped))
    return ImportResult(collection=collection, version=version, skipped=skipped)


def try_import(
    text: str,
    hint: str = "",
    settings: Optional[ImportSettings] = None,
) -> tuple[bool, Optional[Collection]]:
    """Import a document, all or nothing.

    Args:
        text: The OpenAPI document, JSON or YAML, already decoded.
        hint: Optional syntax hint (``"json"`` or ``"yaml"``).
        settings: Import settings; defaults apply when omitted.

    Returns:
        ``(True, collection)`` on success, ``(False, None)`` when the
        document is unparsable or declares no supported version.

    Example::

        ok, collection = try_import(Path("petstore.yaml").read_text())
        if ok:
            print(collection.name, len(collection.folders))
    """
    try:
        result = import_collection(text, hint=hint, settings=settings)
    except (UnparsableDocumentError, UnsupportedVersionError) as exc:
        logger.info("Document is not importable: %s", exc)
        return False, None
    return True, result.collection
