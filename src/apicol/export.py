"""Render collections as JSON or YAML documents.

The rendered shape uses camelCase keys and omits ``None`` fields::

    {
      "name": "Petstore",
      "environments": [{"name": "env1", "variables": [...]}],
      "folders": [{"name": "pet", "requests": [...], "folders": []}],
      "requests": []
    }
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from apicol.exceptions import InvalidUsageError
from apicol.models import Collection

SUPPORTED_FORMATS = ("json", "yaml")


def collection_to_dict(collection: Collection) -> dict[str, Any]:
    """Return a plain, JSON-compatible dict for *collection*."""
    return collection.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_collection(collection: Collection, fmt: str = "json") -> str:
    """Serialise *collection* as indented JSON or block-style YAML.

    Raises:
        InvalidUsageError: If *fmt* is not one of :data:`SUPPORTED_FORMATS`.
    """
    data = collection_to_dict(collection)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise InvalidUsageError(
        f"Unsupported collection format: {fmt}. Use one of: {', '.join(SUPPORTED_FORMATS)}"
    )
