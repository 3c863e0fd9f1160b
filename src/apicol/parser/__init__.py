"""OpenAPI document parser -- load, detect version, resolve ``$ref``, normalize.

This sub-package is responsible for the first half of the import pipeline:
turning raw OpenAPI text (Swagger 2.0 or OpenAPI 3.x, JSON or YAML) into a
:class:`~apicol.models.NormalizedSpec` that the collection builder can
consume.

Typical usage::

    from apicol.parser import detect_version, normalize, parse_document

    doc = parse_document(text)
    spec = normalize(doc, detect_version(doc))

Sub-modules:

* :mod:`~apicol.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and version detection.
* :mod:`~apicol.parser.resolver` -- Pointer-keyed ``$ref`` lookup table.
* :mod:`~apicol.parser.schema` -- Schema node parsing and example synthesis.
* :mod:`~apicol.parser.normalizer` -- Maps both OpenAPI generations onto
  one representation of servers, operations and body candidates.
"""

from apicol.parser.loader import detect_version, load_spec, parse_document
from apicol.parser.normalizer import normalize

__all__ = ["detect_version", "load_spec", "normalize", "parse_document"]
