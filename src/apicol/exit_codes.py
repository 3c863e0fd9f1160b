"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apicol.exceptions.ApicolError` subclass.
Scripts wrapping ``apicol convert`` can inspect the exit code to tell a
broken document from an unsupported one without parsing stderr.

Example::

    $ apicol convert swagger-1.2.json
    $ echo $?
    8   # EXIT_UNSUPPORTED_VERSION -- no swagger/openapi discriminator
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_UNPARSABLE_DOCUMENT = 7
"""The document is not valid JSON/YAML, or its root is not a mapping."""

EXIT_UNSUPPORTED_VERSION = 8
"""The document declares no supported ``swagger``/``openapi`` version."""
