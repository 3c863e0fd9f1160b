"""Exception hierarchy for apicol.

All exceptions inherit from :class:`ApicolError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apicol.exit_codes`.
The top-level error handler in :func:`apicol.app.main` catches
``ApicolError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ApicolError (exit 1)
    +-- InvalidUsageError         (exit 2)
    +-- ConfigError               (exit 1)
    +-- UnparsableDocumentError   (exit 7)
    +-- UnsupportedVersionError   (exit 8)
    +-- MalformedOperationError   (never leaves the normalizer)
"""

from apicol.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_UNPARSABLE_DOCUMENT,
    EXIT_UNSUPPORTED_VERSION,
)


class ApicolError(Exception):
    """Base exception for all apicol errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apicol.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApicolError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ApicolError):
    """Raised for configuration problems (unreadable or invalid config files)."""

    exit_code = EXIT_GENERIC_FAILURE


class UnparsableDocumentError(ApicolError):
    """Raised when the document is not valid JSON/YAML or is not a mapping."""

    exit_code = EXIT_UNPARSABLE_DOCUMENT


class UnsupportedVersionError(ApicolError):
    """Raised when no ``swagger: 2.x`` or ``openapi: 3.x`` discriminator is found."""

    exit_code = EXIT_UNSUPPORTED_VERSION


class MalformedOperationError(ApicolError):
    """Raised while normalizing a single operation whose shape cannot be mapped.

    The normalizer converts it into a
    :class:`~apicol.models.SkippedOperation` so that the rest of the
    document is still imported.
    """
