"""Exception hierarchy for apicatalog.

All exceptions inherit from :class:`ApiCatalogError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apicatalog.exit_codes`.
The top-level error handler in :func:`apicatalog.app.main` catches
``ApiCatalogError`` and exits with the appropriate code.

Subclass hierarchy::

    ApiCatalogError (exit 1)
    +-- InvalidQueryError          (exit 2)
    +-- NotFoundError              (exit 4)
    +-- ResolutionError            (exit 7)
    +-- RulesetInconsistencyError  (exit 8)
    +-- CatalogNotInitializedError (exit 9)
    +-- ConfigError                (exit 1)
"""

from apicatalog.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_NOT_INITIALIZED,
    EXIT_RESOLUTION_ERROR,
    EXIT_RULESET_INCONSISTENCY,
)


class ApiCatalogError(Exception):
    """Base exception for all apicatalog errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apicatalog.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidQueryError(ApiCatalogError):
    """Raised when a search query cannot be parsed."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(ApiCatalogError):
    """Raised when an operation id or category name is absent from the catalog."""

    exit_code = EXIT_NOT_FOUND


class ResolutionError(ApiCatalogError):
    """Raised when the API description cannot be loaded, parsed or dereferenced."""

    exit_code = EXIT_RESOLUTION_ERROR


class RulesetInconsistencyError(ApiCatalogError):
    """Raised in strict mode when umbrella routes match no subsection rule."""

    exit_code = EXIT_RULESET_INCONSISTENCY


class CatalogNotInitializedError(ApiCatalogError):
    """Raised when catalog accessors are used before initialization completes."""

    exit_code = EXIT_NOT_INITIALIZED


class ConfigError(ApiCatalogError):
    """Raised for configuration problems (invalid JSON, bad values, unreadable ruleset)."""

    exit_code = EXIT_GENERIC_FAILURE
