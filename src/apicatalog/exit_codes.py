"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apicatalog.exceptions.ApiCatalogError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a broken
description apart from a ruleset that needs maintenance.

Example::

    $ apicatalog --spec openapi.json check
    $ echo $?
    8   # EXIT_RULESET_INCONSISTENCY -- an umbrella route matched no rule
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an invalid query."""

EXIT_NOT_FOUND = 4
"""The requested operation or category is not in the catalog."""

EXIT_RESOLUTION_ERROR = 7
"""The API description could not be loaded, parsed or dereferenced."""

EXIT_RULESET_INCONSISTENCY = 8
"""An umbrella-category route is not covered by the subsection ruleset."""

EXIT_NOT_INITIALIZED = 9
"""The catalog was read before initialization completed."""
