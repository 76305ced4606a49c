"""Spec loader -- load, dereference and validate an API description.

This sub-package is the first stage of the catalog pipeline: turning a raw
OpenAPI 3.x document (JSON or YAML, local file, remote URL or stdin) into an
:class:`~apicatalog.models.ApiDescription` with every internal ``$ref``
inlined.

Typical usage::

    from apicatalog.parser import DescriptionLoader

    loader = DescriptionLoader("https://api.example.com/openapi.json")
    description = await loader()

Sub-modules:

* :mod:`~apicatalog.parser.loader` -- I/O layer (URL, file, stdin) plus
  format detection and the awaitable :class:`DescriptionLoader`.
* :mod:`~apicatalog.parser.resolver` -- Recursive ``$ref`` resolution with
  circular-reference detection.
* :mod:`~apicatalog.parser.description` -- Version check and validation of
  the resolved tree into an :class:`~apicatalog.models.ApiDescription`.
"""

from apicatalog.parser.description import parse_description, validate_openapi_version
from apicatalog.parser.loader import DescriptionLoader, load_spec

__all__ = ["DescriptionLoader", "load_spec", "parse_description", "validate_openapi_version"]
