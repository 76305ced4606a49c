"""Turn a raw description into a validated :class:`~apicatalog.models.ApiDescription`.

:func:`parse_description` is the contract the rest of the package relies on:
it either returns a description whose internal references are all inlined,
or raises :class:`~apicatalog.exceptions.ResolutionError`. No partial
description is ever returned.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from apicatalog.exceptions import ResolutionError
from apicatalog.models import ApiDescription
from apicatalog.parser.resolver import resolve_refs


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the ``openapi`` version string.

    OpenAPI 3.0.x, 3.1.x and later 3.x versions are accepted.

    Raises:
        ResolutionError: For Swagger 2.x documents, a missing ``openapi``
            field, or a non-3.x version.
    """
    if "swagger" in spec:
        raise ResolutionError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x descriptions are supported."
        )

    version = spec.get("openapi")
    if version is None:
        raise ResolutionError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise ResolutionError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str


def parse_description(raw: dict[str, Any]) -> ApiDescription:
    """Check the version, inline every ``$ref`` and validate the result.

    Args:
        raw: The raw description as returned by
            :func:`~apicatalog.parser.loader.load_spec`.

    Returns:
        The immutable :class:`~apicatalog.models.ApiDescription`.

    Raises:
        ResolutionError: If the version is unsupported, a reference cannot
            be resolved, or the resolved tree is structurally invalid (for
            instance a path item that is not an object, or a tag declaring
            both ``x-id`` and ``x-section-id``).
    """
    version = validate_openapi_version(raw)
    resolved = resolve_refs(raw)
    resolved["openapi"] = version

    try:
        return ApiDescription.model_validate(resolved)
    except ValidationError as exc:
        raise ResolutionError(f"Invalid API description: {exc}") from exc
