"""Load API descriptions from a URL, local file, or stdin.

This module handles all I/O for fetching raw descriptions and converting them
into Python dictionaries. JSON and YAML are both supported with automatic
format detection.

The public surface is:

* :func:`load_spec` -- Coroutine that loads and parses a raw description from
  any supported source. Remote descriptions are fetched with
  :class:`httpx.AsyncClient`, so this is the one step of a catalog build that
  suspends.
* :class:`DescriptionLoader` -- Awaitable callable bound to a source that
  returns a dereferenced :class:`~apicatalog.models.ApiDescription`. This is
  the loader a :class:`~apicatalog.session.CatalogSession` is built with.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from apicatalog.exceptions import ResolutionError
from apicatalog.models import ApiDescription
from apicatalog.parser.description import parse_description

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""Seconds allowed for fetching a remote description."""


async def load_spec(source: str, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Load a raw description from a URL, file path, or stdin (``'-'``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``'-'`` for stdin.
        timeout: Timeout in seconds for remote fetches.

    Returns:
        The parsed document as a dictionary. ``$ref`` pointers are left
        untouched.

    Raises:
        ResolutionError: If the source cannot be read or parsed.
    """
    logger.debug("Loading API description from %s", source)
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return await _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ResolutionError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise ResolutionError("No input received from stdin")

    return _parse_content(content)


async def _load_from_url(url: str, timeout: float) -> dict[str, Any]:
    """Fetch a description over HTTP, using the content type as a format hint."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ResolutionError(
            f"HTTP {exc.response.status_code} fetching description from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ResolutionError(f"Failed to fetch description from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local description; ``.json``/``.yaml``/``.yml`` pick the parser."""
    file_path = Path(path)
    if not file_path.is_file():
        raise ResolutionError(f"Description file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ResolutionError(f"Failed to read description file {path}: {exc}") from exc

    if not content.strip():
        raise ResolutionError(f"Description file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    JSON is tried first unless *hint* is ``"yaml"``; an explicit ``"json"``
    hint disables the YAML fallback.

    Raises:
        ResolutionError: If the content is not a JSON/YAML object.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_object(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ResolutionError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_object(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise ResolutionError(
        "Failed to parse description as JSON or YAML\n  " + "\n  ".join(errors)
    )


def _require_object(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise ResolutionError(f"Description must be a JSON/YAML object (got {kind})")
    return document


class DescriptionLoader:
    """Awaitable loader bound to one description source.

    Each call reads the source, dereferences it and validates it. Callers
    that need the result once per session should go through
    :class:`~apicatalog.session.CatalogSession`, which guarantees a single
    call.

    Args:
        source: URL, file path, or ``'-'`` for stdin.
        timeout: Timeout in seconds for remote fetches.

    Example::

        loader = DescriptionLoader("openapi.json")
        description = await loader()
        print(description.title)
    """

    def __init__(self, source: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.source = source
        self.timeout = timeout

    async def __call__(self) -> ApiDescription:
        raw = await load_spec(self.source, timeout=self.timeout)
        return parse_description(raw)

    def __repr__(self) -> str:
        return f"DescriptionLoader({self.source!r})"
