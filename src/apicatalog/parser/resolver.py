"""Inline ``$ref`` JSON Reference pointers in an API description.

Descriptions lean on ``$ref`` pointers (``{"$ref": "#/components/schemas/Address"}``)
to share parameters, schemas and responses between operations. Reference pages
need the inlined objects, so :func:`resolve_refs` returns a deep copy of the
document with every internal pointer replaced by its target.

Only **internal** references (``#/...``) are supported. External file or URL
references, pointers to missing keys, and malformed ``$ref`` values raise
:class:`~apicatalog.exceptions.ResolutionError`.

Circular references are left as their ``$ref`` dict at the cycle point, so a
self-referencing schema (a category tree, say) still resolves. Sibling keys
next to a ``$ref`` (allowed since OpenAPI 3.1 for ``summary`` and
``description``) are laid over the resolved target.
"""

from __future__ import annotations

import copy
from typing import Any

from apicatalog.exceptions import ResolutionError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with all internal ``$ref`` pointers inlined.

    Args:
        spec: The raw description, as returned by
            :func:`~apicatalog.parser.loader.load_spec`.

    Returns:
        A new dictionary; the input is never mutated.

    Raises:
        ResolutionError: If a pointer is external, malformed, or names a
            location that does not exist.

    Example::

        resolved = resolve_refs({
            "paths": {"/me": {"get": {"parameters": [{"$ref": "#/components/parameters/Page"}]}}},
            "components": {"parameters": {"Page": {"name": "page", "in": "query"}}},
        })
        # resolved["paths"]["/me"]["get"]["parameters"][0]["name"] == "page"
    """
    root = copy.deepcopy(spec)
    return _resolve_node(root, root, frozenset())


def _lookup(ref: str, root: dict[str, Any]) -> Any:
    """Follow one JSON Pointer (RFC 6901) from *root*."""
    if not ref.startswith("#/"):
        raise ResolutionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                raise ResolutionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ResolutionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise ResolutionError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current


def _resolve_node(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    """Resolve *node* depth-first.

    *active* holds the pointers currently being expanded on this branch; a
    pointer met again on the same branch is a cycle and stays unresolved.
    Sibling branches get their own copy, so a schema reused in two places is
    expanded in both.
    """
    if isinstance(node, list):
        return [_resolve_node(item, root, active) for item in node]

    if not isinstance(node, dict):
        return node

    if "$ref" not in node:
        return {key: _resolve_node(value, root, active) for key, value in node.items()}

    ref = node["$ref"]
    if not isinstance(ref, str):
        raise ResolutionError(f"Invalid $ref value: {ref!r} (expected a string)")
    if ref in active:
        return node

    target = _resolve_node(_lookup(ref, root), root, active | {ref})
    siblings = {key: value for key, value in node.items() if key != "$ref"}
    if siblings and isinstance(target, dict):
        merged = dict(target)
        merged.update(_resolve_node(siblings, root, active))
        return merged
    return target
