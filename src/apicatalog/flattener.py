"""Flatten a description's path/verb tree into an ordered list of operations.

:func:`flatten_operations` walks ``paths`` and then each path item's verbs in
the order the description lists them. That order is user-visible: it is the
default order of operations inside a category on reference pages, so nothing
here sorts or deduplicates.

Operations whose primary tag is the classifier's umbrella are re-filed under
the subsection returned by
:meth:`~apicatalog.classifier.SubsectionClassifier.classify`. An umbrella
operation that no rule claims keeps the umbrella name and is reported as a
:class:`~apicatalog.models.RulesetInconsistency`.

Parameter merging follows OpenAPI: path-level parameters apply to every
operation of the path item, and operation-level parameters override them when
they share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any

from apicatalog.classifier import SubsectionClassifier
from apicatalog.models import (
    ApiDescription,
    HTTPMethod,
    Operation,
    OperationParameter,
    ParameterKind,
    RulesetInconsistency,
)

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def flatten_operations(
    description: ApiDescription,
    classifier: SubsectionClassifier,
) -> tuple[list[Operation], list[RulesetInconsistency]]:
    """Produce one :class:`~apicatalog.models.Operation` per path + verb pair.

    Args:
        description: The dereferenced description.
        classifier: Subsection rules for the umbrella category.

    Returns:
        ``(operations, inconsistencies)``. ``operations`` is in traversal
        order; ``inconsistencies`` lists the umbrella operations that matched
        no rule, each of which is also logged as a warning.

    Example::

        operations, problems = flatten_operations(description, SubsectionClassifier())
        [op.operation_id for op in operations]
        # ['ListWidgets', 'GetMe', 'ListMyAddresses']
    """
    operations: list[Operation] = []
    inconsistencies: list[RulesetInconsistency] = []

    for path, path_item in description.paths.items():
        path_params = path_item.get("parameters", [])

        for verb, definition in path_item.items():
            if verb not in _HTTP_METHODS or not isinstance(definition, dict):
                continue

            categories = list(definition.get("tags") or [])
            if categories and classifier.is_umbrella(categories[0]):
                subsection = classifier.classify(path)
                if subsection is not None:
                    categories[0] = subsection
                else:
                    problem = RulesetInconsistency(
                        umbrella=classifier.umbrella,
                        path=path,
                        verb=HTTPMethod(verb),
                        operation_id=definition.get("operationId"),
                    )
                    logger.warning("Ruleset inconsistency: %s", problem)
                    inconsistencies.append(problem)

            operations.append(
                Operation(
                    verb=HTTPMethod(verb),
                    path=path,
                    operation_id=definition.get("operationId"),
                    summary=definition.get("summary"),
                    description=definition.get("description"),
                    parameters=_build_parameters(
                        _merge_parameters(path_params, definition.get("parameters", []))
                    ),
                    request_body=definition.get("requestBody"),
                    responses=definition.get("responses", {}),
                    security=definition.get("security", description.security or None),
                    deprecated=definition.get("deprecated", False),
                    categories=categories,
                )
            )

    logger.debug(
        "Flattened %d operations from %d paths", len(operations), len(description.paths)
    )
    return operations, inconsistencies


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Path-level parameters not overridden by ``(name, in)``, then operation-level ones."""
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _build_parameters(raw_params: list[dict[str, Any]]) -> list[OperationParameter]:
    """Convert raw parameter objects, deriving each one's :class:`ParameterKind`.

    Path parameters are always required, whatever the ``required`` field says.
    """
    parameters: list[OperationParameter] = []
    for raw in raw_params:
        location = raw.get("in", "query")
        schema = raw.get("schema")
        parameters.append(
            OperationParameter(
                name=raw.get("name", ""),
                location=location,
                required=True if location == "path" else raw.get("required", False),
                description=raw.get("description"),
                schema_=schema if isinstance(schema, dict) else None,
                kind=ParameterKind.from_schema(schema),
            )
        )
    return parameters
