"""Lookup tables and full-text search over a flattened description.

:func:`build_catalog` assembles the :class:`IndexedCatalog`, the frozen
payload a :class:`~apicatalog.session.CatalogSession` publishes:

1. **Sections** -- tags declaring ``x-id``.
2. **Resources** -- tags declaring ``x-section-id``, followed by the
   classifier's synthetic subsection resources.
3. **operations_by_id** -- keyed by ``operationId``; a later operation with
   the same id replaces the earlier one (logged as a warning, since it means
   the description is malformed).
4. **operations_by_category** -- grouped by primary category in flattening
   order.
5. **search_index** -- a :class:`SearchIndex` over every section and
   resource.

The search index is built with `lunr <https://lunr.readthedocs.io/>`_. Each
category is one document keyed by its name. ``name`` and ``description`` go
through lunr's default stemming pipeline for :meth:`SearchIndex.search`;
``label`` holds the same name lowercased but neither stemmed nor stop-word
filtered, so :meth:`SearchIndex.filter` can prefix-match every partial word
(``promoti`` still finds ``My Promotions``, ``me`` finds ``Me``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from lunr import get_default_builder, lunr
from lunr.exceptions import QueryParseError
from lunr.query import Query
from lunr.stemmer import stemmer
from lunr.stop_word_filter import stop_word_filter

from apicatalog.classifier import SubsectionClassifier
from apicatalog.exceptions import InvalidQueryError
from apicatalog.models import (
    ApiDescription,
    CategoryRecord,
    Operation,
    Resource,
    RulesetInconsistency,
    Section,
)

logger = logging.getLogger(__name__)

NAME_BOOST = 10
"""Weight of the ``name`` and ``label`` fields relative to ``description``."""

LABEL_FIELD = "label"
"""Unstemmed copy of the category name, queried by :meth:`SearchIndex.filter`."""


@dataclass(frozen=True)
class SearchHit:
    """One ranked search result."""

    ref: str
    score: float
    category: CategoryRecord


class SearchIndex:
    """Full-text index over category names and descriptions.

    Results are ordered by descending score, then by reference, so the same
    query against the same categories always yields the same list.

    Args:
        categories: Sections and resources to index. Names are used as
            document references; on duplicate names the last record wins.

    Example::

        index = SearchIndex(sections + resources)
        [hit.ref for hit in index.filter("addr")]   # ['My Addresses']
        [hit.ref for hit in index.search("name:order*")]
    """

    def __init__(self, categories: Iterable[CategoryRecord]) -> None:
        self._categories: dict[str, CategoryRecord] = {c.name: c for c in categories}
        self._index: Any = None
        if self._categories:
            builder = get_default_builder()
            builder.pipeline.skip(stop_word_filter, [LABEL_FIELD])
            builder.pipeline.skip(stemmer, [LABEL_FIELD])
            self._index = lunr(
                ref="name",
                fields=[
                    {"field_name": "name", "boost": NAME_BOOST},
                    {
                        "field_name": LABEL_FIELD,
                        "boost": NAME_BOOST,
                        "extractor": lambda doc: doc["name"],
                    },
                    {"field_name": "description"},
                ],
                documents=[
                    {"name": c.name, "description": c.description or ""}
                    for c in self._categories.values()
                ],
                builder=builder,
            )

    def __len__(self) -> int:
        return len(self._categories)

    def search(self, query: str) -> list[SearchHit]:
        """Run a query in lunr syntax (``name:addr*``, ``+order -draft``...).

        Raises:
            InvalidQueryError: If the query string cannot be parsed.
        """
        if self._index is None or not query.strip():
            return []
        try:
            results = self._index.search(query)
        except QueryParseError as exc:
            raise InvalidQueryError(f"Invalid search query '{query}': {exc}") from exc
        return self._to_hits(results)

    def filter(self, text: str) -> list[SearchHit]:
        """As-you-type filtering: every word of *text* is a prefix of a name word.

        Words are OR-ed together; categories matching more of them rank
        higher. Lunr query syntax in *text* is treated literally.
        """
        terms = [term for term in text.lower().split() if term]
        if self._index is None or not terms:
            return []

        query = self._index.create_query(fields=[LABEL_FIELD])
        for term in terms:
            query.term(term, wildcard=Query.WILDCARD_TRAILING, use_pipeline=False)
        return self._to_hits(self._index.query(query))

    def _to_hits(self, results: Sequence[dict[str, Any]]) -> list[SearchHit]:
        ordered = sorted(results, key=lambda r: (-r["score"], r["ref"]))
        return [
            SearchHit(ref=r["ref"], score=r["score"], category=self._categories[r["ref"]])
            for r in ordered
        ]


@dataclass(frozen=True)
class IndexedCatalog:
    """The fully built, read-only catalog.

    Mappings are read-only views; sequences are tuples.
    """

    description: ApiDescription
    sections: tuple[Section, ...]
    resources: tuple[Resource, ...]
    operations: tuple[Operation, ...]
    operations_by_id: Mapping[str, Operation]
    operations_by_category: Mapping[str, tuple[Operation, ...]]
    search_index: SearchIndex
    inconsistencies: tuple[RulesetInconsistency, ...] = field(default=())

    def find_resource(self, name: Optional[str]) -> Optional[Resource]:
        """Return the first resource named exactly *name*, if any."""
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None


def build_catalog(
    description: ApiDescription,
    operations: Sequence[Operation],
    classifier: SubsectionClassifier,
    inconsistencies: Sequence[RulesetInconsistency] = (),
) -> IndexedCatalog:
    """Build every lookup structure over *operations*.

    Args:
        description: The description the operations were flattened from.
        operations: Output of :func:`~apicatalog.flattener.flatten_operations`.
        classifier: Supplies the synthetic subsection resources.
        inconsistencies: Ruleset problems found while flattening; carried on
            the catalog for reporting.

    Returns:
        A frozen :class:`IndexedCatalog`.
    """
    sections: list[Section] = []
    resources: list[Resource] = []
    for tag in description.tags:
        category = tag.as_category()
        if isinstance(category, Section):
            sections.append(category)
        elif isinstance(category, Resource):
            resources.append(category)
    resources.extend(classifier.synthetic_resources())

    by_id: dict[str, Operation] = {}
    by_category: dict[str, list[Operation]] = {}
    for operation in operations:
        if operation.operation_id is not None:
            if operation.operation_id in by_id:
                logger.warning(
                    "Duplicate operationId '%s' at %s %s replaces an earlier operation",
                    operation.operation_id,
                    operation.verb.value.upper(),
                    operation.path,
                )
            by_id[operation.operation_id] = operation
        if operation.primary_category is not None:
            by_category.setdefault(operation.primary_category, []).append(operation)

    logger.debug(
        "Indexed %d sections, %d resources, %d operations",
        len(sections),
        len(resources),
        len(operations),
    )
    return IndexedCatalog(
        description=description,
        sections=tuple(sections),
        resources=tuple(resources),
        operations=tuple(operations),
        operations_by_id=MappingProxyType(by_id),
        operations_by_category=MappingProxyType(
            {name: tuple(ops) for name, ops in by_category.items()}
        ),
        search_index=SearchIndex([*sections, *resources]),
        inconsistencies=tuple(inconsistencies),
    )
