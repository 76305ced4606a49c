"""Catalog session -- build the catalog at most once and serve reads from it.

A :class:`CatalogSession` owns the single :class:`~apicatalog.index.IndexedCatalog`
of a documentation session. It is created once at startup and handed to
every consumer; nothing reaches into the raw description after that.

Build sequence (run by the first :meth:`CatalogSession.initialize` call):

1. Await the loader (the only step that suspends).
2. :func:`~apicatalog.flattener.flatten_operations`.
3. :func:`~apicatalog.index.build_catalog`.
4. Publish the catalog with a single attribute assignment.

Callers that arrive while step 1 is suspended await the same in-flight task,
so the loader never runs twice. If any step fails, nothing is published, the
in-flight task is dropped, and the next :meth:`~CatalogSession.initialize`
call starts a fresh build.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping, Optional

from apicatalog.classifier import SubsectionClassifier
from apicatalog.exceptions import (
    CatalogNotInitializedError,
    NotFoundError,
    RulesetInconsistencyError,
)
from apicatalog.flattener import flatten_operations
from apicatalog.index import IndexedCatalog, SearchIndex, build_catalog
from apicatalog.models import (
    ApiDescription,
    Operation,
    Resource,
    RulesetInconsistency,
    Section,
)

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[ApiDescription]]
"""Zero-argument coroutine function returning a dereferenced description."""


class CatalogSession:
    """Write-once, read-many holder of the catalog plus its accessor surface.

    Args:
        loader: Returns the dereferenced description, typically a
            :class:`~apicatalog.parser.DescriptionLoader`.
        classifier: Subsection rules for the umbrella category. Defaults to
            the built-in ruleset.
        strict_ruleset: Raise :class:`~apicatalog.exceptions.RulesetInconsistencyError`
            instead of only logging when an umbrella route matches no rule.

    Example::

        session = CatalogSession(DescriptionLoader("openapi.json"))
        await session.initialize()
        for op in session.operations_by_category["My Addresses"]:
            print(op.verb.value.upper(), op.path)
    """

    def __init__(
        self,
        loader: Loader,
        classifier: Optional[SubsectionClassifier] = None,
        strict_ruleset: bool = False,
    ) -> None:
        self._loader = loader
        self._classifier = classifier if classifier is not None else SubsectionClassifier()
        self._strict_ruleset = strict_ruleset
        self._catalog: Optional[IndexedCatalog] = None
        self._pending: Optional[asyncio.Future[IndexedCatalog]] = None

    # ------------------------------------------------------------------ #
    # Initialization
    # ------------------------------------------------------------------ #

    @property
    def is_initialized(self) -> bool:
        return self._catalog is not None

    async def initialize(self) -> IndexedCatalog:
        """Build the catalog unless it already exists, and return it.

        Concurrent calls share one build. Cancelling one caller does not
        cancel the build for the others.

        Raises:
            ResolutionError: If the loader fails.
            RulesetInconsistencyError: In strict mode, if umbrella routes
                match no subsection rule.
        """
        if self._catalog is not None:
            return self._catalog
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._build())
        return await asyncio.shield(self._pending)

    async def _build(self) -> IndexedCatalog:
        try:
            logger.debug("Building catalog with %r", self._loader)
            description = await self._loader()
            operations, inconsistencies = flatten_operations(description, self._classifier)
            if inconsistencies and self._strict_ruleset:
                raise RulesetInconsistencyError(
                    f"{len(inconsistencies)} '{self._classifier.umbrella}' route(s) "
                    f"match no subsection rule; first: {inconsistencies[0]}"
                )
            catalog = build_catalog(
                description, operations, self._classifier, inconsistencies
            )
        finally:
            self._pending = None

        self._catalog = catalog
        logger.debug("Published catalog for '%s'", description.title)
        return catalog

    # ------------------------------------------------------------------ #
    # Read accessors
    # ------------------------------------------------------------------ #

    @property
    def catalog(self) -> IndexedCatalog:
        if self._catalog is None:
            raise CatalogNotInitializedError(
                "Catalog is not initialized; await initialize() first"
            )
        return self._catalog

    @property
    def description(self) -> ApiDescription:
        return self.catalog.description

    @property
    def sections(self) -> tuple[Section, ...]:
        return self.catalog.sections

    @property
    def resources(self) -> tuple[Resource, ...]:
        return self.catalog.resources

    @property
    def operations(self) -> tuple[Operation, ...]:
        return self.catalog.operations

    @property
    def operations_by_id(self) -> Mapping[str, Operation]:
        return self.catalog.operations_by_id

    @property
    def operations_by_category(self) -> Mapping[str, tuple[Operation, ...]]:
        return self.catalog.operations_by_category

    @property
    def search_index(self) -> SearchIndex:
        return self.catalog.search_index

    @property
    def inconsistencies(self) -> tuple[RulesetInconsistency, ...]:
        return self.catalog.inconsistencies

    def get_operation(self, operation_id: str) -> Operation:
        """Return the operation with *operation_id*.

        Raises:
            NotFoundError: If no operation has that id.
        """
        try:
            return self.catalog.operations_by_id[operation_id]
        except KeyError:
            raise NotFoundError(f"Operation '{operation_id}' not found") from None

    def find_category_for_operation(self, operation_id: str) -> Resource:
        """Return the resource an operation is filed under.

        Raises:
            NotFoundError: If the operation does not exist, or its primary
                category is not a resource (for example a section, or a plain
                tag).
        """
        operation = self.get_operation(operation_id)
        resource = self.catalog.find_resource(operation.primary_category)
        if resource is None:
            raise NotFoundError(
                f"No resource named '{operation.primary_category}' "
                f"for operation '{operation_id}'"
            )
        return resource

    def find_operation_with_defaults(self, operation_id: str) -> Operation:
        """Return the operation with every parameter's initial value set.

        The defaults are applied on first retrieval only; see
        :meth:`~apicatalog.models.Operation.apply_defaults`.

        Raises:
            NotFoundError: If no operation has that id.
        """
        return self.get_operation(operation_id).apply_defaults()

    def operations_for_category(self, name: str) -> tuple[Operation, ...]:
        """Operations whose primary category is *name*, in description order."""
        return self.catalog.operations_by_category.get(name, ())

    def resources_for_section(self, section_id: str) -> list[Resource]:
        """Resources parented to *section_id*, in catalog order."""
        return [r for r in self.catalog.resources if r.section_id == section_id]


async def open_catalog(
    loader: Loader,
    classifier: Optional[SubsectionClassifier] = None,
    strict_ruleset: bool = False,
) -> CatalogSession:
    """Create a :class:`CatalogSession` and initialize it.

    Example::

        session = await open_catalog(DescriptionLoader("openapi.json"))
    """
    session = CatalogSession(loader, classifier, strict_ruleset=strict_ruleset)
    await session.initialize()
    return session
