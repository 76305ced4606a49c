"""apicatalog -- index and classify REST API descriptions for reference docs.

This package turns an OpenAPI 3.x description into an :class:`IndexedCatalog`
that documentation front-ends read from: the flat list of operations, the
section/resource navigation tree, direct lookup tables and a full-text index
over category names and descriptions.

Typical usage::

    from apicatalog.parser import DescriptionLoader
    from apicatalog.classifier import SubsectionClassifier
    from apicatalog.session import open_catalog

    session = await open_catalog(DescriptionLoader("openapi.json"), SubsectionClassifier())
    op = session.find_operation_with_defaults("Me.Get")

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    classifier: Path-based subsection ruleset for the umbrella category.
    flattener: Path/verb tree to flat operation list.
    index: Lookup tables and the full-text search index.
    session: One-shot catalog initialization and the accessor surface.
    config: Configuration resolution and ruleset files.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
