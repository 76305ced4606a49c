"""Subsection rules for splitting an umbrella category.

Some descriptions file many unrelated operations under one catch-all tag
(``Me`` in the OrderCloud description: the buyer user's own addresses,
orders, products, credit cards...). Reference navigation reads better when
that umbrella is split into purpose-named subsections. The split is driven by
a static, hand-maintained ruleset rather than by editing the description.

Rules are matched on the **literal** path string. Templated segments must
match the description's spelling byte-for-byte (``/me/addresses/{addressID}``
and ``/me/addresses/{addressId}`` are different paths). When several rules
contain the same path, the first rule in list order wins.

One rule carries the umbrella's own name (the identity rule). It still owns
paths for classification, but it is not materialized as an extra resource
since the description already declares that tag.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from apicatalog.models import Resource, SubsectionRule

DEFAULT_UMBRELLA = "Me"
"""Tag split by :data:`DEFAULT_RULES`."""

DEFAULT_SECTION_ID = "MeAndMyStuff"
"""Section that owns the ``Me`` tag and every subsection in :data:`DEFAULT_RULES`."""


def _rule(name: str, *paths: str) -> SubsectionRule:
    return SubsectionRule(name=name, parent_section_id=DEFAULT_SECTION_ID, paths=paths)


DEFAULT_RULES: tuple[SubsectionRule, ...] = (
    _rule("Me", "/me", "/me/register", "/me/password"),
    _rule("My Cost Centers", "/me/costcenters"),
    _rule("My User Groups", "/me/usergroups"),
    _rule("My Addresses", "/me/addresses", "/me/addresses/{addressID}"),
    _rule("My Credit Cards", "/me/creditcards", "/me/creditcards/{creditcardID}"),
    _rule("My Categories", "/me/categories", "/me/categories/{categoryID}"),
    _rule(
        "My Products",
        "/me/products",
        "/me/products/{productID}",
        "/me/products/{productID}/specs",
        "/me/products/{productID}/specs/{specID}",
    ),
    _rule("My Orders", "/me/orders", "/me/orders/approvable"),
    _rule("My Promotions", "/me/promotions", "/me/promotions/{promotionID}"),
    _rule(
        "My Spending Accounts",
        "/me/spendingAccounts",
        "/me/spendingaccounts/{spendingAccountID}",
    ),
    _rule(
        "My Shipments",
        "/me/shipments",
        "/me/shipments/{shipmentID}",
        "/me/shipments/{shipmentID}/items",
    ),
    _rule("My Catalogs", "/me/catalogs", "/me/catalogs/{catalogID}"),
)
"""Built-in ruleset for the OrderCloud ``Me`` tag."""


class SubsectionClassifier:
    """Map umbrella-category paths to subsection names.

    Args:
        rules: Ordered rules; earlier rules take precedence on overlap.
            Defaults to :data:`DEFAULT_RULES`.
        umbrella: Name of the category being split. Only operations whose
            primary tag equals this name are reclassified.

    Example::

        classifier = SubsectionClassifier(
            [
                SubsectionRule(name="Me", parent_section_id="Mine", paths=("/me",)),
                SubsectionRule(name="My Addresses", parent_section_id="Mine", paths=("/me/addresses",)),
            ],
            umbrella="Me",
        )
        classifier.classify("/me/addresses")   # 'My Addresses'
        classifier.classify("/widgets")        # None
    """

    def __init__(
        self,
        rules: Optional[Iterable[SubsectionRule]] = None,
        umbrella: str = DEFAULT_UMBRELLA,
    ) -> None:
        self._rules: tuple[SubsectionRule, ...] = (
            DEFAULT_RULES if rules is None else tuple(rules)
        )
        self._umbrella = umbrella

    @property
    def umbrella(self) -> str:
        return self._umbrella

    @property
    def rules(self) -> Sequence[SubsectionRule]:
        return self._rules

    def is_umbrella(self, category: Optional[str]) -> bool:
        return category == self._umbrella

    def classify(self, path: str) -> Optional[str]:
        """Return the name of the first rule owning *path*, or ``None``.

        ``None`` means the description's own primary category should be kept.
        """
        for rule in self._rules:
            if rule.matches(path):
                return rule.name
        return None

    def additional_rules(self) -> list[SubsectionRule]:
        """Rules that add a category, i.e. all but the umbrella's identity rule."""
        return [rule for rule in self._rules if rule.name != self._umbrella]

    def synthetic_resources(self) -> list[Resource]:
        """:meth:`additional_rules` as :class:`~apicatalog.models.Resource` records."""
        return [rule.to_resource() for rule in self.additional_rules()]

    def __repr__(self) -> str:
        return f"SubsectionClassifier(umbrella={self._umbrella!r}, rules={len(self._rules)})"
