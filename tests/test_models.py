"""Tests for apicatalog.models -- parameter kinds, defaults and tag records."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from apicatalog.models import (
    CatalogConfig,
    HTTPMethod,
    Operation,
    OperationParameter,
    ParameterKind,
    Resource,
    RulesetInconsistency,
    Section,
    SubsectionRule,
    Tag,
)


def _param(kind: ParameterKind, required: bool = False) -> OperationParameter:
    return OperationParameter(name="p", location="query", required=required, kind=kind)


class TestParameterKind:
    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            ({"type": "string"}, ParameterKind.STRING),
            ({"type": "integer", "format": "int32"}, ParameterKind.INTEGER),
            ({"type": "boolean"}, ParameterKind.BOOLEAN),
            ({"type": "number"}, ParameterKind.OTHER),
            ({"type": "array", "items": {"type": "string"}}, ParameterKind.OTHER),
            ({"type": ["integer", "null"]}, ParameterKind.INTEGER),
            ({"type": ["null"]}, ParameterKind.OTHER),
            ({}, ParameterKind.OTHER),
            (None, ParameterKind.OTHER),
        ],
    )
    def test_from_schema(self, schema: object, expected: ParameterKind) -> None:
        assert ParameterKind.from_schema(schema) is expected


class TestParameterDefaults:
    def test_string_gets_empty_string(self) -> None:
        param = _param(ParameterKind.STRING)
        param.apply_default()
        assert param.value == ""

    def test_required_integer_gets_zero(self) -> None:
        param = _param(ParameterKind.INTEGER, required=True)
        param.apply_default()
        assert param.value == 0

    def test_optional_integer_stays_absent(self) -> None:
        param = _param(ParameterKind.INTEGER, required=False)
        param.apply_default()
        assert param.value is None

    def test_boolean_gets_false(self) -> None:
        param = _param(ParameterKind.BOOLEAN)
        param.apply_default()
        assert param.value is False

    def test_other_untouched(self) -> None:
        param = _param(ParameterKind.OTHER)
        param.value = ["kept"]
        param.apply_default()
        assert param.value == ["kept"]

    def test_alias_population(self) -> None:
        param = OperationParameter.model_validate(
            {"name": "page", "in": "query", "schema": {"type": "integer"}}
        )
        assert param.location == "query"
        assert param.schema_ == {"type": "integer"}


class TestOperationDefaults:
    def _operation(self) -> Operation:
        return Operation(
            verb=HTTPMethod.GET,
            path="/products",
            operation_id="Products.List",
            parameters=[
                OperationParameter(name="search", kind=ParameterKind.STRING),
                OperationParameter(name="page", kind=ParameterKind.INTEGER),
                OperationParameter(name="pageSize", required=True, kind=ParameterKind.INTEGER),
                OperationParameter(name="includeInactive", kind=ParameterKind.BOOLEAN),
                OperationParameter(name="filters", kind=ParameterKind.OTHER),
            ],
            categories=["Products"],
        )

    def test_apply_defaults(self) -> None:
        op = self._operation().apply_defaults()
        assert [p.value for p in op.parameters] == ["", None, 0, False, None]
        assert op.defaults_applied is True

    def test_twice_equals_once(self) -> None:
        once = self._operation().apply_defaults()
        twice = self._operation().apply_defaults().apply_defaults()
        assert twice.model_dump() == once.model_dump()

    def test_second_call_keeps_edits(self) -> None:
        op = self._operation().apply_defaults()
        op.parameters[0].value = "red"
        op.apply_defaults()
        assert op.parameters[0].value == "red"

    def test_no_parameters(self) -> None:
        op = Operation(verb=HTTPMethod.GET, path="/me").apply_defaults()
        assert op.parameters == []

    def test_primary_category(self) -> None:
        assert self._operation().primary_category == "Products"
        assert Operation(verb=HTTPMethod.GET, path="/x").primary_category is None

    def test_defaults_flag_not_serialized(self) -> None:
        assert "defaults_applied" not in self._operation().model_dump()


class TestTag:
    def test_section(self) -> None:
        tag = Tag.model_validate({"name": "Me and My Stuff", "x-id": "MeAndMyStuff"})
        assert tag.as_category() == Section(name="Me and My Stuff", id="MeAndMyStuff")

    def test_resource(self) -> None:
        tag = Tag.model_validate(
            {"name": "Me", "description": "Current user", "x-section-id": "MeAndMyStuff"}
        )
        assert tag.as_category() == Resource(
            name="Me", description="Current user", section_id="MeAndMyStuff"
        )

    def test_plain_tag(self) -> None:
        assert Tag(name="Misc").as_category() is None

    def test_both_extensions_rejected(self) -> None:
        with pytest.raises(ValidationError, match="both x-id and x-section-id"):
            Tag.model_validate({"name": "Bad", "x-id": "A", "x-section-id": "B"})


class TestSubsectionRule:
    @pytest.mark.parametrize("key", ["parent_section_id", "parentSectionId", "x-section-id"])
    def test_parent_aliases(self, key: str) -> None:
        rule = SubsectionRule.model_validate(
            {"name": "My Orders", key: "MeAndMyStuff", "paths": ["/me/orders"]}
        )
        assert rule.parent_section_id == "MeAndMyStuff"
        assert rule.paths == ("/me/orders",)

    def test_matches_and_to_resource(self) -> None:
        rule = SubsectionRule(
            name="My Orders", parent_section_id="MeAndMyStuff", paths=("/me/orders",)
        )
        assert rule.matches("/me/orders")
        assert not rule.matches("/me/orders/{orderID}")
        assert rule.to_resource().section_id == "MeAndMyStuff"

    def test_parent_required(self) -> None:
        with pytest.raises(ValidationError):
            SubsectionRule.model_validate({"name": "Orphan", "paths": []})


class TestMisc:
    def test_inconsistency_str(self) -> None:
        problem = RulesetInconsistency(
            umbrella="Me", path="/me/unlisted", verb=HTTPMethod.GET, operation_id="Me.GetUnlisted"
        )
        assert str(problem) == (
            "GET /me/unlisted (Me.GetUnlisted) is tagged 'Me' but matches no subsection rule"
        )

    def test_config_defaults(self) -> None:
        config = CatalogConfig()
        assert config.spec is None
        assert config.umbrella == "Me"
        assert config.ruleset is None
        assert config.strict_ruleset is False
