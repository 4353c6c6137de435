"""Tests for field constraint and canned validators."""

import re

import pytest
from unittest.mock import AsyncMock, MagicMock

from catalogkeeper.metadata.loader import FieldDefinition, MetadataLoader, ValidationRules
from catalogkeeper.validation.registry import ValidatorRegistry
from catalogkeeper.validation.types import (
    Operation,
    ValidationContext,
    ValidatorDefinition,
    ViolationKind,
)
from catalogkeeper.validation.validators import (
    FieldConstraintValidator,
    MinimalPriceValidator,
    UniqueValidator,
    generate_field_validators,
    register_canned_validators,
)


@pytest.fixture
def product():
    return MetadataLoader().load_all().require_entity("Product")


@pytest.fixture
def registry():
    registry = ValidatorRegistry()
    register_canned_validators(registry)
    return registry


@pytest.fixture
def mock_query():
    """QueryService double: nothing stored, floor of 99."""
    query = MagicMock()
    query.count_now = MagicMock(return_value=0)
    query.get_setting = AsyncMock(return_value="99")
    return query


def _ctx(record, operation=Operation.CREATE):
    return ValidationContext(entity_name="Product", record=record, operation=operation)


def _validator_for(entity, field_name):
    return FieldConstraintValidator(field=entity.get_field(field_name))


# =============================================================================
# Field constraints
# =============================================================================


class TestNameLength:
    @pytest.mark.parametrize("name", ["a", "ab", "xy"])
    def test_short_names_fail(self, product, mock_query, name):
        violations = _validator_for(product, "name").validate(_ctx({"name": name}), mock_query)

        assert [v.message for v in violations] == ["Name should be at least three characters"]
        assert violations[0].code == "MIN_LENGTH"
        assert violations[0].field == "name"
        assert violations[0].kind == ViolationKind.FIELD

    @pytest.mark.parametrize("name", ["abc", "widget-1", "a much longer product name"])
    def test_names_of_three_or_more_pass(self, product, mock_query, name):
        assert _validator_for(product, "name").validate(_ctx({"name": name}), mock_query) == []

    def test_missing_name_only_reports_required(self, product, mock_query):
        violations = _validator_for(product, "name").validate(_ctx({}), mock_query)

        assert [v.code for v in violations] == ["REQUIRED"]
        assert violations[0].message == "Name is required"

    def test_blank_name_is_missing(self, product, mock_query):
        violations = _validator_for(product, "name").validate(_ctx({"name": "   "}), mock_query)
        assert [v.code for v in violations] == ["REQUIRED"]


class TestPriceFormat:
    @pytest.mark.parametrize("price", ["abc", "-5", "1.5", -5, 1.5, "12a", True, "150\n", "150 "])
    def test_non_digit_prices_fail(self, product, mock_query, price):
        violations = _validator_for(product, "price").validate(_ctx({"price": price}), mock_query)

        assert [v.message for v in violations] == ["Price should be a positive integer"]
        assert violations[0].code == "PATTERN_MISMATCH"

    @pytest.mark.parametrize("price", [0, 99, 150, "150", "007"])
    def test_digit_prices_pass(self, product, mock_query, price):
        assert _validator_for(product, "price").validate(_ctx({"price": price}), mock_query) == []


class TestFieldConstraintDefaults:
    def test_default_messages_use_display_name(self, mock_query):
        field = FieldDefinition(
            name="sku",
            type="string",
            display_name="SKU",
            validation=ValidationRules(min_length=4, max_length=6, pattern=r"^[A-Z]+$"),
        )
        validator = FieldConstraintValidator(field=field)

        short = validator.validate(_ctx({"sku": "ab"}), mock_query)
        long = validator.validate(_ctx({"sku": "ABCDEFGH"}), mock_query)

        assert [v.message for v in short] == [
            "SKU must be at least 4 characters",
            "SKU format is invalid",
        ]
        assert [v.code for v in long] == ["MAX_LENGTH"]

    def test_optional_empty_field_passes(self, mock_query):
        field = FieldDefinition(
            name="sku",
            type="string",
            display_name="SKU",
            validation=ValidationRules(min_length=4),
        )
        assert FieldConstraintValidator(field=field).validate(_ctx({}), mock_query) == []

    def test_invalid_pattern_raises(self, mock_query):
        field = FieldDefinition(
            name="sku",
            type="string",
            display_name="SKU",
            validation=ValidationRules(pattern="[unclosed"),
        )
        with pytest.raises(re.error):
            FieldConstraintValidator(field=field).validate(_ctx({"sku": "x"}), mock_query)

    def test_generate_skips_fields_without_rules(self, product):
        validators = generate_field_validators(product.fields)
        assert [v.field.name for v in validators] == ["name", "price"]


# =============================================================================
# Unique
# =============================================================================


class TestUniqueValidator:
    def _validator(self, registry):
        return registry.create(
            ValidatorDefinition(
                type="unique",
                params={"fields": ["name"]},
                message="Name already exists",
                code="DUPLICATE_NAME",
            )
        )

    def test_factory_builds_unique_validator(self, registry):
        assert isinstance(self._validator(registry), UniqueValidator)

    def test_duplicate_fails(self, registry, mock_query):
        mock_query.count_now.return_value = 1

        violations = self._validator(registry).validate(_ctx({"name": "widget-1"}), mock_query)

        assert [v.message for v in violations] == ["Name already exists"]
        assert violations[0].field == "name"
        mock_query.count_now.assert_called_once_with(
            "Product",
            {"and": [{"field": "name", "op": "eq", "value": "widget-1"}]},
        )

    def test_unique_passes(self, registry, mock_query):
        assert self._validator(registry).validate(_ctx({"name": "widget-1"}), mock_query) == []

    def test_update_excludes_own_record(self, registry, mock_query):
        ctx = _ctx({"id": "PRD-00001", "name": "widget-1"}, Operation.UPDATE)

        self._validator(registry).validate(ctx, mock_query)

        _, filter = mock_query.count_now.call_args.args
        assert {"field": "id", "op": "neq", "value": "PRD-00001"} in filter["and"]

    def test_missing_value_is_not_checked(self, registry, mock_query):
        assert self._validator(registry).validate(_ctx({}), mock_query) == []
        mock_query.count_now.assert_not_called()

    def test_factory_defaults(self, registry):
        validator = registry.create(ValidatorDefinition(type="unique", params={"fields": "sku"}))
        assert validator.params.fields == ["sku"]
        assert validator.message == "sku already exists"
        assert validator.code == "DUPLICATE_VALUE"


# =============================================================================
# Minimal price
# =============================================================================


class TestMinimalPriceValidator:
    @pytest.fixture
    def validator(self, registry):
        return registry.create(
            ValidatorDefinition(type="minimalPrice", params={"field": "price"})
        )

    def test_factory_builds_minimal_price_validator(self, validator):
        assert isinstance(validator, MinimalPriceValidator)
        assert validator.setting == "minimalPrice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [0, 50, 98, "98"])
    async def test_below_floor_fails(self, validator, mock_query, price):
        violations = await validator.validate(_ctx({"price": price}), mock_query)

        assert [v.message for v in violations] == [
            "Price should be higher than the minimal price in the db"
        ]
        assert violations[0].kind == ViolationKind.ASYNC
        assert violations[0].code == "PRICE_BELOW_MINIMUM"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [99, 150, "1000"])
    async def test_at_or_above_floor_passes(self, validator, mock_query, price):
        assert await validator.validate(_ctx({"price": price}), mock_query) == []

    @pytest.mark.asyncio
    async def test_floor_is_read_on_every_call(self, validator, mock_query):
        await validator.validate(_ctx({"price": 150}), mock_query)
        mock_query.get_setting.return_value = "200"
        violations = await validator.validate(_ctx({"price": 150}), mock_query)

        assert len(violations) == 1
        assert mock_query.get_setting.await_count == 2

    @pytest.mark.asyncio
    async def test_non_numeric_price_is_left_to_field_validators(self, validator, mock_query):
        assert await validator.validate(_ctx({"price": "abc"}), mock_query) == []
        mock_query.get_setting.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_floor_means_no_floor(self, validator, mock_query):
        mock_query.get_setting.return_value = None
        assert await validator.validate(_ctx({"price": 1}), mock_query) == []


# =============================================================================
# Registry
# =============================================================================


class TestValidatorRegistry:
    def test_canned_types_registered(self, registry):
        assert registry.list_registered() == ["minimalPrice", "unique"]
        assert registry.is_registered("unique")

    def test_unknown_type_raises(self, registry):
        with pytest.raises(ValueError, match="not registered"):
            registry.create(ValidatorDefinition(type="nope"))

    def test_register_is_idempotent(self, registry):
        sentinel = object()
        registry.register_factory("unique", lambda definition: sentinel)

        assert registry.create(
            ValidatorDefinition(type="unique", params={"fields": ["name"]})
        ) is not sentinel

    def test_definition_from_dict(self):
        definition = ValidatorDefinition.from_dict(
            {"type": "unique", "params": {"fields": ["name"]}, "on": "create"}
        )
        assert definition.on == [Operation.CREATE]
