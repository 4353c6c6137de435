"""Canned validators for catalogkeeper.

These are declared in entity metadata and configured via parameters.

Available validators:
- unique: field(s) must be unique across stored records (synchronous)
- minimalPrice: numeric field must reach a floor read from persisted
  settings (asynchronous)
"""

import logging
from dataclasses import dataclass
from typing import Any

from catalogkeeper.validation.registry import ValidatorRegistry
from catalogkeeper.validation.types import (
    Operation,
    QueryService,
    ValidationContext,
    ValidatorDefinition,
    Violation,
    ViolationKind,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Unique Validator
# =============================================================================


@dataclass
class UniqueParams:
    fields: list[str]


class UniqueValidator:
    """The combination of ``params.fields`` may appear on one stored record only.

    Runs synchronously against storage; on update the record's own row is
    excluded so saving an unchanged name is not a duplicate.
    """

    def __init__(self, params: UniqueParams, message: str, code: str):
        self.params = params
        self.message = message
        self.code = code

    def validate(
        self,
        ctx: ValidationContext,
        query: QueryService,
    ) -> list[Violation]:
        values = {name: ctx.record.get(name) for name in self.params.fields}
        if any(value is None for value in values.values()):
            return []

        conditions = [
            {"field": name, "op": "eq", "value": value} for name, value in values.items()
        ]
        own_id = ctx.record.get("id")
        if ctx.operation == Operation.UPDATE and own_id:
            conditions.append({"field": "id", "op": "neq", "value": own_id})

        if query.count_now(ctx.entity_name, {"and": conditions}) == 0:
            return []
        return [
            Violation(
                message=self.message,
                code=self.code,
                field=self.params.fields[0],
                kind=ViolationKind.FIELD,
            )
        ]


def _unique_factory(definition: ValidatorDefinition) -> UniqueValidator:
    raw = definition.params.get("fields", [])
    fields = [raw] if isinstance(raw, str) else list(raw)
    return UniqueValidator(
        params=UniqueParams(fields=fields),
        message=definition.message or f"{', '.join(fields)} already exists",
        code=definition.code or "DUPLICATE_VALUE",
    )


# =============================================================================
# Minimal Price Validator
# =============================================================================


class MinimalPriceValidator:
    """Validates a numeric field against a floor stored in persisted settings.

    The floor is read from settings on every call.

    Params:
        field: The field to check (default "price")
        setting: The settings key holding the floor (default "minimalPrice")
    """

    def __init__(self, field: str, setting: str, message: str, code: str):
        self.field = field
        self.setting = setting
        self.message = message
        self.code = code

    async def validate(
        self,
        ctx: ValidationContext,
        query: QueryService,
    ) -> list[Violation]:
        price = _as_number(ctx.record.get(self.field))
        if price is None:
            # Missing or malformed values are reported by the field validators
            return []

        floor = _as_number(await query.get_setting(self.setting))
        if floor is None:
            logger.warning(
                "Setting '%s' is not configured; %s.%s has no floor",
                self.setting, ctx.entity_name, self.field,
            )
            return []

        if price < floor:
            return [
                Violation(
                    message=self.message,
                    code=self.code,
                    field=self.field,
                    kind=ViolationKind.ASYNC,
                )
            ]
        return []


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _minimal_price_factory(definition: ValidatorDefinition) -> MinimalPriceValidator:
    return MinimalPriceValidator(
        field=definition.params.get("field", "price"),
        setting=definition.params.get("setting", "minimalPrice"),
        message=definition.message
        or "Price should be higher than the minimal price in the db",
        code=definition.code or "PRICE_BELOW_MINIMUM",
    )


# =============================================================================
# Registration
# =============================================================================


def register_canned_validators(registry: ValidatorRegistry) -> None:
    """Register all canned validators with the given registry."""
    registry.register_factory("unique", _unique_factory)
    registry.register_factory("minimalPrice", _minimal_price_factory)
