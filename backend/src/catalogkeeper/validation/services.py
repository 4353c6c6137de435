"""Validation service for catalogkeeper.

Runs the two validator sets of an entity:
1. Field validators: synchronous, every one runs (batch reporting)
2. Async validators: started as independent tasks, each running up to its
   first await before the field pass, and all awaited before a verdict is
   returned (fan-out/fan-in)
"""

import asyncio
import logging
from typing import Any

from catalogkeeper.metadata.loader import (
    EntityModel,
    MetadataLoader,
    ValidatorConfig,
)
from catalogkeeper.validation.registry import ValidatorRegistry
from catalogkeeper.validation.types import (
    AsyncValidator,
    FieldValidator,
    Operation,
    QueryService,
    Result,
    ValidationContext,
    ValidatorDefinition,
    Violation,
    ViolationKind,
)
from catalogkeeper.validation.validators.field_constraints import (
    generate_field_validators,
)

logger = logging.getLogger(__name__)


def validator_config_to_definition(config: ValidatorConfig) -> ValidatorDefinition:
    """Convert metadata ValidatorConfig to validation ValidatorDefinition."""
    return ValidatorDefinition(
        type=config.type,
        params=config.params,
        message=config.message,
        code=config.code,
        on=[Operation(op) for op in config.on],
    )


class ValidationService:
    """Service for running field and async validation for an entity.

    Validator instances are built from entity metadata on each call and
    filtered to the current operation, so nothing is cached between
    operations.
    """

    def __init__(
        self,
        query_service: QueryService,
        registry: ValidatorRegistry,
        metadata_loader: MetadataLoader,
    ):
        self.query_service = query_service
        self.registry = registry
        self.metadata_loader = metadata_loader

    # -------------------------------------------------------------------------
    # Validator sets
    # -------------------------------------------------------------------------

    def field_validators(
        self, entity: EntityModel, operation: Operation
    ) -> list[FieldValidator]:
        """Field constraint validators plus synchronous metadata validators."""
        validators: list[Any] = list(generate_field_validators(entity.fields))
        validators.extend(self._create_validators(entity.validators, operation))
        return validators

    def async_validators(
        self, entity: EntityModel, operation: Operation
    ) -> list[AsyncValidator]:
        return self._create_validators(entity.async_validators, operation)

    def _create_validators(
        self,
        configs: list[ValidatorConfig],
        operation: Operation,
    ) -> list[Any]:
        """Create validator instances, keeping those that apply to the operation."""
        validators = []
        for config in configs:
            definition = validator_config_to_definition(config)
            if operation not in definition.on:
                continue
            validators.append(self.registry.create(definition))
        return validators

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_fields(self, ctx: ValidationContext) -> list[Violation]:
        """Run every field validator and return all violations found.

        Calling this twice on an unchanged candidate (and unchanged storage)
        yields identical lists.
        """
        entity = self.metadata_loader.require_entity(ctx.entity_name)
        violations: list[Violation] = []

        for validator in self.field_validators(entity, ctx.operation):
            try:
                violations.extend(validator.validate(ctx, self.query_service))
            except Exception as e:
                logger.warning(
                    "Field validator %s failed on %s: %s",
                    type(validator).__name__, ctx.entity_name, e,
                )
                violations.append(
                    Violation(
                        message=f"Field validator error: {e}",
                        code="FIELD_VALIDATOR_ERROR",
                        kind=ViolationKind.FIELD,
                    )
                )

        return violations

    async def validate_async(self, ctx: ValidationContext) -> Result[None]:
        """Run all async validators concurrently and wait for every one to settle."""
        entity = self.metadata_loader.require_entity(ctx.entity_name)
        validators = self.async_validators(entity, ctx.operation)
        violations = await self._settle(
            validators, self._start(validators, ctx), ctx
        )
        if violations:
            return Result.failure(*violations)
        return Result.success()

    async def validate(self, ctx: ValidationContext) -> Result[None]:
        """Run both validator sets for one operation.

        Async validators are started as tasks and given one turn of the event
        loop, so each runs up to its first suspension point before the
        synchronous field pass. Both sets settle before the verdict is returned.
        """
        entity = self.metadata_loader.require_entity(ctx.entity_name)
        validators = self.async_validators(entity, ctx.operation)
        tasks = self._start(validators, ctx)
        try:
            if tasks:
                await asyncio.sleep(0)
            field_violations = self.validate_fields(ctx)
        finally:
            # Drain async work on every exit path
            async_violations = await self._settle(validators, tasks, ctx)

        violations = field_violations + async_violations
        if violations:
            return Result.failure(*violations)
        return Result.success()

    def _start(
        self,
        validators: list[AsyncValidator],
        ctx: ValidationContext,
    ) -> list[asyncio.Future]:
        return [
            asyncio.ensure_future(v.validate(ctx, self.query_service))
            for v in validators
        ]

    async def _settle(
        self,
        validators: list[AsyncValidator],
        tasks: list[asyncio.Future],
        ctx: ValidationContext,
    ) -> list[Violation]:
        if not tasks:
            return []

        results = await asyncio.gather(*tasks, return_exceptions=True)

        violations: list[Violation] = []
        for validator, result in zip(validators, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                # Cancellation is not a verdict
                raise result
            if isinstance(result, Exception):
                logger.warning(
                    "Async validator %s failed on %s: %s",
                    type(validator).__name__, ctx.entity_name, result,
                )
                violations.append(
                    Violation(
                        message=f"Validator error: {result}",
                        code="VALIDATOR_ERROR",
                        kind=ViolationKind.ASYNC,
                    )
                )
            else:
                violations.extend(result)
        return violations
