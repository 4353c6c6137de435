"""Entity lifecycle coordinator.

Lifecycle of a save (create/update):
1. beforeSave hooks, sequential; the first abort rejects the operation
2. Field validators and async validators, run together; any violation
   rejects the operation
3. Persist

Lifecycle of a delete:
1. beforeDelete hooks (validators do not run on delete)
2. Persist

A rejected operation never reaches the adapter, so stored state is left
exactly as it was. Operations on one lifecycle run one at a time: the
checks a save or delete relies on (a category exists, a category has no
products) still hold when it commits.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catalogkeeper.actions.dispatcher import ActionDispatcher
from catalogkeeper.hooks.service import HookService
from catalogkeeper.hooks.types import HookContext, HookPoint
from catalogkeeper.metadata.loader import EntityModel, MetadataLoader
from catalogkeeper.persistence.adapter import PersistenceAdapter
from catalogkeeper.validation.services import ValidationService
from catalogkeeper.validation.types import (
    Operation,
    Result,
    ValidationContext,
    Violation,
    ViolationKind,
)

logger = logging.getLogger(__name__)


class OperationState(Enum):
    PENDING = "pending"
    HOOKING = "hooking"
    VALIDATING = "validating"
    COMMITTED = "committed"
    REJECTED = "rejected"


TERMINAL_STATES = (OperationState.COMMITTED, OperationState.REJECTED)


@dataclass
class OperationRecord:
    """State of one create/update/delete as it moves through the pipeline."""

    entity_name: str
    operation: Operation
    state: OperationState = OperationState.PENDING
    history: list[OperationState] = field(
        default_factory=lambda: [OperationState.PENDING]
    )
    violations: list[Violation] = field(default_factory=list)

    def advance(self, state: OperationState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(
                f"{self.operation.value} {self.entity_name} already {self.state.value}"
            )
        self.state = state
        self.history.append(state)

    def reject(self, result: Result[Any]) -> Result[Any]:
        self.violations = list(result.violations)
        self.advance(OperationState.REJECTED)
        return result


def _not_found(entity: EntityModel, id: str) -> Result[Any]:
    return Result.failure(
        Violation(
            message=f"{entity.display_name} {id} not found",
            code="NOT_FOUND",
            kind=ViolationKind.INPUT,
        )
    )


class EntityLifecycle:
    """Coordinates hooks, validation and persistence for every entity operation.

    All collaborators are passed in; see catalogkeeper.bootstrap for the
    standard wiring.

    ``last_operation`` is the OperationRecord of the most recently started
    create, update or delete. It is kept for diagnostics; the Result returned
    by each call is the authoritative outcome.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        metadata_loader: MetadataLoader,
        validation_service: ValidationService,
        hook_service: HookService,
        action_dispatcher: ActionDispatcher,
    ):
        self.adapter = adapter
        self.metadata_loader = metadata_loader
        self.validation_service = validation_service
        self.hook_service = hook_service
        self.action_dispatcher = action_dispatcher
        self.last_operation: OperationRecord | None = None
        # Held from the first hook to the commit of each create/update/delete
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Pipeline entry points
    # -------------------------------------------------------------------------

    def validate_fields(
        self,
        entity_kind: str,
        candidate: dict[str, Any],
        operation: Operation = Operation.CREATE,
        original: dict[str, Any] | None = None,
    ) -> list[Violation]:
        """Run the entity's field validators and return every violation."""
        return self.validation_service.validate_fields(
            ValidationContext(entity_kind, candidate, operation, original)
        )

    async def validate_async(
        self,
        entity_kind: str,
        candidate: dict[str, Any],
        operation: Operation = Operation.CREATE,
        original: dict[str, Any] | None = None,
    ) -> Result[None]:
        """Run the entity's async validators; returns once all have settled."""
        return await self.validation_service.validate_async(
            ValidationContext(entity_kind, candidate, operation, original)
        )

    async def run_hooks(
        self,
        entity_kind: str,
        event: HookPoint | str,
        context: HookContext,
    ) -> Result[None]:
        """Run the hooks registered for (entity_kind, event)."""
        point = event if isinstance(event, HookPoint) else HookPoint(event)
        if context.entity_name != entity_kind:
            raise ValueError(
                f"Hook context is for {context.entity_name}, not {entity_kind}"
            )
        return await self.hook_service.run_hooks(point, context)

    def buy(self, entity: dict[str, Any], quantity: Any) -> Result[dict[str, str]]:
        """Buy ``quantity`` units of a Product record."""
        return self.action_dispatcher.dispatch("Product", "buy", entity, quantity)

    # -------------------------------------------------------------------------
    # Persistence operations
    # -------------------------------------------------------------------------

    async def create(self, entity_kind: str, data: dict[str, Any]) -> Result[dict[str, Any]]:
        """Create a record after hooks and validation pass."""
        entity = self.metadata_loader.require_entity(entity_kind)

        async with self._operation(entity, Operation.CREATE) as op:
            candidate = self._candidate(entity, data)
            if not candidate.ok:
                return op.reject(candidate)
            record = candidate.value

            checked = await self._check_save(op, entity, record, original=None)
            if not checked.ok:
                return op.reject(checked)

            saved = self.adapter.create(entity, record)
            op.advance(OperationState.COMMITTED)
            return Result.success(saved)

    async def update(
        self, entity_kind: str, id: str, data: dict[str, Any]
    ) -> Result[dict[str, Any]]:
        """Apply ``data`` to a stored record after hooks and validation pass."""
        entity = self.metadata_loader.require_entity(entity_kind)

        async with self._operation(entity, Operation.UPDATE) as op:
            original = self.adapter.get(entity, id)
            if original is None:
                return op.reject(_not_found(entity, id))

            candidate = self._candidate(entity, data)
            if not candidate.ok:
                return op.reject(candidate)
            record = {**original, **candidate.value, entity.primary_key: id}

            checked = await self._check_save(op, entity, record, original=original)
            if not checked.ok:
                return op.reject(checked)

            saved = self.adapter.update(entity, id, record)
            op.advance(OperationState.COMMITTED)
            return Result.success(saved)

    async def delete(self, entity_kind: str, id: str) -> Result[dict[str, Any]]:
        """Delete a stored record after the beforeDelete hooks pass."""
        entity = self.metadata_loader.require_entity(entity_kind)

        async with self._operation(entity, Operation.DELETE) as op:
            record = self.adapter.get(entity, id)
            if record is None:
                return op.reject(_not_found(entity, id))

            op.advance(OperationState.HOOKING)
            ctx = HookContext(entity.name, Operation.DELETE, dict(record))
            hooked = await self.hook_service.run_hooks(HookPoint.BEFORE_DELETE, ctx)
            if not hooked.ok:
                return op.reject(hooked)

            self.adapter.delete(entity, id)
            op.advance(OperationState.COMMITTED)
            return Result.success(record)

    def get(self, entity_kind: str, id: str) -> dict[str, Any] | None:
        entity = self.metadata_loader.require_entity(entity_kind)
        return self.adapter.get(entity, id)

    def list_records(
        self, entity_kind: str, filter: dict | None = None
    ) -> list[dict[str, Any]]:
        entity = self.metadata_loader.require_entity(entity_kind)
        sort = [{"field": entity.primary_key}]
        return self.adapter.query(entity, filter=filter, sort=sort)["data"]

    def close(self) -> None:
        self.adapter.close()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _check_save(
        self,
        op: OperationRecord,
        entity: EntityModel,
        record: dict[str, Any],
        original: dict[str, Any] | None,
    ) -> Result[None]:
        op.advance(OperationState.HOOKING)
        hook_ctx = HookContext(entity.name, op.operation, record, original)
        hooked = await self.hook_service.run_hooks(HookPoint.BEFORE_SAVE, hook_ctx)
        if not hooked.ok:
            return hooked

        op.advance(OperationState.VALIDATING)
        return await self.validation_service.validate(
            ValidationContext(entity.name, hook_ctx.record, op.operation, original)
        )

    def _candidate(
        self, entity: EntityModel, data: dict[str, Any]
    ) -> Result[dict[str, Any]]:
        """Copy caller data, dropping the primary key and rejecting unknown fields."""
        unknown = [key for key in data if key not in entity.field_names]
        if unknown:
            return Result.failure(*[
                Violation(
                    message=f"Unknown field '{key}' on {entity.name}",
                    code="UNKNOWN_FIELD",
                    field=key,
                    kind=ViolationKind.INPUT,
                )
                for key in unknown
            ])
        return Result.success(
            {key: value for key, value in data.items() if key != entity.primary_key}
        )

    @asynccontextmanager
    async def _operation(
        self, entity: EntityModel, operation: Operation
    ) -> AsyncIterator[OperationRecord]:
        """Scope one operation; it always ends COMMITTED or REJECTED.

        The lifecycle lock is held for the whole scope, so hooks, validation
        and the commit of one operation never interleave with another.
        """
        async with self._lock:
            op = OperationRecord(entity.name, operation)
            self.last_operation = op
            try:
                yield op
            finally:
                if op.state not in TERMINAL_STATES:
                    op.advance(OperationState.REJECTED)
                    logger.warning(
                        "%s %s aborted by an error", operation.value, entity.name
                    )
                elif op.state == OperationState.REJECTED:
                    logger.info(
                        "%s %s rejected: %s",
                        operation.value,
                        entity.name,
                        "; ".join(v.message for v in op.violations),
                    )
                else:
                    logger.debug("%s %s committed", operation.value, entity.name)
