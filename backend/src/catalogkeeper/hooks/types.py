"""Hook system types for catalogkeeper.

Defines the data structures for the entity lifecycle hook system:
- HookPoint: the lifecycle events hooks attach to
- HookContext: runtime state passed to hook functions

Hooks report their outcome with the shared Result type: Result.success()
(or None) continues the pipeline, Result.failure(...) aborts it.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from catalogkeeper.validation.types import Operation, Result


class HookPoint(Enum):
    """Lifecycle events a hook can be attached to."""

    BEFORE_SAVE = "beforeSave"
    BEFORE_DELETE = "beforeDelete"


@dataclass
class HookContext:
    """Runtime context passed to every hook function.

    Attributes:
        entity_name: Name of the entity being operated on
        operation: The current operation (create, update, delete)
        record: The in-flight record (candidate state for saves, stored
            state for deletes)
        original: Stored state before an update, None otherwise
    """

    entity_name: str
    operation: Operation
    record: dict[str, Any]
    original: dict[str, Any] | None = None

    @property
    def is_new(self) -> bool:
        """True when the record is being inserted rather than updated."""
        return self.operation == Operation.CREATE


# Hook function signature: async (HookContext) -> Result | None
HookFn = Callable[[HookContext], Awaitable[Result[None] | None]]
