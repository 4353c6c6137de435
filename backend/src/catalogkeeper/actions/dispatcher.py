"""Action dispatcher for entity operations outside the save/delete pipeline."""

import logging
from collections.abc import Callable
from typing import Any

from catalogkeeper.validation.types import Result, Violation, ViolationKind

logger = logging.getLogger(__name__)

# Action signature: (record, *args, **kwargs) -> Result
ActionFn = Callable[..., Result[Any]]


class ActionDispatcher:
    """Registry and dispatcher of named actions per entity.

    Actions validate their own input and never touch the lifecycle hooks,
    validators or the integrity checker.
    """

    def __init__(self) -> None:
        self._actions: dict[tuple[str, str], ActionFn] = {}

    def register(self, entity_name: str, action: str, fn: ActionFn) -> None:
        """Register an action. Idempotent per (entity_name, action)."""
        self._actions.setdefault((entity_name, action), fn)

    def has_action(self, entity_name: str, action: str) -> bool:
        return (entity_name, action) in self._actions

    def list_actions(self, entity_name: str) -> list[str]:
        return sorted(name for entity, name in self._actions if entity == entity_name)

    def dispatch(
        self,
        entity_name: str,
        action: str,
        record: dict[str, Any],
        *args: Any,
        **kwargs: Any,
    ) -> Result[Any]:
        """Run ``action`` on ``record``; unknown actions are input errors."""
        fn = self._actions.get((entity_name, action))
        if fn is None:
            return Result.failure(
                Violation(
                    message=f"Unknown action '{action}' for {entity_name}",
                    code="UNKNOWN_ACTION",
                    kind=ViolationKind.INPUT,
                )
            )

        result = fn(record, *args, **kwargs)
        if not result.ok:
            logger.info(
                "%s.%s rejected for %s: %s",
                entity_name, action, record.get("id"), result.violation.message,
            )
        return result
