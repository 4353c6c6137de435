"""Hook execution service for catalogkeeper.

Runs the hooks registered for a lifecycle point sequentially, in
registration order, stopping at the first abort.
"""

import logging

from catalogkeeper.hooks.registry import HookRegistry
from catalogkeeper.hooks.types import HookContext, HookPoint
from catalogkeeper.validation.types import Result, Violation, ViolationKind

logger = logging.getLogger(__name__)


class HookService:
    """Orchestrates hook execution for entity lifecycle events.

    Each hook starts only after the previous one has completed. Once a hook
    aborts, no later hook runs and its violation is returned to the caller.
    """

    def __init__(self, registry: HookRegistry):
        self.registry = registry

    async def run_hooks(self, point: HookPoint, context: HookContext) -> Result[None]:
        """Execute the hooks registered for context.entity_name at point.

        Returns:
            Result.success() if every hook continued, otherwise the failed
            Result of the aborting hook.
        """
        for hook_fn in self.registry.hooks_for(context.entity_name, point):
            name = getattr(hook_fn, "__name__", repr(hook_fn))
            try:
                result = await hook_fn(context)
            except Exception as e:
                logger.warning(
                    "%s hook '%s' on %s raised: %s",
                    point.value, name, context.entity_name, e,
                )
                return Result.failure(
                    Violation(
                        message=f"Hook '{name}' failed: {e}",
                        code="HOOK_FAILED",
                        kind=ViolationKind.INTEGRITY,
                    )
                )

            if result is not None and not result.ok:
                logger.info(
                    "%s hook '%s' aborted %s %s: %s",
                    point.value, name, context.operation.value,
                    context.entity_name, result.violation.message,
                )
                return result

        return Result.success()
