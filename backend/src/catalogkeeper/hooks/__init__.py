"""catalogkeeper entity lifecycle hook system.

Provides extension points for logic that runs at specific points in the
entity save/delete lifecycle:
- beforeSave: before a create or update is persisted (can abort)
- beforeDelete: before a delete is persisted (can abort)

Usage:
    from catalogkeeper.hooks import HookPoint, HookRegistry, HookService

    registry = HookRegistry()

    @registry.on("Product", HookPoint.BEFORE_SAVE)
    async def check_category(ctx: HookContext) -> Result[None]:
        ...

    result = await HookService(registry).run_hooks(HookPoint.BEFORE_SAVE, ctx)
"""

from catalogkeeper.hooks.registry import HookRegistry
from catalogkeeper.hooks.service import HookService
from catalogkeeper.hooks.types import HookContext, HookFn, HookPoint

VALID_HOOK_POINTS = tuple(point.value for point in HookPoint)

__all__ = [
    "HookContext",
    "HookFn",
    "HookPoint",
    "HookRegistry",
    "HookService",
    "VALID_HOOK_POINTS",
]
