"""Hook registry for catalogkeeper.

Holds, for each (entity, hook point) pair, the ordered list of hook
functions to run. A registry is created at bootstrap and handed to the
HookService; there is no module-level registry.
"""

from collections.abc import Callable

from catalogkeeper.hooks.types import HookFn, HookPoint


class HookRegistry:
    """Ordered hook lists keyed by entity name and hook point.

    Example:
        registry = HookRegistry()

        @registry.on("Product", HookPoint.BEFORE_SAVE)
        async def check_category(ctx: HookContext) -> Result[None]:
            ...
    """

    def __init__(self) -> None:
        self._hooks: dict[tuple[str, HookPoint], list[HookFn]] = {}

    def register(self, entity_name: str, point: HookPoint, hook_fn: HookFn) -> None:
        """Append a hook to the list for (entity_name, point).

        Idempotent: registering the same function twice for the same pair is
        a no-op, so the declared order is preserved.
        """
        hooks = self._hooks.setdefault((entity_name, point), [])
        if hook_fn in hooks:
            return
        hooks.append(hook_fn)

    def on(self, entity_name: str, point: HookPoint) -> Callable[[HookFn], HookFn]:
        """Decorator form of register()."""

        def decorator(fn: HookFn) -> HookFn:
            self.register(entity_name, point, fn)
            return fn

        return decorator

    def hooks_for(self, entity_name: str, point: HookPoint) -> list[HookFn]:
        """Hooks for the pair, in registration order."""
        return list(self._hooks.get((entity_name, point), []))

    def list_registered(self) -> dict[str, list[str]]:
        """Hook function names per "Entity.point" key, for diagnostics."""
        return {
            f"{entity}.{point.value}": [fn.__name__ for fn in hooks]
            for (entity, point), hooks in sorted(
                self._hooks.items(), key=lambda item: (item[0][0], item[0][1].value)
            )
        }

    def clear(self) -> None:
        self._hooks.clear()
