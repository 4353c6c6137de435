"""Entity actions that run outside the persistence pipeline."""

from catalogkeeper.actions.dispatcher import ActionDispatcher
from catalogkeeper.actions.product import buy, valid_quantity


def register_builtin_actions(dispatcher: ActionDispatcher) -> None:
    """Register the actions shipped with catalogkeeper."""
    dispatcher.register("Product", "buy", buy)


__all__ = [
    "ActionDispatcher",
    "buy",
    "register_builtin_actions",
    "valid_quantity",
]
