"""Lifecycle hooks enforcing the Category <-> Product relation.

The relation is enforced, never cascaded: a Product may only point at an
existing Category, and a Category with Products cannot be deleted.
"""

from catalogkeeper.hooks.registry import HookRegistry
from catalogkeeper.hooks.types import HookContext, HookFn, HookPoint
from catalogkeeper.integrity.checker import IntegrityChecker
from catalogkeeper.validation.types import Result, Violation, ViolationKind

NONEXISTENT_CATEGORY = "Error adding product to nonexisting category"
CATEGORY_HAS_PRODUCTS = "Error deleting category with products"


def make_product_category_hook(checker: IntegrityChecker) -> HookFn:
    """Build the Product beforeSave hook bound to a checker."""

    async def product_category_exists(ctx: HookContext) -> Result[None]:
        category_id = ctx.record.get(checker.foreign_key)
        if category_id is None or category_id == "":
            return Result.success()

        if not await checker.category_exists(category_id):
            return Result.failure(
                Violation(
                    message=NONEXISTENT_CATEGORY,
                    code="CATEGORY_NOT_FOUND",
                    field=checker.foreign_key,
                    kind=ViolationKind.INTEGRITY,
                )
            )
        return Result.success()

    return product_category_exists


def make_category_products_hook(checker: IntegrityChecker) -> HookFn:
    """Build the Category beforeDelete hook bound to a checker."""

    async def category_has_no_products(ctx: HookContext) -> Result[None]:
        if await checker.has_products(ctx.record["id"]):
            return Result.failure(
                Violation(
                    message=CATEGORY_HAS_PRODUCTS,
                    code="CATEGORY_HAS_PRODUCTS",
                    kind=ViolationKind.INTEGRITY,
                )
            )
        return Result.success()

    return category_has_no_products


def register_integrity_hooks(registry: HookRegistry, checker: IntegrityChecker) -> None:
    """Attach the relation hooks to their (entity, hook point) pairs."""
    registry.register(
        checker.child_entity, HookPoint.BEFORE_SAVE, make_product_category_hook(checker)
    )
    registry.register(
        checker.parent_entity,
        HookPoint.BEFORE_DELETE,
        make_category_products_hook(checker),
    )
