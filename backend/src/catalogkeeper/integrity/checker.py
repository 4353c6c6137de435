"""Referential integrity queries for the Category <-> Product relation."""

from catalogkeeper.validation.types import QueryService


class IntegrityChecker:
    """Read-only relation queries against the persistence collaborator.

    Each query goes to storage at call time; results are never cached.
    """

    def __init__(
        self,
        query: QueryService,
        parent_entity: str = "Category",
        child_entity: str = "Product",
        foreign_key: str = "categoryId",
    ):
        self.query = query
        self.parent_entity = parent_entity
        self.child_entity = child_entity
        self.foreign_key = foreign_key

    async def category_exists(self, category_id: str) -> bool:
        """True iff a Category with this id is currently stored."""
        matches = await self.query.count(
            self.parent_entity,
            {"and": [{"field": "id", "op": "eq", "value": category_id}]},
        )
        return matches > 0

    async def has_products(self, category_id: str) -> bool:
        """True iff at least one Product currently references the Category."""
        matches = await self.query.count(
            self.child_entity,
            {"and": [{"field": self.foreign_key, "op": "eq", "value": category_id}]},
        )
        return matches > 0
