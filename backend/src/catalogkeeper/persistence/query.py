"""QueryService implementation over a PersistenceAdapter.

Bridges the validation filter format used by validators and the integrity
checker to the adapter's filter format.
"""

from typing import Any

from catalogkeeper.metadata.loader import MetadataLoader
from catalogkeeper.persistence.adapter import PersistenceAdapter


class AdapterQueryService:
    """QueryService that reads straight from a PersistenceAdapter.

    Every call hits the adapter; nothing is cached, so checks always see
    the state of storage at call time.
    """

    def __init__(self, adapter: PersistenceAdapter, metadata_loader: MetadataLoader):
        self.adapter = adapter
        self.metadata_loader = metadata_loader

    def count_now(self, entity: str, filter: dict[str, Any]) -> int:
        """Count records matching the filter, synchronously."""
        entity_model = self.metadata_loader.require_entity(entity)
        return self.adapter.count(entity_model, self._convert_filter(filter))

    async def count(self, entity: str, filter: dict[str, Any]) -> int:
        """Count records matching the filter."""
        return self.count_now(entity, filter)

    async def exists(self, entity: str, filter: dict[str, Any]) -> bool:
        """Check if any record matches the filter."""
        return await self.count(entity, filter) > 0

    async def query(self, entity: str, filter: dict[str, Any]) -> list[dict[str, Any]]:
        """Query records matching the filter."""
        entity_model = self.metadata_loader.require_entity(entity)
        result = self.adapter.query(entity_model, filter=self._convert_filter(filter))
        return result.get("data", [])

    async def get_setting(self, key: str) -> Any:
        """Read a persisted configuration value."""
        return self.adapter.get_setting(key)

    def _convert_filter(self, filter: dict[str, Any] | None) -> dict[str, Any] | None:
        """Convert validation filter format to persistence filter format.

        Validation format: {"and": [{"field": "x", "op": "eq", "value": "y"}]}
        Persistence format: {"operator": "and", "conditions": [...]}
        """
        if not filter:
            return None

        operator = "or" if "or" in filter else "and"
        conditions = [
            {
                "field": cond.get("field"),
                "operator": cond.get("op"),
                "value": cond.get("value"),
            }
            for cond in filter.get(operator, [])
        ]

        if not conditions:
            return None

        return {"operator": operator, "conditions": conditions}
