"""PersistenceAdapter Protocol: the interface the lifecycle persists through."""

from typing import Any, Protocol, runtime_checkable

from catalogkeeper.metadata.loader import EntityModel


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Matches the public API of SQLiteAdapter. The adapter is the single
    source of truth for existence, uniqueness and relation queries.
    """

    conn: Any

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_entity(self, entity: EntityModel) -> None: ...

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]: ...

    def get(self, entity: EntityModel, id: str) -> dict[str, Any] | None: ...

    def update(
        self, entity: EntityModel, id: str, data: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete(self, entity: EntityModel, id: str) -> bool: ...

    def query(
        self,
        entity: EntityModel,
        filter: dict | None = None,
        sort: list[dict] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> dict[str, Any]: ...

    def count(self, entity: EntityModel, filter: dict | None = None) -> int: ...

    def get_setting(self, key: str) -> str | None: ...

    def set_setting(self, key: str, value: Any) -> None: ...
