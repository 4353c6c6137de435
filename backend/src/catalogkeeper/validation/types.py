"""Core types for the catalogkeeper validation pipeline.

Every check in the pipeline (field validators, async validators, lifecycle
hooks, actions) reports its outcome through the same types:
- Violation: a typed, human-readable reason an operation was rejected
- Result: a success value or a list of violations
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")


class Operation(Enum):
    """The type of operation being validated."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ViolationKind(Enum):
    """Which part of the pipeline produced a violation.

    FIELD: shape, format or uniqueness failure of a single field
    ASYNC: failure that depends on external state (e.g. price floor)
    INTEGRITY: relation constraint failure between entities
    INPUT: malformed operation input (e.g. invalid quantity)
    """

    FIELD = "field"
    ASYNC = "async"
    INTEGRITY = "integrity"
    INPUT = "input"


@dataclass(frozen=True)
class Violation:
    """A single reason an operation was rejected.

    Attributes:
        message: Human-readable reason
        code: Machine-readable code (e.g., "MIN_LENGTH")
        field: Field name this violation relates to, or None for entity-level
        kind: Pipeline stage that produced the violation
    """

    message: str
    code: str
    field: str | None = None
    kind: ViolationKind = ViolationKind.FIELD

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "field": self.field,
            "kind": self.kind.value,
        }


class OperationRejected(Exception):
    """Raised by Result.unwrap() when the result carries violations."""

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations))


@dataclass
class Result(Generic[T]):
    """Outcome of a pipeline step: a value, or the violations that rejected it."""

    value: T | None = None
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def violation(self) -> Violation | None:
        """The first violation, which is the reason reported to callers."""
        return self.violations[0] if self.violations else None

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, *violations: Violation) -> "Result[T]":
        if not violations:
            raise ValueError("A failed Result needs at least one violation")
        return cls(violations=list(violations))

    def unwrap(self) -> T | None:
        """Return the value, raising OperationRejected if the result failed."""
        if self.violations:
            raise OperationRejected(self.violations)
        return self.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "value": self.value,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass
class ValidationContext:
    """Context passed to validators during validation.

    Attributes:
        entity_name: Name of the entity being validated
        record: The candidate state being validated
        operation: CREATE or UPDATE
        original_record: For UPDATE, the stored record; None for CREATE
    """

    entity_name: str
    record: dict[str, Any]
    operation: Operation = Operation.CREATE
    original_record: dict[str, Any] | None = None


class QueryService(Protocol):
    """Read-only access to the persistence collaborator.

    Filters use the form {"and": [{"field": "x", "op": "eq", "value": "y"}]}.
    Every call goes to storage; implementations must not cache results.
    """

    def count_now(self, entity: str, filter: dict[str, Any]) -> int:
        """Count matching records synchronously (used by field validators)."""
        ...

    async def count(self, entity: str, filter: dict[str, Any]) -> int:
        """Count records matching the filter."""
        ...

    async def exists(self, entity: str, filter: dict[str, Any]) -> bool:
        """Check if any record matches the filter."""
        ...

    async def get_setting(self, key: str) -> Any:
        """Read a persisted configuration value, or None when unset."""
        ...


class FieldValidator(Protocol):
    """Synchronous validator over a candidate record."""

    def validate(
        self,
        ctx: ValidationContext,
        query: QueryService,
    ) -> list[Violation]:
        ...


class AsyncValidator(Protocol):
    """Validator that must consult external state before deciding."""

    async def validate(
        self,
        ctx: ValidationContext,
        query: QueryService,
    ) -> list[Violation]:
        ...


@dataclass
class ValidatorDefinition:
    """Metadata definition for a validator (from entity YAML).

    Attributes:
        type: Validator type ("unique", "minimalPrice", ...)
        params: Type-specific parameters
        message: Violation message
        code: Machine-readable code
        on: Operations this validator runs on (default: [CREATE, UPDATE])
    """

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    code: str = ""
    on: list[Operation] = field(
        default_factory=lambda: [Operation.CREATE, Operation.UPDATE]
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidatorDefinition":
        """Create ValidatorDefinition from YAML/JSON dict."""
        operations = data.get("on", ["create", "update"])
        if isinstance(operations, str):
            operations = [operations]

        return cls(
            type=data["type"],
            params=data.get("params", {}),
            message=data.get("message", ""),
            code=data.get("code", ""),
            on=[Operation(op) for op in operations],
        )
