"""catalogkeeper validation system.

Two validator sets run for every create and update:
- Field validators: synchronous checks generated from field metadata
  (required, minLength, pattern) plus synchronous metadata validators
  (unique)
- Async validators: checks that consult persisted state (minimalPrice)

Usage:
    from catalogkeeper.validation import ValidationService, ValidatorRegistry
    from catalogkeeper.validation.validators import register_canned_validators

    registry = ValidatorRegistry()
    register_canned_validators(registry)
    service = ValidationService(query_service, registry, metadata_loader)
"""

from catalogkeeper.validation.registry import ValidatorRegistry
from catalogkeeper.validation.services import ValidationService
from catalogkeeper.validation.types import (
    Operation,
    OperationRejected,
    QueryService,
    Result,
    ValidationContext,
    ValidatorDefinition,
    Violation,
    ViolationKind,
)

__all__ = [
    "Operation",
    "OperationRejected",
    "QueryService",
    "Result",
    "ValidationContext",
    "ValidationService",
    "ValidatorDefinition",
    "ValidatorRegistry",
    "Violation",
    "ViolationKind",
]
