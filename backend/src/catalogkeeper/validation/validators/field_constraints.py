"""Field-level constraint validators.

Generated from the ``validation`` block of each field in entity metadata:
- required: the field must hold a non-blank value
- minLength/maxLength: bounds on string length
- pattern: regex matched against the value's string form

Fields are checked independently and without touching storage.
"""

import re
from dataclasses import dataclass
from typing import Any

from catalogkeeper.metadata.loader import FieldDefinition
from catalogkeeper.validation.types import (
    QueryService,
    ValidationContext,
    Violation,
    ViolationKind,
)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class FieldConstraintValidator:
    """Checks one field of a candidate record against its declared rules."""

    field: FieldDefinition

    def validate(
        self,
        ctx: ValidationContext,
        query: QueryService,
    ) -> list[Violation]:
        value = ctx.record.get(self.field.name)
        rules = self.field.validation
        label = self.field.display_name

        if _blank(value):
            # A missing required value is the only thing worth reporting
            if rules.required:
                return [self._violation("required", "REQUIRED", f"{label} is required")]
            return []

        violations: list[Violation] = []
        if isinstance(value, str):
            if rules.min_length is not None and len(value) < rules.min_length:
                violations.append(self._violation(
                    "minLength", "MIN_LENGTH",
                    f"{label} must be at least {rules.min_length} characters",
                ))
            if rules.max_length is not None and len(value) > rules.max_length:
                violations.append(self._violation(
                    "maxLength", "MAX_LENGTH",
                    f"{label} must be at most {rules.max_length} characters",
                ))

        if rules.pattern and not self._matches(rules.pattern, value):
            violations.append(self._violation(
                "pattern", "PATTERN_MISMATCH", f"{label} format is invalid",
            ))

        return violations

    def _matches(self, pattern: str, value: Any) -> bool:
        """Match the whole of ``str(value)``, so 150 passes ^\\d+$ while -5,
        1.5, True and "150\\n" fail.
        """
        return re.fullmatch(pattern, str(value)) is not None

    def _violation(self, rule: str, code: str, default_message: str) -> Violation:
        return Violation(
            message=self.field.validation.messages.get(rule, default_message),
            code=code,
            field=self.field.name,
            kind=ViolationKind.FIELD,
        )


def generate_field_validators(
    fields: list[FieldDefinition],
) -> list[FieldConstraintValidator]:
    """One validator per field that declares at least one rule."""
    return [
        FieldConstraintValidator(field=f)
        for f in fields
        if f.validation.required
        or f.validation.min_length is not None
        or f.validation.max_length is not None
        or f.validation.pattern
    ]
