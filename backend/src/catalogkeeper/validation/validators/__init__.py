"""Validators for catalogkeeper.

Field constraint validators are generated from field metadata; canned
validators are referenced by type from entity metadata.
"""

from catalogkeeper.validation.validators.canned import (
    MinimalPriceValidator,
    UniqueValidator,
    register_canned_validators,
)
from catalogkeeper.validation.validators.field_constraints import (
    FieldConstraintValidator,
    generate_field_validators,
)

__all__ = [
    "FieldConstraintValidator",
    "MinimalPriceValidator",
    "UniqueValidator",
    "generate_field_validators",
    "register_canned_validators",
]
