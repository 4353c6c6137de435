"""Referential integrity between Categories and Products."""

from catalogkeeper.integrity.checker import IntegrityChecker
from catalogkeeper.integrity.hooks import (
    CATEGORY_HAS_PRODUCTS,
    NONEXISTENT_CATEGORY,
    register_integrity_hooks,
)

__all__ = [
    "CATEGORY_HAS_PRODUCTS",
    "IntegrityChecker",
    "NONEXISTENT_CATEGORY",
    "register_integrity_hooks",
]
