"""Validator registry for catalogkeeper.

Maps the validator types named in entity metadata ("unique",
"minimalPrice", ...) to factories that build configured validators.
A registry is an ordinary object created at bootstrap and passed to the
services that need it.
"""

from typing import Any, Callable

from catalogkeeper.validation.types import ValidatorDefinition

ValidatorFactory = Callable[[ValidatorDefinition], Any]


class ValidatorRegistry:
    """Registry for validator factories.

    Example:
        registry = ValidatorRegistry()
        registry.register_factory("unique", _unique_factory)
        validator = registry.create(ValidatorDefinition(type="unique", ...))
    """

    def __init__(self) -> None:
        self._factories: dict[str, ValidatorFactory] = {}

    def register_factory(self, name: str, factory: ValidatorFactory) -> None:
        """Register a factory that creates validators from definitions.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in self._factories:
            return
        self._factories[name] = factory

    def create(self, definition: ValidatorDefinition) -> Any:
        """Create a validator instance from a definition.

        Raises:
            ValueError: If the validator type is not registered
        """
        factory = self._factories.get(definition.type)
        if factory is None:
            raise ValueError(
                f"Validator type '{definition.type}' is not registered. "
                "Available types: " + ", ".join(self.list_registered())
            )
        return factory(definition)

    def is_registered(self, name: str) -> bool:
        return name in self._factories

    def list_registered(self) -> list[str]:
        return sorted(self._factories.keys())
