"""Entity metadata: YAML definitions of Category, Product and their rules."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_METADATA_PATH = Path(__file__).resolve().parent

DEFAULT_OPERATIONS = ("create", "update")

_ABBREVIATION = re.compile(r"^[A-Za-z0-9]{2,5}$")


def _humanize(name: str) -> str:
    """categoryId -> Category Id"""
    return re.sub(r"(?<!^)(?=[A-Z])", " ", name).title()


def _operations(data: dict) -> list[str]:
    # A bare `on:` key comes back from PyYAML as the boolean True
    raw = data["on"] if "on" in data else data.get(True, list(DEFAULT_OPERATIONS))
    return [raw] if isinstance(raw, str) else list(raw)


@dataclass
class ValidationRules:
    """Declarative rules for one field, turned into a FieldConstraintValidator."""

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    # Per-rule message overrides, keyed by rule name ("minLength", "pattern", ...)
    messages: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, data: dict | None) -> "ValidationRules":
        data = data or {}
        return cls(
            required=bool(data.get("required", False)),
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            pattern=data.get("pattern"),
            messages=dict(data.get("messages") or {}),
        )


@dataclass
class RelationConfig:
    entity: str
    display_field: str = "name"


@dataclass
class FieldDefinition:
    name: str
    type: str
    display_name: str
    primary_key: bool = False
    validation: ValidationRules = field(default_factory=ValidationRules)
    relation: RelationConfig | None = None

    @classmethod
    def from_yaml(cls, data: dict) -> "FieldDefinition":
        name = data["name"]
        relation = data.get("relation")
        validation = ValidationRules.from_yaml(data.get("validation"))
        if validation.pattern is not None:
            try:
                re.compile(validation.pattern)
            except re.error as e:
                raise ValueError(
                    f"Field '{name}' pattern {validation.pattern!r} is invalid: {e}"
                ) from None
        return cls(
            name=name,
            type=data.get("type", "string"),
            display_name=data.get("displayName") or _humanize(name),
            primary_key=bool(data.get("primaryKey", False)),
            validation=validation,
            relation=RelationConfig(
                entity=relation["entity"],
                display_field=relation.get("displayField", "name"),
            ) if relation else None,
        )


@dataclass
class ValidatorConfig:
    """A `validators` / `asyncValidators` entry of an entity file."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    code: str = ""
    on: list[str] = field(default_factory=lambda: list(DEFAULT_OPERATIONS))

    @classmethod
    def from_yaml(cls, data: dict) -> "ValidatorConfig":
        return cls(
            type=data["type"],
            params=dict(data.get("params") or {}),
            message=data.get("message", ""),
            code=data.get("code", ""),
            on=_operations(data),
        )


@dataclass
class EntityModel:
    name: str
    display_name: str
    plural_name: str
    primary_key: str
    fields: list[FieldDefinition]
    abbreviation: str = ""
    validators: list[ValidatorConfig] = field(default_factory=list)
    async_validators: list[ValidatorConfig] = field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldDefinition | None:
        return next((f for f in self.fields if f.name == name), None)


class MetadataLoader:
    """Reads ``<metadata_path>/entities/*.yaml`` into EntityModels.

    The package ships the Category and Product definitions next to this
    module; tests point the loader at a temporary directory instead.
    """

    def __init__(self, metadata_path: Path | None = None):
        self.metadata_path = metadata_path or DEFAULT_METADATA_PATH
        self.entities: dict[str, EntityModel] = {}

    def load_all(self) -> "MetadataLoader":
        self.entities = {}
        entities_dir = self.metadata_path / "entities"
        if entities_dir.is_dir():
            for path in sorted(entities_dir.glob("*.yaml")):
                data = yaml.safe_load(path.read_text())
                if not data or "entity" not in data:
                    continue
                entity = self.resolve_entity(data)
                self.entities[entity.name] = entity

        self._check_abbreviations()
        return self

    def resolve_entity(self, data: dict) -> EntityModel:
        """Build an EntityModel from one parsed entity file."""
        name = data["entity"]
        fields = [FieldDefinition.from_yaml(f) for f in data.get("fields") or []]
        primary_key = next((f.name for f in fields if f.primary_key), "id")

        return EntityModel(
            name=name,
            display_name=data.get("displayName", name),
            plural_name=data.get("pluralName", f"{name}s"),
            primary_key=primary_key,
            fields=fields,
            abbreviation=str(data.get("abbreviation") or name[:3]).upper(),
            validators=[
                ValidatorConfig.from_yaml(v) for v in data.get("validators") or []
            ],
            async_validators=[
                ValidatorConfig.from_yaml(v) for v in data.get("asyncValidators") or []
            ],
        )

    def _check_abbreviations(self) -> None:
        """Abbreviations prefix generated ids, so each must be short and distinct."""
        owners: dict[str, str] = {}
        for entity in self.entities.values():
            abbreviation = entity.abbreviation
            if not _ABBREVIATION.fullmatch(abbreviation):
                raise ValueError(
                    f"Entity '{entity.name}' abbreviation '{abbreviation}' must be "
                    "2-5 alphanumeric characters"
                )
            if abbreviation in owners:
                raise ValueError(
                    f"Duplicate abbreviation '{abbreviation}' used by both "
                    f"'{owners[abbreviation]}' and '{entity.name}'"
                )
            owners[abbreviation] = entity.name

    def get_entity(self, name: str) -> EntityModel | None:
        return self.entities.get(name)

    def require_entity(self, name: str) -> EntityModel:
        """Get an entity by name, raising ValueError if unknown."""
        try:
            return self.entities[name]
        except KeyError:
            raise ValueError(f"Unknown entity '{name}'") from None

    def list_entities(self) -> list[str]:
        return list(self.entities)
