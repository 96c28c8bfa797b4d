"""Read a schema document (JSON or YAML) into an immutable SchemaRegistry."""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from dtoforge.dto_gen.annotations import parse_directives
from dtoforge.dto_gen.errors import SchemaLoadError
from dtoforge.dto_gen.types import (
    EnumSpec,
    FieldKind,
    FieldSpec,
    ModelSpec,
    SchemaRegistry,
)


class _SchemaModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FieldInput(_SchemaModel):
    name: str
    kind: FieldKind
    base_type: str
    is_list: bool = False
    is_required: bool = True
    documentation: Optional[str] = None
    relation_target: Optional[str] = None
    is_id: bool = False
    is_unique: bool = False
    has_default_value: bool = False
    is_updated_at: bool = False
    relation_from_fields: List[str] = []

    @field_validator("kind", mode="before")
    @classmethod
    def _object_kind_is_relation(cls, value: Any) -> Any:
        # Prisma DMMF calls relation and composite fields "object"
        if value == "object":
            return FieldKind.RELATION.value
        return value


class ModelInput(_SchemaModel):
    name: str
    identity: bool = True
    documentation: Optional[str] = None
    fields: List[FieldInput] = []


class EnumInput(_SchemaModel):
    name: str
    values: List[str] = []

    @field_validator("values", mode="before")
    @classmethod
    def _value_names(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v.get("name") if isinstance(v, dict) else v for v in value]
        return value


class SchemaDocument(_SchemaModel):
    models: List[ModelInput] = []
    types: List[ModelInput] = []
    enums: List[EnumInput] = []


def _to_field(data: FieldInput, type_names: set) -> FieldSpec:
    target = None
    if data.kind == FieldKind.RELATION:
        target = data.relation_target or data.base_type
    return FieldSpec(
        name=data.name,
        kind=data.kind,
        base_type=data.base_type,
        is_list=data.is_list,
        is_required=data.is_required,
        documentation=data.documentation or "",
        relation_target=target,
        is_id=data.is_id,
        is_unique=data.is_unique,
        has_default_value=data.has_default_value,
        is_updated_at=data.is_updated_at,
        relation_from_fields=tuple(data.relation_from_fields),
        is_embedded=target is not None and target in type_names,
        directives=parse_directives(data.documentation),
    )


def _to_model(data: ModelInput, identity: bool, type_names: set) -> ModelSpec:
    return ModelSpec(
        name=data.name,
        fields=tuple(_to_field(f, type_names) for f in data.fields),
        documentation=data.documentation or "",
        identity=identity,
        directives=parse_directives(data.documentation),
    )


def registry_from_dict(data: Dict[str, Any]) -> SchemaRegistry:
    """Validate a schema document and freeze it into a registry.

    Directives are parsed here, once per field and model.
    """
    try:
        document = SchemaDocument.model_validate(data)
    except ValidationError as e:
        raise SchemaLoadError(f"Invalid schema document: {e}") from e

    type_names = {t.name for t in document.types}
    type_names.update(m.name for m in document.models if not m.identity)

    models = [_to_model(t, False, type_names) for t in document.types]
    models.extend(_to_model(m, m.identity, type_names) for m in document.models)
    enums = tuple(EnumSpec(name=e.name, values=tuple(e.values)) for e in document.enums)
    return SchemaRegistry(models=tuple(models), enums=enums)


def load_registry(schema_path: Path) -> SchemaRegistry:
    """Load a .json, .yaml or .yml schema document."""
    schema_path = Path(schema_path)
    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            if schema_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise SchemaLoadError(f"Cannot read schema {schema_path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaLoadError(f"Cannot parse schema {schema_path}: {e}") from e

    if not isinstance(data, dict):
        raise SchemaLoadError(f"Schema {schema_path} must contain a mapping at the top level")
    return registry_from_dict(data)
