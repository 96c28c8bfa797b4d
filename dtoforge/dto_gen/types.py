"""Dataclasses for DTO generation."""
from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import FrozenSet, Iterator, Optional, Tuple

from dtoforge.dto_gen.annotations import Directive


class FieldKind(str, Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    RELATION = "relation"


class Shape(str, Enum):
    PLAIN = "plain"
    CREATE = "create"
    UPDATE = "update"
    CONNECT = "connect"
    ENTITY = "entity"


MODEL_SHAPES = (Shape.PLAIN, Shape.CREATE, Shape.UPDATE, Shape.CONNECT, Shape.ENTITY)
TYPE_SHAPES = (Shape.PLAIN, Shape.CREATE, Shape.UPDATE)


class RelationPolicy(Flag):
    """Relation operations allowed in a shape."""
    NONE = 0
    CREATE = 1
    CONNECT = 2
    DISCONNECT = 4

    CONNECT_ONLY = 2
    CREATE_OR_CONNECT = 3
    CREATE_CONNECT_OR_DISCONNECT = 7


class OutputLayout(str, Enum):
    FLAT = "flat"  # everything in the output root
    RESOURCE = "resource"  # <model>/dto and <model>/entities
    RESOURCE_FLAT = "resource_flat"  # <model>/


class NamingStyle(str, Enum):
    SNAKE = "snake"
    CAMEL = "camel"
    PASCAL = "pascal"


@dataclass(frozen=True)
class GeneratorConfig:
    """Run-wide settings, threaded through every call."""
    output_layout: OutputLayout = OutputLayout.FLAT
    file_naming_style: NamingStyle = NamingStyle.SNAKE
    connect_prefix: str = "Connect"
    create_prefix: str = "Create"
    update_prefix: str = "Update"
    dto_suffix: str = "Dto"
    entity_prefix: str = ""
    entity_suffix: str = ""
    export_relation_modifier_classes: bool = True
    re_export: bool = False


@dataclass(frozen=True)
class FieldSpec:
    """A single field of a model or type, as read from the schema."""
    name: str
    kind: FieldKind
    base_type: str
    is_list: bool = False
    is_required: bool = True
    documentation: str = ""
    relation_target: Optional[str] = None
    is_id: bool = False
    is_unique: bool = False
    has_default_value: bool = False
    is_updated_at: bool = False
    relation_from_fields: Tuple[str, ...] = ()
    is_embedded: bool = False  # relation to an identity-less type
    directives: FrozenSet[Directive] = frozenset()

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.RELATION

    @property
    def is_identifying(self) -> bool:
        return self.is_id or self.is_unique

    def has(self, directive: Directive) -> bool:
        return directive in self.directives


@dataclass(frozen=True)
class ModelSpec:
    """A model (identity=True) or reusable structural type (identity=False)."""
    name: str
    fields: Tuple[FieldSpec, ...]
    documentation: str = ""
    identity: bool = True
    directives: FrozenSet[Directive] = frozenset()

    def has(self, directive: Directive) -> bool:
        return directive in self.directives

    def get_field(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def relation_for_scalar(self, name: str) -> Optional[FieldSpec]:
        """Return the relation field whose foreign key includes `name`."""
        for f in self.fields:
            if f.is_relation and name in f.relation_from_fields:
                return f
        return None


@dataclass(frozen=True)
class EnumSpec:
    name: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class SchemaRegistry:
    """Immutable snapshot of every model, type and enum for one run."""
    models: Tuple[ModelSpec, ...] = ()
    enums: Tuple[EnumSpec, ...] = ()

    def get(self, name: str) -> Optional[ModelSpec]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    def without_ignored(self) -> "SchemaRegistry":
        kept = tuple(m for m in self.models if not m.has(Directive.IGNORE_MODEL))
        return SchemaRegistry(models=kept, enums=self.enums)

    @property
    def persisted_models(self) -> Tuple[ModelSpec, ...]:
        return tuple(m for m in self.models if m.identity)

    @property
    def types(self) -> Tuple[ModelSpec, ...]:
        return tuple(m for m in self.models if not m.identity)


@dataclass(frozen=True)
class FieldDecision:
    include: bool
    optional: bool = False
    nullable: bool = False
    effective_type: str = ""
    relation_policy: RelationPolicy = RelationPolicy.NONE


EXCLUDED = FieldDecision(include=False)


@dataclass(frozen=True)
class CrossReference:
    """Points from one generated module to a class in another."""
    name: str
    module: str
    path: str  # relative directory path, always starting with ./ or ../

    @property
    def is_local(self) -> bool:
        return self.path == "./"


@dataclass(frozen=True)
class ParsedField:
    """One entry of a computed shape, ready for rendering."""
    name: str
    type: str
    is_list: bool = False
    is_optional: bool = False
    is_nullable: bool = False
    cross_reference: Optional[CrossReference] = None
    relation: Optional["RelationProjection"] = None
    type_import: Optional[str] = None  # module for a cast type
    description: str = ""


@dataclass(frozen=True)
class RelationProjection:
    """How a relation field is exposed in one shape."""
    field_name: str
    target: str
    shape: Shape
    policy: RelationPolicy
    is_list: bool
    reference_path: str
    reference: Optional[CrossReference] = None  # entity, nested connect or embedded type
    input_name: Optional[str] = None
    members: Tuple[ParsedField, ...] = ()
    foreign_keys: Tuple[str, ...] = ()
    embedded: bool = False

    def member(self, name: str) -> Optional[ParsedField]:
        for m in self.members:
            if m.name == name:
                return m
        return None


@dataclass(frozen=True)
class ShapeParams:
    shape: Shape
    class_name: str
    file_stem: str
    directory: str
    fields: Tuple[ParsedField, ...]
    relation_inputs: Tuple[RelationProjection, ...] = ()

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> Optional[ParsedField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def imports(self) -> Tuple[CrossReference, ...]:
        """Cross references to other modules, in first-use order."""
        seen = []
        entries = list(self.fields)
        for projection in self.relation_inputs:
            entries.extend(projection.members)
        for entry in entries:
            ref = entry.cross_reference
            if ref is None or (ref.is_local and ref.module == self.file_stem):
                continue
            if ref not in seen:
                seen.append(ref)
        return tuple(seen)


@dataclass(frozen=True)
class ModelParams:
    model_name: str
    identity: bool
    shapes: Tuple[ShapeParams, ...]
    conflicts: Tuple[Exception, ...] = field(default=())

    def __getitem__(self, shape: Shape) -> ShapeParams:
        for params in self.shapes:
            if params.shape == shape:
                return params
        raise KeyError(shape)

    def __contains__(self, shape: Shape) -> bool:
        return any(p.shape == shape for p in self.shapes)

    def __iter__(self) -> Iterator[ShapeParams]:
        return iter(self.shapes)

    @property
    def plain(self) -> ShapeParams:
        return self[Shape.PLAIN]

    @property
    def create(self) -> ShapeParams:
        return self[Shape.CREATE]

    @property
    def update(self) -> ShapeParams:
        return self[Shape.UPDATE]

    @property
    def connect(self) -> Optional[ShapeParams]:
        return self[Shape.CONNECT] if Shape.CONNECT in self else None

    @property
    def entity(self) -> Optional[ShapeParams]:
        return self[Shape.ENTITY] if Shape.ENTITY in self else None


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative path from output directory
    content: str  # File contents
