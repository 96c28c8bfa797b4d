"""Per-field, per-shape inclusion, optionality and type decisions."""
import re
from typing import List, NamedTuple, Optional

from dtoforge.dto_gen.annotations import (
    Directive,
    MODEL_DIRECTIVES,
    RELATION_MODIFIERS,
    RELATION_DIRECTIVES,
)
from dtoforge.dto_gen.errors import ConfigurationError
from dtoforge.dto_gen.types import (
    EXCLUDED,
    FieldDecision,
    FieldSpec,
    ModelSpec,
    RelationPolicy,
    Shape,
)


CAST_TYPE_PATTERN = re.compile(re.escape(Directive.CAST_TYPE.value) + r"\s*\(")


class CastType(NamedTuple):
    type: str
    module: Optional[str] = None


def extract_cast_type(text: Optional[str]) -> Optional[CastType]:
    """Read the payload of @DtoCastType(Type[, module]).

    The type expression may contain brackets and commas, e.g.
    @DtoCastType(Dict[str, Any], typing).
    """
    if not text:
        return None
    match = CAST_TYPE_PATTERN.search(text)
    if not match:
        return None
    depth = 0
    args = []
    current = []
    for ch in text[match.end():]:
        if ch == ")" and depth == 0:
            args.append("".join(current).strip())
            break
        if ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
        if ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    else:
        # unterminated payload
        return None
    if not args or not args[0]:
        return None
    module = args[1] if len(args) > 1 and args[1] else None
    return CastType(args[0], module)


def effective_type(field: FieldSpec) -> str:
    if field.has(Directive.CAST_TYPE) and not field.is_relation:
        cast = extract_cast_type(field.documentation)
        if cast:
            return cast.type
    return field.base_type


def relation_policy(field: FieldSpec, shape: Shape) -> RelationPolicy:
    """Mutation capabilities a relation's directives grant in a shape."""
    if not field.is_relation or field.is_embedded:
        return RelationPolicy.NONE
    policy = RelationPolicy.NONE
    if shape == Shape.CREATE:
        if field.has(Directive.RELATION_CAN_CREATE_ON_CREATE):
            policy |= RelationPolicy.CREATE
        if field.has(Directive.RELATION_CAN_CONNECT_ON_CREATE):
            policy |= RelationPolicy.CONNECT
    elif shape == Shape.UPDATE:
        if field.has(Directive.RELATION_CAN_CREATE_ON_UPDATE):
            policy |= RelationPolicy.CREATE
        if field.has(Directive.RELATION_CAN_CONNECT_ON_UPDATE):
            policy |= RelationPolicy.CONNECT
        if field.has(Directive.RELATION_CAN_DISCONNECT_ON_UPDATE):
            policy |= RelationPolicy.DISCONNECT
    return policy


def is_relation_required(field: FieldSpec) -> bool:
    return field.is_relation and field.has(Directive.RELATION_REQUIRED)


def is_server_generated(field: FieldSpec) -> bool:
    return (field.is_id and field.has_default_value) or field.is_updated_at


def includes_id(relation: FieldSpec, model: ModelSpec) -> bool:
    """Whether a relation asks for its raw foreign keys to be emitted."""
    if relation.has(Directive.RELATION_INCLUDE_ID):
        return True
    for name in relation.relation_from_fields:
        key = model.get_field(name)
        if key is not None and key.has(Directive.RELATION_INCLUDE_ID):
            return True
    return False


def is_identifying_relation(relation: FieldSpec, model: ModelSpec) -> bool:
    """A relation identifies its record when every foreign key does."""
    if relation.is_embedded or not relation.relation_from_fields:
        return False
    keys = [model.get_field(name) for name in relation.relation_from_fields]
    return all(key is not None and key.is_identifying for key in keys)


def in_connect(field: FieldSpec, model: ModelSpec) -> bool:
    if field.has(Directive.API_HIDDEN):
        return False
    if field.is_relation:
        return is_identifying_relation(field, model) and not includes_id(field, model)
    if not field.is_identifying:
        return False
    relation = model.relation_for_scalar(field.name)
    if (
        relation is not None
        and not relation.has(Directive.API_HIDDEN)
        and is_identifying_relation(relation, model)
        and not includes_id(relation, model)
    ):
        # replaced by the nested reference
        return False
    return True


def connect_member_count(model: ModelSpec) -> int:
    return sum(1 for f in model.fields if in_connect(f, model))


def is_create_optional(field: FieldSpec) -> bool:
    if is_relation_required(field):
        return False
    if field.is_relation and not field.is_embedded:
        return True
    return (
        not field.is_required
        or field.has(Directive.CREATE_OPTIONAL)
        or field.has_default_value
    )


def is_update_optional(field: FieldSpec, model: ModelSpec) -> bool:
    if is_relation_required(field):
        return False
    if field.has(Directive.UPDATE_OPTIONAL):
        return True
    if model.has(Directive.FULL_UPDATE):
        return is_create_optional(field)
    return True


def is_excluded(field: FieldSpec, shape: Shape, model: ModelSpec) -> bool:
    if shape == Shape.ENTITY:
        return field.has(Directive.ENTITY_HIDDEN)
    if field.has(Directive.API_HIDDEN):
        return True
    if shape == Shape.CREATE and field.has(Directive.CREATE_HIDDEN):
        return True
    if shape == Shape.UPDATE and field.has(Directive.UPDATE_HIDDEN):
        return True
    if shape in (Shape.CREATE, Shape.UPDATE) and field.has(Directive.READ_ONLY):
        return True
    if shape == Shape.CREATE and is_server_generated(field) and not field.has(Directive.CREATE_OPTIONAL):
        return True
    if shape == Shape.UPDATE and is_server_generated(field) and not field.has(Directive.UPDATE_OPTIONAL):
        return True
    if shape == Shape.CONNECT:
        return not in_connect(field, model)
    if field.is_relation and not field.is_embedded:
        if shape == Shape.PLAIN:
            return True
        return relation_policy(field, shape) == RelationPolicy.NONE
    if shape in (Shape.CREATE, Shape.UPDATE):
        relation = model.relation_for_scalar(field.name)
        if relation is not None and not includes_id(relation, model):
            return True
    return False


def _is_optional(field: FieldSpec, shape: Shape, model: ModelSpec) -> bool:
    if shape == Shape.CREATE:
        return is_create_optional(field)
    if shape == Shape.UPDATE:
        return is_update_optional(field, model)
    if shape == Shape.CONNECT:
        return connect_member_count(model) > 1
    if shape == Shape.ENTITY and field.is_relation and not field.is_embedded:
        return not is_relation_required(field)
    return False


def classify(field: FieldSpec, shape: Shape, model: ModelSpec) -> FieldDecision:
    """Decide whether and how a field appears in one shape of its model."""
    if is_excluded(field, shape, model):
        return EXCLUDED
    nullable = (
        shape != Shape.CONNECT
        and not field.is_required
        and not is_relation_required(field)
    )
    return FieldDecision(
        include=True,
        optional=_is_optional(field, shape, model),
        nullable=nullable,
        effective_type=effective_type(field),
        relation_policy=relation_policy(field, shape),
    )


def find_conflicts(model: ModelSpec) -> List[ConfigurationError]:
    """Directive combinations that are settled by precedence rather than honoured."""
    conflicts = []

    def report(field_name, message):
        conflicts.append(ConfigurationError(model.name, field_name, message))

    for field in model.fields:
        d = field.directives
        if Directive.READ_ONLY in d:
            for hint in (Directive.CREATE_OPTIONAL, Directive.UPDATE_OPTIONAL):
                if hint in d:
                    report(field.name, f"{Directive.READ_ONLY.value} overrides {hint.value}")
        if Directive.CREATE_HIDDEN in d and Directive.CREATE_OPTIONAL in d:
            report(field.name, f"{Directive.CREATE_HIDDEN.value} overrides {Directive.CREATE_OPTIONAL.value}")
        if Directive.UPDATE_HIDDEN in d and Directive.UPDATE_OPTIONAL in d:
            report(field.name, f"{Directive.UPDATE_HIDDEN.value} overrides {Directive.UPDATE_OPTIONAL.value}")
        for directive in sorted(MODEL_DIRECTIVES & d, key=lambda x: x.value):
            report(field.name, f"{directive.value} only applies to models, ignored on a field")

        if field.is_relation:
            if Directive.RELATION_REQUIRED in d:
                for hint in (Directive.CREATE_OPTIONAL, Directive.UPDATE_OPTIONAL):
                    if hint in d:
                        report(field.name, f"{Directive.RELATION_REQUIRED.value} overrides {hint.value}")
            if Directive.CAST_TYPE in d:
                report(field.name, f"{Directive.CAST_TYPE.value} is ignored on relation fields")
            if field.is_embedded:
                for directive in sorted((RELATION_MODIFIERS | {Directive.RELATION_INCLUDE_ID}) & d, key=lambda x: x.value):
                    report(field.name, f"{directive.value} is ignored on an embedded type")
            continue

        misplaced = RELATION_DIRECTIVES & d
        if Directive.RELATION_INCLUDE_ID in misplaced and model.relation_for_scalar(field.name) is not None:
            misplaced = misplaced - {Directive.RELATION_INCLUDE_ID}
        for directive in sorted(misplaced, key=lambda x: x.value):
            report(field.name, f"{directive.value} is ignored on a non-relation field")
        if Directive.CAST_TYPE in d and extract_cast_type(field.documentation) is None:
            report(field.name, f"{Directive.CAST_TYPE.value} has no type payload, ignored")

    return conflicts
