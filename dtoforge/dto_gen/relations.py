"""Relation projection: which related shape a relation field exposes, and where it lives."""
from dtoforge.dto_gen.classifier import relation_policy
from dtoforge.dto_gen.errors import DanglingRelationError
from dtoforge.dto_gen.types import (
    CrossReference,
    FieldSpec,
    GeneratorConfig,
    ModelSpec,
    ParsedField,
    RelationPolicy,
    RelationProjection,
    SchemaRegistry,
    Shape,
)
from dtoforge.dto_gen.utils import (
    class_name,
    file_stem,
    model_directory,
    relation_input_name,
    relative_path,
)


def find_target(field: FieldSpec, model: ModelSpec, registry: SchemaRegistry) -> ModelSpec:
    target_name = field.relation_target or field.base_type
    target = registry.get(target_name)
    if target is None:
        raise DanglingRelationError(model.name, field.name, target_name)
    return target


def cross_reference(
    model: ModelSpec,
    shape: Shape,
    target: ModelSpec,
    target_shape: Shape,
    config: GeneratorConfig,
) -> CrossReference:
    """Reference from `model`'s `shape` module to `target`'s `target_shape` class."""
    from_dir = model_directory(model.name, shape, config)
    to_dir = model_directory(target.name, target_shape, config)
    return CrossReference(
        name=class_name(target.name, target_shape, config),
        module=file_stem(target.name, target_shape, config),
        path=relative_path(from_dir, to_dir),
    )


def _embedded(field, shape, model, target, config) -> RelationProjection:
    # an embedded type has no entity or connect shape of its own
    target_shape = Shape.PLAIN if shape in (Shape.ENTITY, Shape.CONNECT) else shape
    ref = cross_reference(model, shape, target, target_shape, config)
    return RelationProjection(
        field_name=field.name,
        target=target.name,
        shape=shape,
        policy=RelationPolicy.NONE,
        is_list=field.is_list,
        reference_path=ref.path,
        reference=ref,
        embedded=True,
    )


def _relation_input(field, shape, model, target, policy, config) -> RelationProjection:
    create_ref = cross_reference(model, shape, target, Shape.CREATE, config)
    connect_ref = cross_reference(model, shape, target, Shape.CONNECT, config)

    members = []
    if RelationPolicy.CREATE in policy:
        members.append(ParsedField(name="create", type=create_ref.name, is_list=field.is_list, cross_reference=create_ref))
    if RelationPolicy.CONNECT in policy:
        members.append(ParsedField(name="connect", type=connect_ref.name, is_list=field.is_list, cross_reference=connect_ref))
    if RelationPolicy.DISCONNECT in policy:
        if field.is_list:
            members.append(ParsedField(name="disconnect", type=connect_ref.name, is_list=True, cross_reference=connect_ref))
        else:
            members.append(ParsedField(name="disconnect", type="bool"))

    # with more than one key, whichever is populated decides the operation
    if len(members) > 1:
        members = [
            ParsedField(
                name=m.name,
                type=m.type,
                is_list=m.is_list,
                is_optional=True,
                cross_reference=m.cross_reference,
            )
            for m in members
        ]

    return RelationProjection(
        field_name=field.name,
        target=target.name,
        shape=shape,
        policy=policy,
        is_list=field.is_list,
        reference_path=create_ref.path,
        input_name=relation_input_name(model.name, field.name, shape, config),
        members=tuple(members),
    )


def resolve(
    field: FieldSpec,
    shape: Shape,
    model: ModelSpec,
    registry: SchemaRegistry,
    config: GeneratorConfig,
) -> RelationProjection:
    """Project a relation field of `model` into one of its shapes.

    Raises DanglingRelationError when the related model is not in the
    registry, e.g. because it was dropped with @DtoIgnoreModel.
    """
    target = find_target(field, model, registry)
    if not target.identity:
        return _embedded(field, shape, model, target, config)

    policy = relation_policy(field, shape)
    if shape in (Shape.CREATE, Shape.UPDATE):
        return _relation_input(field, shape, model, target, policy, config)

    if shape == Shape.CONNECT:
        # include-id relations never reach Connect: their raw keys stand in for them
        ref = cross_reference(model, shape, target, Shape.CONNECT, config)
        return RelationProjection(
            field_name=field.name,
            target=target.name,
            shape=shape,
            policy=policy,
            is_list=field.is_list,
            reference_path=ref.path,
            reference=ref,
            foreign_keys=field.relation_from_fields,
        )

    target_shape = Shape.ENTITY if shape == Shape.ENTITY else Shape.PLAIN
    ref = cross_reference(model, shape, target, target_shape, config)
    return RelationProjection(
        field_name=field.name,
        target=target.name,
        shape=shape,
        policy=policy,
        is_list=field.is_list,
        reference_path=ref.path,
        reference=ref if shape == Shape.ENTITY else None,
        foreign_keys=field.relation_from_fields,
    )
