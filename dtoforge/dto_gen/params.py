"""Compute the field lists of every generated shape for a model or type."""
from dtoforge.dto_gen.annotations import Directive, strip_directives
from dtoforge.dto_gen.classifier import classify, extract_cast_type, find_conflicts
from dtoforge.dto_gen.relations import find_target, resolve
from dtoforge.dto_gen.types import (
    CrossReference,
    FieldDecision,
    FieldKind,
    FieldSpec,
    GeneratorConfig,
    MODEL_SHAPES,
    ModelParams,
    ModelSpec,
    ParsedField,
    RelationProjection,
    SchemaRegistry,
    Shape,
    ShapeParams,
    TYPE_SHAPES,
)
from dtoforge.dto_gen.utils import class_name, file_stem, model_directory, relative_path

ENUMS_MODULE = "enums"


def _scalar_field(
    field: FieldSpec,
    decision: FieldDecision,
    model: ModelSpec,
    shape: Shape,
    config: GeneratorConfig,
) -> ParsedField:
    ref = None
    type_import = None
    cast = extract_cast_type(field.documentation) if field.has(Directive.CAST_TYPE) else None
    if cast:
        type_import = cast.module
    elif field.kind == FieldKind.ENUM:
        ref = CrossReference(
            name=field.base_type,
            module=ENUMS_MODULE,
            path=relative_path(model_directory(model.name, shape, config), ""),
        )
    return ParsedField(
        name=field.name,
        type=decision.effective_type,
        is_list=field.is_list,
        is_optional=decision.optional,
        is_nullable=decision.nullable,
        cross_reference=ref,
        type_import=type_import,
        description=strip_directives(field.documentation),
    )


def _relation_field(
    field: FieldSpec,
    decision: FieldDecision,
    projection: RelationProjection,
) -> ParsedField:
    if projection.input_name:
        # the input class is rendered in the same module
        type_name, is_list, ref = projection.input_name, False, None
    else:
        ref = projection.reference
        type_name, is_list = ref.name, field.is_list
    return ParsedField(
        name=field.name,
        type=type_name,
        is_list=is_list,
        is_optional=decision.optional,
        is_nullable=decision.nullable,
        cross_reference=ref,
        relation=projection,
        description=strip_directives(field.documentation),
    )


def compute_shape(
    model: ModelSpec,
    shape: Shape,
    registry: SchemaRegistry,
    config: GeneratorConfig,
) -> ShapeParams:
    fields = []
    relation_inputs = []
    for field in model.fields:
        decision = classify(field, shape, model)
        if not decision.include:
            continue
        if field.is_relation:
            projection = resolve(field, shape, model, registry, config)
            if projection.input_name:
                relation_inputs.append(projection)
            fields.append(_relation_field(field, decision, projection))
        else:
            fields.append(_scalar_field(field, decision, model, shape, config))

    return ShapeParams(
        shape=shape,
        class_name=class_name(model.name, shape, config),
        file_stem=file_stem(model.name, shape, config),
        directory=model_directory(model.name, shape, config),
        fields=tuple(fields),
        relation_inputs=tuple(relation_inputs),
    )


def compute_params(model: ModelSpec, registry: SchemaRegistry, config: GeneratorConfig) -> ModelParams:
    """Compute every shape of a model (five) or identity-less type (three).

    Every relation target is checked first, so a dangling relation aborts
    the model even when the field is hidden from all shapes.
    """
    for field in model.fields:
        if field.is_relation:
            find_target(field, model, registry)

    shapes = MODEL_SHAPES if model.identity else TYPE_SHAPES
    return ModelParams(
        model_name=model.name,
        identity=model.identity,
        shapes=tuple(compute_shape(model, shape, registry, config) for shape in shapes),
        conflicts=tuple(find_conflicts(model)),
    )
