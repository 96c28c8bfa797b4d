"""Tests for per-field, per-shape classification."""
from dtoforge.dto_gen.classifier import (
    classify,
    effective_type,
    extract_cast_type,
    find_conflicts,
)
from dtoforge.dto_gen.errors import ConfigurationError
from dtoforge.dto_gen.schema import registry_from_dict
from dtoforge.dto_gen.types import RelationPolicy, Shape


def _model(fields, documentation="", extra_models=None):
    models = [{"name": "Item", "documentation": documentation, "fields": fields}]
    models.extend(extra_models or [])
    registry = registry_from_dict({"models": models})
    return registry.get("Item")


def test_api_hidden_only_reaches_entity():
    """An api-hidden field is excluded everywhere except Entity."""
    model = _model([
        {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True},
        {"name": "secret", "kind": "scalar", "baseType": "String", "isUnique": True,
         "documentation": "@DtoApiHidden"},
    ])
    secret = model.get_field("secret")
    for shape in (Shape.PLAIN, Shape.CREATE, Shape.UPDATE, Shape.CONNECT):
        assert not classify(secret, shape, model).include, f"secret leaked into {shape}"
    assert classify(secret, Shape.ENTITY, model).include


def test_entity_hidden_only_excludes_entity():
    model = _model([
        {"name": "note", "kind": "scalar", "baseType": "String", "documentation": "@DtoEntityHidden"},
    ])
    note = model.get_field("note")
    assert not classify(note, Shape.ENTITY, model).include
    for shape in (Shape.PLAIN, Shape.CREATE, Shape.UPDATE):
        assert classify(note, shape, model).include


def test_read_only_excluded_from_create_and_update():
    model = _model([
        {"name": "createdAt", "kind": "scalar", "baseType": "DateTime", "documentation": "@DtoReadOnly"},
    ])
    field = model.get_field("createdAt")
    assert not classify(field, Shape.CREATE, model).include
    assert not classify(field, Shape.UPDATE, model).include
    assert classify(field, Shape.PLAIN, model).include
    assert classify(field, Shape.ENTITY, model).include


def test_create_and_update_hidden_are_shape_specific():
    model = _model([
        {"name": "slug", "kind": "scalar", "baseType": "String", "documentation": "@DtoCreateHidden"},
        {"name": "code", "kind": "scalar", "baseType": "String", "documentation": "@DtoUpdateHidden"},
    ])
    slug = model.get_field("slug")
    code = model.get_field("code")
    assert not classify(slug, Shape.CREATE, model).include
    assert classify(slug, Shape.UPDATE, model).include
    assert classify(code, Shape.CREATE, model).include
    assert not classify(code, Shape.UPDATE, model).include


def test_create_optionality():
    """Required scalars are required in Create unless create-optional or defaulted."""
    model = _model([
        {"name": "title", "kind": "scalar", "baseType": "String"},
        {"name": "subtitle", "kind": "scalar", "baseType": "String", "isRequired": False},
        {"name": "summary", "kind": "scalar", "baseType": "String", "documentation": "@DtoCreateOptional"},
        {"name": "views", "kind": "scalar", "baseType": "Int", "hasDefaultValue": True},
    ])
    decisions = {f.name: classify(f, Shape.CREATE, model) for f in model.fields}
    assert decisions["title"].optional is False
    assert decisions["subtitle"].optional is True
    assert decisions["subtitle"].nullable is True
    assert decisions["summary"].optional is True
    assert decisions["views"].optional is True


def test_update_defaults_to_optional():
    model = _model([
        {"name": "title", "kind": "scalar", "baseType": "String"},
        {"name": "views", "kind": "scalar", "baseType": "Int"},
    ])
    for field in model.fields:
        assert classify(field, Shape.UPDATE, model).optional is True


def test_full_update_mirrors_create():
    model = _model(
        [
            {"name": "title", "kind": "scalar", "baseType": "String"},
            {"name": "summary", "kind": "scalar", "baseType": "String", "documentation": "@DtoCreateOptional"},
            {"name": "subtitle", "kind": "scalar", "baseType": "String", "isRequired": False},
        ],
        documentation="@DtoTypeFullUpdate",
    )
    for field in model.fields:
        create = classify(field, Shape.CREATE, model)
        update = classify(field, Shape.UPDATE, model)
        assert update.optional == create.optional, field.name
    assert classify(model.get_field("title"), Shape.UPDATE, model).optional is False


def test_update_optional_applies_under_full_update():
    model = _model(
        [{"name": "title", "kind": "scalar", "baseType": "String", "documentation": "@DtoUpdateOptional"}],
        documentation="@DtoTypeFullUpdate",
    )
    title = model.get_field("title")
    assert classify(title, Shape.CREATE, model).optional is False
    assert classify(title, Shape.UPDATE, model).optional is True


def test_relation_required_wins_over_create_optional():
    """relation-required beats create-optional and update-optional on the same relation."""
    owner = {"name": "Owner", "fields": [{"name": "id", "kind": "scalar", "baseType": "Int", "isId": True}]}
    model = _model(
        [
            {"name": "owner", "kind": "relation", "baseType": "Owner", "isRequired": False,
             "documentation": "@DtoRelationCanConnectOnCreate\n@DtoRelationCanConnectOnUpdate\n"
                              "@DtoRelationRequired\n@DtoCreateOptional\n@DtoUpdateOptional"},
        ],
        extra_models=[owner],
    )
    owner_field = model.get_field("owner")
    create = classify(owner_field, Shape.CREATE, model)
    update = classify(owner_field, Shape.UPDATE, model)
    assert create.include and create.optional is False
    assert create.nullable is False
    assert update.include and update.optional is False

    conflicts = find_conflicts(model)
    assert len(conflicts) == 2
    assert all(isinstance(c, ConfigurationError) for c in conflicts)
    assert all(c.field_name == "owner" for c in conflicts)


def test_relation_policy_per_shape():
    target = {"name": "Tag", "fields": [{"name": "id", "kind": "scalar", "baseType": "Int", "isId": True}]}
    model = _model(
        [
            {"name": "tags", "kind": "relation", "baseType": "Tag", "isList": True,
             "documentation": "@DtoRelationCanCreateOnCreate\n@DtoRelationCanConnectOnCreate\n"
                              "@DtoRelationCanConnectOnUpdate\n@DtoRelationCanDisconnectOnUpdate"},
        ],
        extra_models=[target],
    )
    tags = model.get_field("tags")
    assert classify(tags, Shape.CREATE, model).relation_policy == RelationPolicy.CREATE_OR_CONNECT
    update_policy = classify(tags, Shape.UPDATE, model).relation_policy
    assert update_policy == RelationPolicy.CONNECT | RelationPolicy.DISCONNECT
    assert RelationPolicy.CREATE not in update_policy
    assert not classify(tags, Shape.PLAIN, model).include
    assert classify(tags, Shape.ENTITY, model).relation_policy == RelationPolicy.NONE


def test_relation_without_modifiers_is_absent_from_create_and_update():
    target = {"name": "Tag", "fields": [{"name": "id", "kind": "scalar", "baseType": "Int", "isId": True}]}
    model = _model(
        [{"name": "tags", "kind": "relation", "baseType": "Tag", "isList": True}],
        extra_models=[target],
    )
    tags = model.get_field("tags")
    assert not classify(tags, Shape.CREATE, model).include
    assert not classify(tags, Shape.UPDATE, model).include
    assert classify(tags, Shape.ENTITY, model).include


def test_disconnect_never_reaches_create():
    target = {"name": "Tag", "fields": [{"name": "id", "kind": "scalar", "baseType": "Int", "isId": True}]}
    model = _model(
        [{"name": "tag", "kind": "relation", "baseType": "Tag", "isRequired": False,
          "documentation": "@DtoRelationCanDisconnectOnUpdate"}],
        extra_models=[target],
    )
    tag = model.get_field("tag")
    assert not classify(tag, Shape.CREATE, model).include
    assert classify(tag, Shape.UPDATE, model).relation_policy == RelationPolicy.DISCONNECT


def test_foreign_keys_hidden_in_create_unless_include_id():
    target = {"name": "Owner", "fields": [{"name": "id", "kind": "scalar", "baseType": "Int", "isId": True}]}
    plain = _model(
        [
            {"name": "owner", "kind": "relation", "baseType": "Owner", "relationFromFields": ["ownerId"]},
            {"name": "ownerId", "kind": "scalar", "baseType": "Int"},
        ],
        extra_models=[target],
    )
    owner_id = plain.get_field("ownerId")
    assert not classify(owner_id, Shape.CREATE, plain).include
    assert classify(owner_id, Shape.PLAIN, plain).include

    with_id = _model(
        [
            {"name": "owner", "kind": "relation", "baseType": "Owner", "relationFromFields": ["ownerId"],
             "documentation": "@DtoRelationIncludeId"},
            {"name": "ownerId", "kind": "scalar", "baseType": "Int"},
        ],
        extra_models=[target],
    )
    assert classify(with_id.get_field("ownerId"), Shape.CREATE, with_id).include


def test_server_generated_fields_excluded():
    model = _model([
        {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True, "hasDefaultValue": True},
        {"name": "updatedAt", "kind": "scalar", "baseType": "DateTime", "isUpdatedAt": True},
        {"name": "ref", "kind": "scalar", "baseType": "String", "isId": True, "hasDefaultValue": True,
         "documentation": "@DtoCreateOptional"},
    ])
    assert not classify(model.get_field("id"), Shape.CREATE, model).include
    assert not classify(model.get_field("updatedAt"), Shape.UPDATE, model).include
    ref = classify(model.get_field("ref"), Shape.CREATE, model)
    assert ref.include and ref.optional


def test_connect_optionality_depends_on_identifier_count():
    single = _model([
        {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True},
        {"name": "title", "kind": "scalar", "baseType": "String"},
    ])
    decision = classify(single.get_field("id"), Shape.CONNECT, single)
    assert decision.include and decision.optional is False
    assert not classify(single.get_field("title"), Shape.CONNECT, single).include

    double = _model([
        {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True},
        {"name": "slug", "kind": "scalar", "baseType": "String", "isUnique": True},
    ])
    for field in double.fields:
        decision = classify(field, Shape.CONNECT, double)
        assert decision.include and decision.optional is True


def test_cast_type_replaces_base_type():
    model = _model([
        {"name": "payload", "kind": "scalar", "baseType": "Json", "isList": True,
         "documentation": "Raw data\n@DtoCastType(Dict[str, Any], typing)"},
    ])
    payload = model.get_field("payload")
    assert effective_type(payload) == "Dict[str, Any]"
    for shape in (Shape.PLAIN, Shape.CREATE, Shape.UPDATE, Shape.ENTITY):
        assert classify(payload, shape, model).effective_type == "Dict[str, Any]"


def test_extract_cast_type():
    assert extract_cast_type("@DtoCastType(Money)") == ("Money", None)
    assert extract_cast_type("@DtoCastType(Money, billing.types)") == ("Money", "billing.types")
    assert extract_cast_type("@DtoCastType(Dict[str, Any], typing)") == ("Dict[str, Any]", "typing")
    assert extract_cast_type("@DtoCastType(Money") is None
    assert extract_cast_type("@DtoCastType()") is None
    assert extract_cast_type("no directive here") is None


def test_conflicts_for_misplaced_directives():
    model = _model([
        {"name": "title", "kind": "scalar", "baseType": "String",
         "documentation": "@DtoReadOnly\n@DtoCreateOptional"},
        {"name": "views", "kind": "scalar", "baseType": "Int",
         "documentation": "@DtoRelationCanConnectOnCreate"},
    ])
    messages = [str(c) for c in find_conflicts(model)]
    assert any("Item.title" in m and "@DtoReadOnly" in m for m in messages)
    assert any("Item.views" in m and "@DtoRelationCanConnectOnCreate" in m for m in messages)
    # read-only still wins
    assert not classify(model.get_field("title"), Shape.CREATE, model).include
