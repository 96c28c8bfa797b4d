"""Tests for rendering computed shapes as Pydantic source."""
from dtoforge.dto_gen.params import compute_params
from dtoforge.dto_gen.render import render_enums, render_index, render_shape
from dtoforge.dto_gen.schema import registry_from_dict
from dtoforge.dto_gen.types import EnumSpec, GeneratorConfig, OutputLayout


SCHEMA = {
    "models": [
        {
            "name": "User",
            "fields": [
                {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True, "hasDefaultValue": True},
                {"name": "email", "kind": "scalar", "baseType": "String", "isUnique": True,
                 "documentation": "Login address"},
                {"name": "nickname", "kind": "scalar", "baseType": "String", "isRequired": False},
                {"name": "role", "kind": "enum", "baseType": "Role", "hasDefaultValue": True},
                {"name": "balance", "kind": "scalar", "baseType": "Decimal"},
                {"name": "createdAt", "kind": "scalar", "baseType": "DateTime", "documentation": "@DtoReadOnly"},
                {"name": "posts", "kind": "relation", "baseType": "Post", "isList": True,
                 "documentation": "@DtoRelationCanCreateOnCreate\n@DtoRelationCanConnectOnCreate"},
            ],
        },
        {
            "name": "Post",
            "fields": [
                {"name": "id", "kind": "scalar", "baseType": "Int", "isId": True, "hasDefaultValue": True},
                {"name": "title", "kind": "scalar", "baseType": "String"},
                {"name": "from", "kind": "scalar", "baseType": "String", "isRequired": False},
                {"name": "meta", "kind": "scalar", "baseType": "Json",
                 "documentation": "@DtoCastType(PostMeta, blog.types)"},
                {"name": "author", "kind": "relation", "baseType": "User", "relationFromFields": ["authorId"],
                 "documentation": "@DtoRelationCanConnectOnCreate\n@DtoRelationRequired"},
                {"name": "authorId", "kind": "scalar", "baseType": "Int"},
            ],
        },
    ],
    "enums": [{"name": "Role", "values": ["USER", "ADMIN"]}],
}


def _params(name, config=None):
    registry = registry_from_dict(SCHEMA)
    return compute_params(registry.get(name), registry, config or GeneratorConfig())


def test_render_create_dto_with_relation_input():
    """Create module holds the relation input class and imports related shapes."""
    content = render_shape(_params("User").create, GeneratorConfig())

    assert "from pydantic import BaseModel, Field" in content
    assert "from decimal import Decimal" in content
    assert "from typing import List, Optional" in content
    assert "from .enums import Role" in content
    assert "from .create_post_dto import CreatePostDto" in content
    assert "from .connect_post_dto import ConnectPostDto" in content

    assert "class CreateUserPostsRelationInputDto(BaseModel):" in content
    assert "    create: Optional[List[CreatePostDto]] = None" in content
    assert "    connect: Optional[List[ConnectPostDto]] = None" in content

    assert "class CreateUserDto(BaseModel):" in content
    assert '    email: str = Field(..., description="Login address")' in content
    assert "    nickname: Optional[str] = None" in content
    assert "    role: Optional[Role] = None" in content
    assert "    balance: Decimal" in content
    assert "    posts: Optional[CreateUserPostsRelationInputDto] = None" in content
    assert "createdAt" not in content
    assert "    id:" not in content

    assert '__all__ = ["CreateUserPostsRelationInputDto", "CreateUserDto"]' in content
    # relation input is declared before the DTO that uses it
    assert content.index("class CreateUserPostsRelationInputDto") < content.index("class CreateUserDto")
    # related models are imported after the classes, enums before them
    assert content.index("from .create_post_dto import") > content.index("class CreateUserDto")
    assert content.index("from .enums import Role") < content.index("class CreateUserPostsRelationInputDto")


def test_render_required_connect_member():
    content = render_shape(_params("Post").create, GeneratorConfig())
    assert "class CreatePostAuthorRelationInputDto(BaseModel):" in content
    assert "    connect: ConnectUserDto" in content
    assert "    author: CreatePostAuthorRelationInputDto" in content
    assert "authorId" not in content


def test_render_keyword_field_and_cast_import():
    content = render_shape(_params("Post").plain, GeneratorConfig())
    assert '    from_: Optional[str] = Field(None, alias="from")' not in content
    assert '    from_: Optional[str] = Field(..., alias="from")' in content
    assert "from blog.types import PostMeta" in content
    assert "    meta: PostMeta" in content
    assert "    authorId: int" in content


def test_render_entity_and_plain_nullable():
    content = render_shape(_params("User").plain, GeneratorConfig())
    assert "class UserDto(BaseModel):" in content
    assert "    nickname: Optional[str]" in content
    assert "    nickname: Optional[str] = None" not in content
    assert "    createdAt: datetime" in content
    assert "from datetime import datetime" in content

    entity = render_shape(_params("Post").entity, GeneratorConfig())
    assert "class Post(BaseModel):" in entity
    assert "from .user_entity import User" in entity
    assert "    author: User" in entity


def test_render_unexported_relation_inputs():
    config = GeneratorConfig(export_relation_modifier_classes=False)
    content = render_shape(_params("User", config).create, config)
    assert "class CreateUserPostsRelationInputDto(BaseModel):" in content
    assert '__all__ = ["CreateUserDto"]' in content


def test_render_resource_layout_imports():
    config = GeneratorConfig(output_layout=OutputLayout.RESOURCE)
    content = render_shape(_params("User", config).create, config)
    assert "from ...enums import Role" in content
    assert "from ...post.dto.create_post_dto import CreatePostDto" in content


def test_render_connect_dto():
    content = render_shape(_params("User").connect, GeneratorConfig())
    assert "class ConnectUserDto(BaseModel):" in content
    assert "    id: Optional[int] = None" in content
    assert '    email: Optional[str] = Field(None, description="Login address")' in content


def test_render_enums():
    content = render_enums([
        EnumSpec(name="Role", values=("USER", "ADMIN")),
        EnumSpec(name="Origin", values=("None", "from", "web")),
    ])
    assert "from enum import Enum" in content
    assert "class Role(str, Enum):" in content
    assert '    USER = "USER"' in content
    assert '    ADMIN = "ADMIN"' in content
    assert '    None_ = "None"' in content
    assert '    from_ = "from"' in content
    assert '    web = "web"' in content
    compile(content, "enums.py", "exec")


def test_render_index():
    content = render_index(["user_dto", "user.dto"])
    assert "from .user_dto import *" in content
    assert "from .user.dto import *" in content
    assert "model_rebuild" not in content

    root = render_index(["user_dto"], rebuild=True)
    assert "from .user_dto import *" in root
    assert "        _model.model_rebuild()" in root
    compile(root, "__init__.py", "exec")
