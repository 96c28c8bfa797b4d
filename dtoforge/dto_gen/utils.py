"""Naming and path helpers for DTO generation."""
import posixpath
import re
from typing import List

from dtoforge.dto_gen.types import GeneratorConfig, NamingStyle, OutputLayout, Shape


def to_snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1)
    return s2.replace('-', '_').lower()


def split_words(name: str) -> List[str]:
    return [w for w in re.split(r'[_\s]+', to_snake_case(name)) if w]


def to_pascal_case(name: str) -> str:
    return "".join(w[:1].upper() + w[1:] for w in split_words(name))


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def transform_name(name: str, style: NamingStyle) -> str:
    if style == NamingStyle.CAMEL:
        return to_camel_case(name)
    if style == NamingStyle.PASCAL:
        return to_pascal_case(name)
    return to_snake_case(name)


def class_name(model_name: str, shape: Shape, config: GeneratorConfig) -> str:
    """Class name of a model's generated shape, e.g. CreateUserDto."""
    base = to_pascal_case(model_name)
    if shape == Shape.ENTITY:
        return f"{config.entity_prefix}{base}{config.entity_suffix}"
    prefix = {
        Shape.CREATE: config.create_prefix,
        Shape.UPDATE: config.update_prefix,
        Shape.CONNECT: config.connect_prefix,
    }.get(shape, "")
    return f"{prefix}{base}{config.dto_suffix}"


def relation_input_name(model_name: str, field_name: str, shape: Shape, config: GeneratorConfig) -> str:
    """Name of the generated class holding a relation's create/connect/disconnect keys."""
    prefix = config.create_prefix if shape == Shape.CREATE else config.update_prefix
    return (
        f"{prefix}{to_pascal_case(model_name)}{to_pascal_case(field_name)}"
        f"RelationInput{config.dto_suffix}"
    )


def file_stem(model_name: str, shape: Shape, config: GeneratorConfig) -> str:
    """Module name (without .py) for a shape, e.g. create_user_dto."""
    if shape == Shape.ENTITY:
        words = ["entity"]
        prefix = ""
    else:
        words = ["dto"]
        prefix = {
            Shape.CREATE: config.create_prefix,
            Shape.UPDATE: config.update_prefix,
            Shape.CONNECT: config.connect_prefix,
        }.get(shape, "")
    parts = split_words(prefix) + split_words(model_name) + words
    return transform_name("_".join(parts), config.file_naming_style)


def model_directory(model_name: str, shape: Shape, config: GeneratorConfig) -> str:
    """Directory of a shape relative to the output root ("" is the root)."""
    if config.output_layout == OutputLayout.FLAT:
        return ""
    folder = transform_name(model_name, config.file_naming_style)
    if config.output_layout == OutputLayout.RESOURCE_FLAT:
        return folder
    return posixpath.join(folder, "entities" if shape == Shape.ENTITY else "dto")


def relative_path(from_dir: str, to_dir: str) -> str:
    """Relative path between two output directories, always ./ or ../ prefixed."""
    rel = posixpath.relpath("/" + to_dir, "/" + from_dir)
    if rel == ".":
        return "./"
    if not rel.startswith("."):
        rel = "./" + rel
    return rel


def to_import_module(path: str, module: str) -> str:
    """Turn a relative directory path plus module stem into a relative import.

    "./" -> ".module", "../user/dto" -> "..user.dto.module"
    """
    parts = [p for p in path.split("/") if p]
    ups = sum(1 for p in parts if p == "..")
    names = [p for p in parts if p not in (".", "..")]
    return "." * (ups + 1) + ".".join(names + [module])
