"""Render computed shapes as Pydantic model source."""
import json
import keyword
import re
from typing import Dict, Iterable, List

from dtoforge.dto_gen.params import ENUMS_MODULE
from dtoforge.dto_gen.types import CrossReference, EnumSpec, GeneratorConfig, ParsedField, ShapeParams
from dtoforge.dto_gen.utils import to_import_module


SCALAR_TYPE_MAP = {
    "String": "str",
    "Int": "int",
    "BigInt": "int",
    "Float": "float",
    "Decimal": "Decimal",
    "Boolean": "bool",
    "DateTime": "datetime",
    "Json": "Any",
    "Bytes": "bytes",
}


def _map_field_to_python_type(field: ParsedField) -> str:
    """Map a parsed field to its annotation (without Optional)."""
    base_type = SCALAR_TYPE_MAP.get(field.type, field.type)
    if field.is_list:
        return f"List[{base_type}]"
    return base_type


def _render_field(field: ParsedField) -> str:
    base_type = _map_field_to_python_type(field)
    if field.is_optional or field.is_nullable:
        field_type = f"Optional[{base_type}]"
    else:
        field_type = base_type

    name = field.name
    kwargs = []
    if keyword.iskeyword(name):
        kwargs.append(f'alias="{name}"')
        name = f"{name}_"
    if field.description:
        kwargs.append(f"description={json.dumps(field.description)}")

    if not kwargs:
        if field.is_optional:
            return f"    {name}: {field_type} = None"
        return f"    {name}: {field_type}"
    default = "None" if field.is_optional else "..."
    return f"    {name}: {field_type} = Field({default}, {', '.join(kwargs)})"


def _render_class(name: str, fields: Iterable[ParsedField]) -> List[str]:
    lines = [f"class {name}(BaseModel):"]
    body = [_render_field(f) for f in fields]
    lines.extend(body or ["    pass"])
    return lines


def _uses(name: str, rendered_types: List[str]) -> bool:
    pattern = re.compile(rf"\b{name}\b")
    return any(pattern.search(t) for t in rendered_types)


def _header(params: ShapeParams) -> List[str]:
    entries = list(params.fields)
    for projection in params.relation_inputs:
        entries.extend(projection.members)
    rendered_types = [_map_field_to_python_type(e) for e in entries]

    typing_names = set()
    if any(e.is_optional or e.is_nullable for e in entries):
        typing_names.add("Optional")
    if any(e.is_list for e in entries):
        typing_names.add("List")
    if _uses("Any", rendered_types):
        typing_names.add("Any")

    lines = ["from __future__ import annotations", ""]
    if _uses("datetime", rendered_types):
        lines.append("from datetime import datetime")
    if _uses("Decimal", rendered_types):
        lines.append("from decimal import Decimal")
    if typing_names:
        lines.append(f"from typing import {', '.join(sorted(typing_names))}")
    lines.append("")

    needs_field = any(keyword.iskeyword(e.name) or e.description for e in entries)
    lines.append("from pydantic import BaseModel, Field" if needs_field else "from pydantic import BaseModel")

    cast_imports: Dict[str, List[str]] = {}
    for e in entries:
        if e.type_import:
            # strip generic arguments, e.g. Dict[str, Any] -> Dict
            cast_imports.setdefault(e.type_import, [])
            name = e.type.split("[", 1)[0]
            if name not in cast_imports[e.type_import]:
                cast_imports[e.type_import].append(name)
    for module, names in cast_imports.items():
        lines.append(f"from {module} import {', '.join(names)}")

    for ref in params.imports():
        if ref.module == ENUMS_MODULE:
            lines.append(_import_line(ref))

    lines.extend(["", ""])
    return lines


def _import_line(ref: CrossReference) -> str:
    return f"from {to_import_module(ref.path, ref.module)} import {ref.name}"


def _model_imports(params: ShapeParams) -> List[str]:
    """Imports of related generated models, placed after the classes.

    Two models that reference each other import each other's module, so
    each module binds its own classes before pulling in the other. The
    annotations stay unresolved until the models are rebuilt.
    """
    refs = [ref for ref in params.imports() if ref.module != ENUMS_MODULE]
    if not refs:
        return []
    lines = ["", ""]
    lines.extend(f"{_import_line(ref)}  # noqa: E402" for ref in refs)
    return lines


def render_shape(params: ShapeParams, config: GeneratorConfig) -> str:
    """Generate the module for one shape of a model."""
    lines = _header(params)

    exported = []
    for projection in params.relation_inputs:
        lines.extend(_render_class(projection.input_name, projection.members))
        lines.extend(["", ""])
        if config.export_relation_modifier_classes:
            exported.append(projection.input_name)

    lines.extend(_render_class(params.class_name, params.fields))
    exported.append(params.class_name)

    lines.extend(["", ""])
    lines.append(f"__all__ = [{', '.join(json.dumps(name) for name in exported)}]")
    lines.extend(_model_imports(params))
    return "\n".join(lines) + "\n"


def render_enums(enums: Iterable[EnumSpec]) -> str:
    """Generate enums.py: one str-valued Enum per schema enum."""
    lines = ["from enum import Enum", ""]
    for enum in enums:
        lines.extend(["", f"class {enum.name}(str, Enum):"])
        for value in enum.values:
            member = f"{value}_" if keyword.iskeyword(value) else value
            lines.append(f'    {member} = "{value}"')
        if not enum.values:
            lines.append("    pass")
        lines.append("")
    return "\n".join(lines)


def render_index(modules: Iterable[str], rebuild: bool = False) -> str:
    """Generate an __init__.py re-exporting the given relative modules.

    With `rebuild`, the exported models are rebuilt once every module is
    loaded, so references between modules resolve.
    """
    lines = [f"from .{module} import *  # noqa: F401,F403" for module in modules]
    if not rebuild:
        return "\n".join(lines) + "\n"
    lines[:0] = ["from pydantic import BaseModel as _BaseModel", ""]
    lines.extend([
        "",
        "for _model in list(globals().values()):",
        "    if isinstance(_model, type) and issubclass(_model, _BaseModel) and _model is not _BaseModel:",
        "        _model.model_rebuild()",
    ])
    return "\n".join(lines) + "\n"
