"""Orchestrator for DTO code generation."""
import logging
import posixpath
from pathlib import Path
from typing import Dict, List, Optional

from dtoforge.dto_gen.errors import DanglingRelationError
from dtoforge.dto_gen.params import ENUMS_MODULE, compute_params
from dtoforge.dto_gen.render import render_enums, render_index, render_shape
from dtoforge.dto_gen.schema import load_registry
from dtoforge.dto_gen.types import (
    GeneratedFile,
    GeneratorConfig,
    ModelParams,
    OutputLayout,
    SchemaRegistry,
)
from dtoforge.dto_gen.writer import write_files

log = logging.getLogger(__name__)


def compute_all(registry: SchemaRegistry, config: GeneratorConfig) -> List[ModelParams]:
    """Compute params for every model and type that is not ignored.

    Types are processed before models. Nothing is rendered until every
    model has been computed, so a dangling relation aborts the whole run.
    """
    registry = registry.without_ignored()
    results = []
    for model in registry.types + registry.persisted_models:
        kind = "Model" if model.identity else "Type"
        log.info("Processing %s %s", kind, model.name, extra={"model": model.name})
        try:
            params = compute_params(model, registry, config)
        except DanglingRelationError as e:
            log.error("Aborting generation: %s", e, extra={"model": model.name})
            raise
        for conflict in params.conflicts:
            log.warning("Conflicting directives: %s", conflict, extra={"model": model.name})
        results.append(params)
    return results


def _index_files(files: List[GeneratedFile], config: GeneratorConfig) -> List[GeneratedFile]:
    modules_by_dir: Dict[str, List[str]] = {}
    for file in files:
        directory, name = posixpath.split(file.path)
        modules_by_dir.setdefault(directory, []).append(name[:-len(".py")])

    index_files = []
    for directory in sorted(modules_by_dir):
        if directory == "":
            continue
        index_files.append(GeneratedFile(
            path=posixpath.join(directory, "__init__.py"),
            content=render_index(sorted(modules_by_dir[directory])),
        ))

    # combined index in the output root
    root_modules = sorted(modules_by_dir.get("", []))
    if config.output_layout != OutputLayout.FLAT:
        root_modules.extend(d.replace("/", ".") for d in sorted(modules_by_dir) if d)
    index_files.append(GeneratedFile(path="__init__.py", content=render_index(root_modules, rebuild=True)))
    return index_files


def build_files(registry: SchemaRegistry, config: GeneratorConfig) -> List[GeneratedFile]:
    """Compute and render every generated module without touching the disk."""
    all_params = compute_all(registry, config)

    files = []
    for params in all_params:
        for shape_params in params:
            files.append(GeneratedFile(
                path=posixpath.join(shape_params.directory, f"{shape_params.file_stem}.py"),
                content=render_shape(shape_params, config),
            ))

    if registry.enums:
        files.append(GeneratedFile(
            path=f"{ENUMS_MODULE}.py",
            content=render_enums(registry.enums),
        ))

    if config.re_export:
        files.extend(_index_files(files, config))
    return files


def generate_dtos(
    schema_path: Path,
    out_dir: Path,
    config: Optional[GeneratorConfig] = None,
) -> List[GeneratedFile]:
    """
    Generate DTO modules for a schema document.

    Args:
        schema_path: Path to the schema document (.json, .yaml or .yml)
        out_dir: Output directory for generated files
        config: Run-wide generator settings; defaults to GeneratorConfig()

    Returns:
        List of GeneratedFile objects that were written
    """
    config = config or GeneratorConfig()
    registry = load_registry(schema_path)
    files = build_files(registry, config)
    write_files(files, out_dir)
    log.info("Generated %d files in %s", len(files), out_dir)
    return files
