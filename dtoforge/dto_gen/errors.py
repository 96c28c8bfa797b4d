"""Exceptions raised (or collected) during DTO generation."""
from typing import Optional


class DtoGenError(Exception):
    """Base class for generator errors."""


class DanglingRelationError(DtoGenError):
    """A relation field points at a model that is not in the registry."""

    def __init__(self, model_name: str, field_name: str, target: str):
        self.model_name = model_name
        self.field_name = field_name
        self.target = target
        super().__init__(
            f"related model '{target}' for '{model_name}.{field_name}' not found"
        )


class SchemaLoadError(DtoGenError):
    """The schema document could not be read or validated."""


class ConfigurationError(DtoGenError):
    """Conflicting directives resolved by precedence.

    Never raised by the core; instances are collected on the computed
    model params and reported as warnings.
    """

    def __init__(self, model_name: str, field_name: Optional[str], message: str):
        self.model_name = model_name
        self.field_name = field_name
        self.message = message
        location = f"{model_name}.{field_name}" if field_name else model_name
        super().__init__(f"{location}: {message}")
