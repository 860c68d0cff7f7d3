"""Domain layer exceptions.

All domain-specific exceptions inherit from DomainError.
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(DomainError):
    def __init__(self, entity_type: str, entity_id: int | str, details: dict[str, Any] | None = None) -> None:
        message = f"{entity_type} not found: {entity_id}"
        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, value: Any = None) -> None:
        full_message = f"Validation error for '{field}': {message}"
        details = {"field": field, "value": value}
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class InvalidElementIdError(ValidationError):
    def __init__(self, value: Any, group: str | None = None) -> None:
        super().__init__(field="element_id", message="Element ids must be positive integers", value=value)
        if group is not None:
            self.details["group"] = group
        self.group = group


class IfcImportError(DomainError):
    pass


class IfcFileNotFoundError(IfcImportError):
    def __init__(self, file_path: str) -> None:
        super().__init__(f"IFC file not found: {file_path}")
        self.file_path = file_path


class IfcParseError(IfcImportError):
    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"Failed to parse IFC file: {file_path}", {"reason": reason})
        self.file_path = file_path
        self.reason = reason


class UnsupportedIfcSchemaError(IfcImportError):
    def __init__(self, schema: str, supported: list[str]) -> None:
        super().__init__(f"Unsupported IFC schema: {schema}", {"supported_schemas": supported})
        self.schema = schema
        self.supported = supported


class ClassificationError(DomainError):
    """The model could not be classified into any tree."""


class IndexingError(ClassificationError):
    """Spatial relations were not indexed before spatial grouping was requested."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Spatial indexing unavailable: {reason}", details)
        self.reason = reason


class NameFetchError(DomainError):
    def __init__(self, element_id: int, reason: str) -> None:
        super().__init__(f"Could not fetch name for element {element_id}", {"reason": reason})
        self.element_id = element_id
        self.reason = reason
