"""Domain Layer.

Contains the model tree entities, classification snapshots and value objects.
This layer has NO external dependencies (no ifcopenshell, no frameworks).
"""
from __future__ import annotations

from ifc_model_tree.domain.exceptions import (
    ClassificationError,
    DomainError,
    EntityNotFoundError,
    IfcFileNotFoundError,
    IfcImportError,
    IfcParseError,
    IndexingError,
    InvalidElementIdError,
    NameFetchError,
    UnsupportedIfcSchemaError,
    ValidationError,
)
from ifc_model_tree.domain.models import (
    ClassificationResult,
    ClassificationSnapshot,
    EntityGroup,
    EntityOnlyResult,
    ErrorResult,
    SpatialGroup,
    SpatialResult,
    TreeNode,
    placeholder_name,
)
from ifc_model_tree.domain.value_objects import EntityType, ParentPolicy

__all__ = [
    # Exceptions
    "DomainError",
    "EntityNotFoundError",
    "ValidationError",
    "InvalidElementIdError",
    "IfcImportError",
    "IfcFileNotFoundError",
    "IfcParseError",
    "UnsupportedIfcSchemaError",
    "ClassificationError",
    "IndexingError",
    "NameFetchError",
    # Models
    "ClassificationSnapshot",
    "SpatialGroup",
    "EntityGroup",
    "ClassificationResult",
    "SpatialResult",
    "EntityOnlyResult",
    "ErrorResult",
    "TreeNode",
    "placeholder_name",
    # Value Objects
    "EntityType",
    "ParentPolicy",
]
