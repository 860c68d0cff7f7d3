"""Domain Models.

Core domain entities: classification snapshots and the model tree.
"""
from __future__ import annotations

from ifc_model_tree.domain.models.classification import (
    ClassificationResult,
    ClassificationSnapshot,
    EntityGroup,
    EntityOnlyResult,
    ErrorResult,
    SpatialGroup,
    SpatialResult,
    coerce_element_id,
)
from ifc_model_tree.domain.models.tree import TreeNode, placeholder_name

__all__ = [
    # Classification
    "ClassificationSnapshot",
    "SpatialGroup",
    "EntityGroup",
    "ClassificationResult",
    "SpatialResult",
    "EntityOnlyResult",
    "ErrorResult",
    "coerce_element_id",
    # Tree
    "TreeNode",
    "placeholder_name",
]
