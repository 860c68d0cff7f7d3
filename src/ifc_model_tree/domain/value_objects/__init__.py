"""Domain Value Objects.

Immutable objects that represent domain concepts without identity.
"""
from __future__ import annotations

from ifc_model_tree.domain.value_objects.entity_type import (
    UNRANKED_PRIORITY,
    EntityType,
    label_priority,
    pluralize,
)
from ifc_model_tree.domain.value_objects.parent_policy import ParentPolicy

__all__ = [
    "EntityType", "label_priority", "pluralize", "UNRANKED_PRIORITY",
    "ParentPolicy",
]
