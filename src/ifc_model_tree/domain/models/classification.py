"""Classification Snapshot.

Immutable view of a classified model: elements grouped by spatial container
and by entity type, plus the tagged outcome of the classification phase.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from ifc_model_tree.domain.exceptions import InvalidElementIdError, ValidationError
from ifc_model_tree.domain.value_objects import EntityType

MemberMap = Mapping[str, frozenset[int]]


def coerce_element_id(value: Any, group: str | None = None) -> int:
    """Validate an element id taken from raw classifier output.

    Args:
        value: Raw id (int or numeric string)
        group: Group name, for error context

    Returns:
        The id as a positive int

    Raises:
        InvalidElementIdError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise InvalidElementIdError(value, group)
    try:
        element_id = int(value)
    except (TypeError, ValueError):
        raise InvalidElementIdError(value, group) from None
    if not isinstance(value, str) and element_id != value:
        raise InvalidElementIdError(value, group)
    if element_id <= 0:
        raise InvalidElementIdError(value, group)
    return element_id


def _freeze_members(raw: Mapping[Any, Iterable[Any]] | None, group: str) -> MemberMap:
    """Normalize a fragment-key -> ids mapping into immutable sets."""
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        raise ValidationError("map", f"Members of '{group}' must be a mapping", raw)
    return MappingProxyType({
        str(key): frozenset(coerce_element_id(v, group) for v in ids)
        for key, ids in raw.items()
    })


def _union(members: MemberMap) -> frozenset[int]:
    result: set[int] = set()
    for ids in members.values():
        result.update(ids)
    return frozenset(result)


@dataclass(frozen=True)
class SpatialGroup:
    """Elements contained by one spatial structure element (site, storey, ...).

    Attributes:
        id: Id of the spatial element itself
        name: Group name reported by the classifier
        members: Fragment key -> contained ids; may list nested spatial ids
    """

    id: int
    name: str
    members: MemberMap

    @classmethod
    def from_raw(cls, name: str, raw: Mapping[str, Any]) -> SpatialGroup:
        """Create from classifier output of the form ``{"id": int, "map": {...}}``."""
        if not isinstance(raw, Mapping) or "id" not in raw:
            raise ValidationError("id", f"Spatial group '{name}' has no id", raw)
        return cls(
            id=coerce_element_id(raw["id"], name),
            name=name,
            members=_freeze_members(raw.get("map"), name),
        )

    def member_ids(self) -> frozenset[int]:
        """Union of all member sets."""
        return _union(self.members)


@dataclass(frozen=True)
class EntityGroup:
    """Elements sharing one IFC entity type.

    Attributes:
        type_name: IFC class name as reported (e.g. "IFCWALL")
        members: Fragment key -> ids of that type
    """

    type_name: str
    members: MemberMap

    @classmethod
    def from_raw(cls, type_name: str, raw: Any) -> EntityGroup:
        """Create from either classifier output shape.

        Accepts ``{"map": {fragment: ids}}`` as well as a list of entity
        records ``[{"expressID": int, ...}, ...]``.
        """
        if isinstance(raw, Mapping):
            return cls(type_name=type_name, members=_freeze_members(raw.get("map"), type_name))
        if isinstance(raw, (list, tuple)):
            ids = []
            for record in raw:
                if not isinstance(record, Mapping) or "expressID" not in record:
                    raise ValidationError(
                        "expressID", f"Entity record of '{type_name}' has no expressID", record
                    )
                ids.append(coerce_element_id(record["expressID"], type_name))
            return cls(type_name=type_name, members=MappingProxyType({"": frozenset(ids)}))
        raise ValidationError("entities", f"Unsupported entity group shape for '{type_name}'", raw)

    @property
    def entity_type(self) -> EntityType:
        """Parsed entity type."""
        return EntityType.parse(self.type_name)

    def member_ids(self) -> frozenset[int]:
        """Union of all member sets."""
        return _union(self.members)


@dataclass(frozen=True)
class ClassificationSnapshot:
    """Immutable classification of one model load.

    Attributes:
        generation: Load generation this snapshot belongs to
        spatial_groups: Groups by spatial container, in classifier order
        entity_groups: Groups by entity type, in classifier order
    """

    generation: int
    spatial_groups: tuple[SpatialGroup, ...] = ()
    entity_groups: tuple[EntityGroup, ...] = ()

    @classmethod
    def from_raw(
        cls,
        spatial: Mapping[str, Mapping[str, Any]] | None,
        entities: Mapping[str, Any] | None,
        *,
        generation: int = 0,
    ) -> ClassificationSnapshot:
        """Create a snapshot from raw classifier mappings.

        Args:
            spatial: Group name -> ``{"id": int, "map": {...}}``
            entities: Type name -> ``{"map": {...}}`` or list of entity records
            generation: Load generation

        Raises:
            ValidationError: If ids or group shapes are malformed
        """
        return cls(
            generation=generation,
            spatial_groups=tuple(
                SpatialGroup.from_raw(name, raw) for name, raw in (spatial or {}).items()
            ),
            entity_groups=tuple(
                EntityGroup.from_raw(name, raw) for name, raw in (entities or {}).items()
            ),
        )

    @property
    def has_spatial_structure(self) -> bool:
        """Check if any spatial groups were classified."""
        return bool(self.spatial_groups)

    def element_ids(self) -> frozenset[int]:
        """Every id mentioned by any group, including spatial group ids."""
        ids: set[int] = set()
        for group in self.spatial_groups:
            ids.add(group.id)
            ids.update(group.member_ids())
        for entity_group in self.entity_groups:
            ids.update(entity_group.member_ids())
        return frozenset(ids)

    def project_id(self) -> int | None:
        """Id of the IFCPROJECT entity, if classified."""
        for entity_group in self.entity_groups:
            if entity_group.entity_type.is_project:
                ids = entity_group.member_ids()
                if ids:
                    return min(ids)
        return None


@dataclass(frozen=True)
class SpatialResult:
    """Classification with spatial structure available."""

    snapshot: ClassificationSnapshot

    @property
    def generation(self) -> int:
        return self.snapshot.generation


@dataclass(frozen=True)
class EntityOnlyResult:
    """Classification by entity type only; spatial indexing failed."""

    snapshot: ClassificationSnapshot
    reason: str

    @property
    def generation(self) -> int:
        return self.snapshot.generation


@dataclass(frozen=True)
class ErrorResult:
    """Classification failed entirely."""

    reason: str
    generation: int = 0


ClassificationResult = SpatialResult | EntityOnlyResult | ErrorResult
