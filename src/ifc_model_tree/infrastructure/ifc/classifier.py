"""IFC Classifier using IfcOpenShell.

Groups a model's elements by spatial container and by entity type.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import ifcopenshell

from ifc_model_tree.domain import (
    ClassificationResult,
    ClassificationSnapshot,
    EntityGroup,
    EntityOnlyResult,
    ErrorResult,
    IfcFileNotFoundError,
    IfcParseError,
    SpatialGroup,
    SpatialResult,
    UnsupportedIfcSchemaError,
    ValidationError,
)
from ifc_model_tree.shared.config import settings
from ifc_model_tree.shared.logging import get_logger


logger = get_logger(__name__)


# Entity groups carry no geometry partition; all members share one key
ENTITY_FRAGMENT_KEY = "0"


class IfcClassifier:
    """Classifies an IFC model for the model tree."""

    # Supported IFC schemas
    SUPPORTED_SCHEMAS = {"IFC2X3", "IFC4", "IFC4X1", "IFC4X2", "IFC4X3"}

    # Classes listed in the entity classification
    ENTITY_CLASSES = ("IfcProject", "IfcProduct")

    def __init__(self, source: str | Path | ifcopenshell.file) -> None:
        """Initialize classifier with an IFC file path or an opened model.

        Args:
            source: Path to IFC file, or an ifcopenshell file

        Raises:
            IfcFileNotFoundError: If the path doesn't exist
            ValidationError: If the file exceeds the configured size limit
        """
        if isinstance(source, ifcopenshell.file):
            self.file_path: Path | None = None
            self._ifc: ifcopenshell.file | None = source
            return

        self.file_path = Path(source)
        if not self.file_path.exists():
            raise IfcFileNotFoundError(str(self.file_path))

        size = self.file_path.stat().st_size
        if size > settings.ifc_max_file_size_bytes:
            raise ValidationError(
                "file_size",
                f"IFC file exceeds {settings.ifc_max_file_size_mb} MB",
                size,
            )
        self._ifc = None

    @property
    def ifc(self) -> ifcopenshell.file:
        """Get loaded IFC file."""
        if self._ifc is None:
            self._load_file()
        return self._ifc  # type: ignore

    def _load_file(self) -> None:
        """Load and validate IFC file."""
        try:
            self._ifc = ifcopenshell.open(str(self.file_path))
        except Exception as e:
            raise IfcParseError(str(self.file_path), str(e)) from e

        schema = self._ifc.schema
        if schema not in self.SUPPORTED_SCHEMAS:
            raise UnsupportedIfcSchemaError(schema, sorted(self.SUPPORTED_SCHEMAS))

        logger.info("IFC file loaded", schema=schema, path=str(self.file_path))

    def classify(self, generation: int = 0) -> ClassificationResult:
        """Classify the model.

        Args:
            generation: Load generation stamped on the snapshot

        Returns:
            SpatialResult, or EntityOnlyResult if the spatial structure could
            not be indexed, or ErrorResult if entity grouping failed

        Raises:
            IfcParseError: If the file cannot be opened
            UnsupportedIfcSchemaError: If the schema is not supported
        """
        ifc = self.ifc

        try:
            entity_groups = self._entity_groups(ifc)
        except Exception as e:
            logger.error("Entity classification failed", error=str(e))
            return ErrorResult(reason=str(e), generation=generation)

        try:
            spatial_groups = self._spatial_groups(ifc)
        except Exception as e:
            logger.warning("Spatial indexing failed", error=str(e))
            return EntityOnlyResult(
                snapshot=ClassificationSnapshot(
                    generation=generation,
                    entity_groups=entity_groups,
                ),
                reason=str(e),
            )

        snapshot = ClassificationSnapshot(
            generation=generation,
            spatial_groups=spatial_groups,
            entity_groups=entity_groups,
        )
        logger.info(
            "IFC model classified",
            generation=generation,
            spatial_groups=len(spatial_groups),
            entity_groups=len(entity_groups),
        )

        if not snapshot.has_spatial_structure:
            return EntityOnlyResult(snapshot=snapshot, reason="model has no spatial structure")
        return SpatialResult(snapshot=snapshot)

    def _entity_groups(self, ifc: ifcopenshell.file) -> tuple[EntityGroup, ...]:
        """Group project and products by IFC class."""
        by_class: dict[str, set[int]] = {}
        for entity_class in self.ENTITY_CLASSES:
            for element in ifc.by_type(entity_class):
                by_class.setdefault(element.is_a().upper(), set()).add(element.id())

        return tuple(
            EntityGroup.from_raw(type_name, {"map": {ENTITY_FRAGMENT_KEY: ids}})
            for type_name, ids in by_class.items()
        )

    def _spatial_groups(self, ifc: ifcopenshell.file) -> tuple[SpatialGroup, ...]:
        """One group per project and spatial element, listing its direct members."""
        containers = list(ifc.by_type("IfcProject"))
        try:
            containers.extend(ifc.by_type("IfcSpatialElement"))
        except RuntimeError:
            # IFC2X3 has no IfcSpatialElement
            containers.extend(ifc.by_type("IfcSpatialStructureElement"))

        groups = []
        for container in containers:
            members: dict[str, set[int]] = {}
            for member in self._direct_members(container):
                members.setdefault(member.is_a().upper(), set()).add(member.id())

            groups.append(
                SpatialGroup.from_raw(
                    self._container_name(container),
                    {"id": container.id(), "map": members},
                )
            )
        return tuple(groups)

    @staticmethod
    def _direct_members(container: Any) -> list[Any]:
        """Aggregated children and contained elements of a container."""
        members = []
        for rel in getattr(container, "IsDecomposedBy", None) or ():
            if rel.is_a("IfcRelAggregates"):
                members.extend(rel.RelatedObjects)
        for rel in getattr(container, "ContainsElements", None) or ():
            if rel.is_a("IfcRelContainedInSpatialStructure"):
                members.extend(rel.RelatedElements)
        return members

    @staticmethod
    def _container_name(container: Any) -> str:
        name = getattr(container, "Name", None) or getattr(container, "LongName", None)
        if name:
            return str(name)
        return f"{container.is_a()} #{container.id()}"
