"""IFC Entity Type Value Object.

Maps raw IFC class names onto the labels shown in the model tree.
"""
from __future__ import annotations

from dataclasses import dataclass


# Friendly labels for the IFC classes the tree knows by name
FRIENDLY_NAMES: dict[str, str] = {
    "IFCPROJECT": "Project",
    "IFCSITE": "Site",
    "IFCBUILDING": "Building",
    "IFCBUILDINGSTOREY": "Storey",
    "IFCSPACE": "Space",
    "IFCWALL": "Wall",
    "IFCWALLSTANDARDCASE": "Wall",
    "IFCWINDOW": "Window",
    "IFCDOOR": "Door",
    "IFCCOLUMN": "Column",
    "IFCSLAB": "Slab",
    "IFCBEAM": "Beam",
    "IFCFURNITUREELEMENT": "Furniture",
    "IFCFURNISHINGELEMENT": "Furniture",
    "IFCSTAIR": "Stair",
    "IFCRAILING": "Railing",
    "IFCROOF": "Roof",
    "IFCMEMBER": "Member",
    "IFCPLATE": "Plate",
}

# Root ordering in the tree: containers from outermost to innermost
ROOT_PRIORITY: dict[str, int] = {
    "Project": 1,
    "Site": 2,
    "Building": 3,
    "Storey": 4,
    "Space": 5,
}

UNRANKED_PRIORITY = 100

# Bare labels ("STOREY", "IFCSTOREY") resolve like their IFC classes
_LABEL_LOOKUP: dict[str, str] = {label.upper(): label for label in FRIENDLY_NAMES.values()}

PROJECT_CLASS = "IFCPROJECT"


@dataclass(frozen=True, slots=True)
class EntityType:
    """Value Object for an IFC entity class as displayed in the tree.

    Attributes:
        ifc_class: Upper-cased IFC class name (e.g. "IFCBUILDINGSTOREY")

    Example:
        >>> EntityType.parse("IfcBuildingStorey").label
        'Storey'
        >>> EntityType.parse("IFCSTOREY").plural
        'Storeys'
    """

    ifc_class: str

    @classmethod
    def parse(cls, value: str | None) -> EntityType:
        """Create an EntityType from an IFC class name in any case.

        Args:
            value: IFC class name (e.g. "IfcWall", "IFCWALL")

        Returns:
            EntityType; empty input yields the "UNKNOWN" type
        """
        if not value or not value.strip():
            return cls("UNKNOWN")
        return cls(value.strip().upper())

    @property
    def label(self) -> str:
        """Friendly singular label."""
        if self.ifc_class == "UNKNOWN":
            return "Unknown"
        if self.ifc_class in FRIENDLY_NAMES:
            return FRIENDLY_NAMES[self.ifc_class]
        bare = self.ifc_class[3:] if self.ifc_class.startswith("IFC") else self.ifc_class
        return _LABEL_LOOKUP.get(self.ifc_class) or _LABEL_LOOKUP.get(bare, self.ifc_class)

    @property
    def plural(self) -> str:
        """Plural label used for type group headers."""
        return pluralize(self.label)

    @property
    def priority(self) -> int:
        """Sort priority when the type heads a root container."""
        return label_priority(self.label)

    @property
    def is_project(self) -> bool:
        """Check if this is the IFC project class."""
        return self.ifc_class == PROJECT_CLASS

    def __str__(self) -> str:
        return self.label


def pluralize(label: str) -> str:
    """Pluralize a type label ("Storey" -> "Storeys", "Assembly" -> "Assemblies")."""
    if label.endswith("y") and len(label) > 1 and label[-2].lower() not in "aeiou":
        return label[:-1] + "ies"
    return label + "s"


def label_priority(label: str | None) -> int:
    """Sort priority of a friendly type label (unranked labels sort last)."""
    return ROOT_PRIORITY.get(label or "", UNRANKED_PRIORITY)
