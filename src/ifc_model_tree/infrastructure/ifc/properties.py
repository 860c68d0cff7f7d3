"""IFC Property Fetch.

Reads an element's attributes and property sets for name resolution and
the property panel.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.util.element

from ifc_model_tree.domain import ClassificationResult, EntityNotFoundError
from ifc_model_tree.infrastructure.ifc.classifier import IfcClassifier
from ifc_model_tree.shared.logging import get_logger


logger = get_logger(__name__)


class IfcPropertyFetcher:
    """Property fetch over an opened IFC model."""

    def __init__(self, ifc: ifcopenshell.file) -> None:
        self._ifc = ifc

    async def __call__(self, element_id: int) -> dict[str, Any]:
        """Fetch properties of one element.

        Lookups are in-memory, so the coroutine completes without awaiting.

        Raises:
            EntityNotFoundError: If the model has no such element
        """
        return self.get_properties(element_id)

    def get_properties(self, element_id: int) -> dict[str, Any]:
        """Attributes as ``{name: {"value": v}}`` plus property sets.

        Args:
            element_id: Express id of the element

        Returns:
            Mapping of attribute and property set names to value records
        """
        try:
            entity = self._ifc.by_id(element_id)
        except RuntimeError:
            raise EntityNotFoundError("IfcEntity", element_id) from None

        properties: dict[str, Any] = {
            "expressID": {"value": element_id},
        }
        for key, value in entity.get_info(recursive=False).items():
            if key == "id":
                continue
            properties[key] = {"value": self._plain(value)}

        try:
            psets = ifcopenshell.util.element.get_psets(entity)
        except Exception as e:
            logger.warning("Failed to read property sets", element_id=element_id, error=str(e))
            psets = {}

        for pset_name, values in psets.items():
            properties[pset_name] = {
                "value": {k: self._plain(v) for k, v in values.items() if k != "id"},
            }

        return properties

    @classmethod
    def _plain(cls, value: Any) -> Any:
        """Replace entity references with readable labels."""
        if isinstance(value, ifcopenshell.entity_instance):
            return f"#{value.id()} {value.is_a()}"
        if isinstance(value, (list, tuple)):
            return [cls._plain(v) for v in value]
        return value


def open_model(
    file_path: str | Path,
    *,
    generation: int = 0,
) -> tuple[ClassificationResult, IfcPropertyFetcher]:
    """Convenience function to classify an IFC file and get its property fetch."""
    classifier = IfcClassifier(file_path)
    result = classifier.classify(generation=generation)
    return result, IfcPropertyFetcher(classifier.ifc)
