"""Pytest configuration and fixtures."""
from __future__ import annotations

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio

from ifc_model_tree.application.services.tree_service import ModelTreeService
from ifc_model_tree.domain import ClassificationSnapshot, SpatialResult
from ifc_model_tree.shared.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with small batches and debug logging."""
    return Settings(
        name_batch_size=2,
        parent_policy="first",
        type_group_stride=1000,
        log_level="DEBUG",
    )


@pytest.fixture
def building_snapshot() -> ClassificationSnapshot:
    """Building 1 holding Storey 10, which holds wall 2 and door 3."""
    return ClassificationSnapshot.from_raw(
        {
            "Building": {"id": 1, "map": {"f1": [2, 3, 10]}},
            "Storey": {"id": 10, "map": {"f1": [2, 3]}},
        },
        {
            "WALL": {"map": {"f1": [2]}},
            "DOOR": {"map": {"f1": [3]}},
        },
        generation=1,
    )


@pytest.fixture
def project_snapshot() -> ClassificationSnapshot:
    """Full hierarchy: Project 100 > Site 101 > Building 102 > Storey 103."""
    return ClassificationSnapshot.from_raw(
        {
            "Project": {"id": 100, "map": {"0": [101]}},
            "Site": {"id": 101, "map": {"0": [102]}},
            "Building": {"id": 102, "map": {"0": [103]}},
            "Ground Floor": {"id": 103, "map": {"0": [200, 201, 300]}},
        },
        {
            "IFCPROJECT": {"map": {"0": [100]}},
            "IFCSITE": {"map": {"0": [101]}},
            "IFCBUILDING": {"map": {"0": [102]}},
            "IFCBUILDINGSTOREY": {"map": {"0": [103]}},
            "IFCWALL": {"map": {"0": [200, 201]}},
            "IFCWINDOW": {"map": {"0": [300]}},
        },
        generation=1,
    )


class FakePropertyStore:
    """In-memory property fetch recording its calls."""

    def __init__(
        self,
        names: dict[int, str] | None = None,
        failing: set[int] | None = None,
    ) -> None:
        self.names = names or {}
        self.failing = failing or set()
        self.calls: list[int] = []

    async def __call__(self, element_id: int) -> dict[str, Any]:
        self.calls.append(element_id)
        if element_id in self.failing:
            raise RuntimeError(f"no properties for {element_id}")
        properties: dict[str, Any] = {"expressID": {"value": element_id}}
        if element_id in self.names:
            properties["Name"] = {"value": self.names[element_id]}
        return properties


@pytest.fixture
def property_store() -> FakePropertyStore:
    """Property fetch naming the elements of ``project_snapshot``."""
    return FakePropertyStore(
        names={
            100: "Demo Project",
            101: "Default Site",
            102: "Office",
            103: "Ground Floor",
            200: "Wall B",
            201: "Wall A",
            300: "Window 1",
        }
    )


@pytest_asyncio.fixture
async def loaded_service(
    project_snapshot: ClassificationSnapshot,
    property_store: FakePropertyStore,
) -> AsyncGenerator[ModelTreeService, None]:
    """Model tree service with ``project_snapshot`` loaded."""
    service = ModelTreeService()
    generation = service.begin_load()
    await service.load(SpatialResult(snapshot=project_snapshot), property_store, generation=generation)
    yield service
    service.clear_selection()


@pytest.fixture
def make_store() -> type[FakePropertyStore]:
    """Factory for property fetches with chosen names and failures."""
    return FakePropertyStore
