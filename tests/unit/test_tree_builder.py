"""Tests for the model tree builder."""
from __future__ import annotations

from collections import Counter

import pytest

from ifc_model_tree.application.services.tree_builder import (
    ERROR_TREE_NAME,
    TreeBuilder,
    build_tree,
    build_tree_from_result,
)
from ifc_model_tree.domain import (
    ClassificationSnapshot,
    EntityOnlyResult,
    ErrorResult,
    IndexingError,
    ParentPolicy,
    SpatialResult,
    TreeNode,
)


def _names(nodes: list[TreeNode]) -> list[str]:
    return [node.name for node in nodes]


def _element_ids(root: TreeNode) -> list[int]:
    return [node.id for node in root.walk() if node.id > 0]


class TestSpatialBuild:
    """Tests for the nested spatial tree."""

    def test_storey_nested_under_building(self, building_snapshot: ClassificationSnapshot) -> None:
        """Test the building/storey scenario."""
        builder = TreeBuilder(stride=1000)
        root = builder.build(building_snapshot, {2: "Wall 1", 3: "Door 1"})

        assert root.id == 0
        assert root.name == "Project"
        assert root.type_label == "Project"

        [building] = root.children
        assert building.id == 1
        assert building.type_label == "Building"

        # Building keeps no direct elements once Storey took them
        [storey] = building.children
        assert storey.id == 10
        assert storey.type_label == "Storey"

        assert _names(storey.children) == ["Doors (1)", "Walls (1)"]
        doors, walls = storey.children
        assert [leaf.id for leaf in walls.children] == [2]
        assert [leaf.id for leaf in doors.children] == [3]
        assert walls.children[0].name == "Wall 1"
        assert walls.children[0].type_label == "Wall"

    def test_type_group_ids_are_synthetic(self, building_snapshot: ClassificationSnapshot) -> None:
        """Test type group headers carry scoped negative ids."""
        root = TreeBuilder(stride=1000).build(building_snapshot, {})
        storey = root.find(10)
        assert storey is not None

        ids = sorted(group.id for group in storey.children)
        assert ids == [-10002, -10001]
        for group in storey.children:
            assert group.is_synthetic
            assert not group.is_selectable
            assert group.type_label in {"WallGroup", "DoorGroup"}

    def test_project_entity_becomes_root(self, project_snapshot: ClassificationSnapshot) -> None:
        """Test the IFCPROJECT spatial group is the root itself."""
        root = TreeBuilder(stride=1000).build(project_snapshot, {})

        assert root.id == 100
        assert root.selectable_id == 100
        assert root.type_label == "Project"

        site = root.children[0]
        assert (site.id, site.type_label) == (101, "Site")
        building = site.children[0]
        assert (building.id, building.type_label) == (102, "Building")
        storey = building.children[0]
        assert (storey.id, storey.name, storey.type_label) == (103, "Ground Floor", "Storey")

    def test_leaves_sorted_by_name(self, project_snapshot: ClassificationSnapshot) -> None:
        """Test type group children are ordered by resolved name."""
        names = {200: "Wall B", 201: "Wall A", 300: "Window 1"}
        root = TreeBuilder(stride=1000).build(project_snapshot, names)

        walls = root.find(-103001)
        assert walls is not None
        assert walls.name == "Walls (2)"
        assert _names(walls.children) == ["Wall A", "Wall B"]

    def test_missing_names_use_placeholder(self, project_snapshot: ClassificationSnapshot) -> None:
        """Test elements without a resolved name."""
        root = TreeBuilder(stride=1000).build(project_snapshot, {})
        window = root.find(300)
        assert window is not None
        assert window.name == "Element 300"

    def test_each_element_appears_once(self) -> None:
        """Test an element listed by several containers is placed once."""
        snapshot = ClassificationSnapshot.from_raw(
            {
                "Site": {"id": 1, "map": {"a": [2, 5], "b": [5]}},
                "Building": {"id": 2, "map": {"a": [3, 5, 6]}},
                "Storey": {"id": 3, "map": {"a": [5, 7]}},
            },
            {
                "IFCWALL": {"map": {"a": [5, 6, 7]}},
                "IFCSLAB": {"map": {"a": [8]}},
            },
        )
        root = TreeBuilder(stride=1000).build(snapshot, {})

        counts = Counter(_element_ids(root))
        assert all(count == 1 for count in counts.values())
        assert set(counts) == {1, 2, 3, 5, 6, 7, 8}

        # Deepest container owns the shared element
        storey = root.find(3)
        assert storey is not None
        assert 5 in [node.id for node in storey.walk()]

        # Entity-only elements land under the root
        assert root.find(8) in [leaf for group in root.children for leaf in group.children]

    def test_synthetic_ids_unique(self, project_snapshot: ClassificationSnapshot) -> None:
        """Test synthetic ids never collide across the tree."""
        root = TreeBuilder(stride=1000).build(project_snapshot, {})
        synthetic = [node.id for node in root.walk() if node.id < 0]
        assert len(synthetic) == len(set(synthetic))

    def test_stride_grows_with_type_count(self) -> None:
        """Test a tiny stride still yields unique header ids."""
        snapshot = ClassificationSnapshot.from_raw(
            {
                "A": {"id": 1, "map": {"0": [10, 11, 12]}},
                "B": {"id": 2, "map": {"0": [20, 21, 22]}},
            },
            {
                "IFCWALL": {"map": {"0": [10, 20]}},
                "IFCDOOR": {"map": {"0": [11, 21]}},
                "IFCSLAB": {"map": {"0": [12, 22]}},
            },
        )
        root = TreeBuilder(stride=2).build(snapshot, {})
        synthetic = [node.id for node in root.walk() if node.id < 0]
        assert len(synthetic) == 6
        assert len(set(synthetic)) == 6

    def test_nested_containers_before_type_groups(self) -> None:
        """Test a container lists nested containers ahead of its element groups."""
        snapshot = ClassificationSnapshot.from_raw(
            {
                "Building": {"id": 1, "map": {"0": [10, 5]}},
                "Storey": {"id": 10, "map": {"0": [6]}},
            },
            {"IFCBEAM": {"map": {"0": [5]}}, "IFCWALL": {"map": {"0": [6]}}},
        )
        root = TreeBuilder(stride=1000).build(snapshot, {})
        building = root.find(1)
        assert building is not None
        assert [node.id for node in building.children] == [10, -1001]
        assert building.children[1].name == "Beams (1)"

    def test_untyped_elements_grouped(self) -> None:
        """Test elements with no entity group."""
        snapshot = ClassificationSnapshot.from_raw(
            {"Storey": {"id": 1, "map": {"0": [2, 3]}}},
            {"IFCWALL": {"map": {"0": [2]}}},
        )
        root = TreeBuilder(stride=1000).build(snapshot, {})
        storey = root.find(1)
        assert storey is not None
        assert _names(storey.children) == ["Elements (1)", "Walls (1)"]

    def test_roots_sorted_by_priority(self) -> None:
        """Test unattached containers are ordered Site before Building before others."""
        snapshot = ClassificationSnapshot.from_raw(
            {
                "Zone": {"id": 4, "map": {}},
                "Building": {"id": 2, "map": {}},
                "Site": {"id": 1, "map": {}},
            },
            {
                "IFCZONE": {"map": {"0": [4]}},
                "IFCBUILDING": {"map": {"0": [2]}},
                "IFCSITE": {"map": {"0": [1]}},
            },
        )
        root = TreeBuilder(stride=1000).build(snapshot, {})
        assert [node.id for node in root.children] == [1, 2, 4]

    def test_project_wrapper_uses_project_name(self) -> None:
        """Test a project that is not a spatial group still names the root."""
        snapshot = ClassificationSnapshot.from_raw(
            {"Site": {"id": 2, "map": {}}},
            {"IFCPROJECT": {"map": {"0": [1]}}, "IFCSITE": {"map": {"0": [2]}}},
        )
        root = TreeBuilder(stride=1000).build(snapshot, {1: "Tower"})
        assert (root.id, root.name) == (1, "Tower")
        assert [node.id for node in root.children] == [2]

    def test_no_spatial_groups_raises_indexing_error(self) -> None:
        """Test build_spatial refuses an entity-only snapshot."""
        snapshot = ClassificationSnapshot.from_raw(None, {"IFCWALL": {"map": {"0": [1]}}})
        with pytest.raises(IndexingError):
            TreeBuilder().build_spatial(snapshot, {})


class TestParentPolicy:
    """Tests for spatial groups listed by several containers."""

    @pytest.fixture
    def shared_space(self) -> ClassificationSnapshot:
        # Space 3 is listed by both Building 1 and Storey 2
        return ClassificationSnapshot.from_raw(
            {
                "Building": {"id": 1, "map": {"0": [2, 3, 50]}},
                "Storey": {"id": 2, "map": {"0": [3]}},
                "Space": {"id": 3, "map": {"0": [60]}},
            },
            {
                "IFCBUILDING": {"map": {"0": [1]}},
                "IFCBUILDINGSTOREY": {"map": {"0": [2]}},
                "IFCSPACE": {"map": {"0": [3]}},
                "IFCWALL": {"map": {"0": [50, 60]}},
            },
        )

    def _parent_of(self, root: TreeNode, node_id: int) -> TreeNode | None:
        for node in root.walk():
            if any(child.id == node_id for child in node.children):
                return node
        return None

    def test_first_match(self, shared_space: ClassificationSnapshot) -> None:
        """Test the first candidate in seed order adopts the node."""
        root = TreeBuilder(policy=ParentPolicy.FIRST_MATCH, stride=1000).build(shared_space, {})
        parent = self._parent_of(root, 3)
        assert parent is not None and parent.id == 1

    def test_innermost(self, shared_space: ClassificationSnapshot) -> None:
        """Test the smallest container adopts the node."""
        root = TreeBuilder(policy="innermost", stride=1000).build(shared_space, {})
        parent = self._parent_of(root, 3)
        assert parent is not None and parent.id == 2

    @pytest.mark.parametrize("policy", ["first", "innermost"])
    def test_single_parent(self, shared_space: ClassificationSnapshot, policy: str) -> None:
        """Test the node is attached exactly once under either policy."""
        root = TreeBuilder(policy=policy, stride=1000).build(shared_space, {})
        assert Counter(_element_ids(root))[3] == 1

    def test_cycle_is_broken(self) -> None:
        """Test two containers listing each other still form a tree."""
        snapshot = ClassificationSnapshot.from_raw(
            {
                "A": {"id": 1, "map": {"0": [2]}},
                "B": {"id": 2, "map": {"0": [1]}},
            },
            {},
        )
        root = TreeBuilder(stride=1000).build(snapshot, {})
        counts = Counter(_element_ids(root))
        assert counts == Counter({1: 1, 2: 1})


class TestFallbacks:
    """Tests for entity-only and error trees."""

    def test_entity_only_tree(self) -> None:
        """Test categories per entity type without spatial groups."""
        root = build_tree(
            None,
            {"WALL": {"map": {"f1": [7, 8]}}, "DOOR": {"map": {"f1": [9]}}},
            {7: "W7", 8: "W8", 9: "D9"},
            stride=1000,
        )

        assert root.type_label == "Project"
        assert _names(root.children) == ["Doors (1)", "Walls (2)"]
        doors, walls = root.children
        assert [leaf.id for leaf in walls.children] == [7, 8]
        assert [leaf.id for leaf in doors.children] == [9]
        assert all(not leaf.children for leaf in walls.children)

    def test_entity_list_shape(self) -> None:
        """Test entity groups given as lists of entity records."""
        root = build_tree(
            None,
            {"IFCWALL": [{"expressID": 7}, {"expressID": 8}]},
            {},
        )
        [walls] = root.children
        assert walls.name == "Walls (2)"

    def test_unknown_policy_does_not_raise(self, building_snapshot: ClassificationSnapshot) -> None:
        """Test an unknown parent policy falls back to first match."""
        root = build_tree(
            building_snapshot.spatial_groups,
            building_snapshot.entity_groups,
            {},
            policy="outermost",
        )
        assert root.find(10) is not None
        assert root.name != ERROR_TREE_NAME

    def test_invalid_spatial_data_falls_back(self) -> None:
        """Test malformed spatial groups degrade to entity categories."""
        root = build_tree(
            {"Storey": {"map": {"0": [1]}}},
            {"IFCWALL": {"map": {"0": [1]}}},
            {},
        )
        assert _names(root.children) == ["Walls (1)"]

    def test_invalid_entity_data_gives_error_tree(self) -> None:
        """Test malformed entity groups yield the error node."""
        root = build_tree({}, {"IFCWALL": {"map": {"0": [-4]}}}, {})
        assert root.name == ERROR_TREE_NAME
        assert root.id == 0
        assert root.children == []

    def test_error_result(self) -> None:
        """Test an ErrorResult maps to the error node."""
        root = build_tree_from_result(ErrorResult(reason="boom"), {})
        assert root.name == ERROR_TREE_NAME
        assert not root.is_selectable

    def test_entity_only_result(self) -> None:
        """Test an EntityOnlyResult skips spatial nesting."""
        snapshot = ClassificationSnapshot.from_raw(
            {"Storey": {"id": 1, "map": {"0": [2]}}},
            {"IFCPROJECT": {"map": {"0": [5]}}, "IFCWALL": {"map": {"0": [2]}}},
        )
        root = build_tree_from_result(
            EntityOnlyResult(snapshot=snapshot, reason="indexing failed"),
            {5: "Tower"},
        )
        assert (root.id, root.name) == (5, "Tower")
        assert _names(root.children) == ["Walls (1)"]

    def test_spatial_result(self, building_snapshot: ClassificationSnapshot) -> None:
        """Test a SpatialResult builds the nested tree."""
        root = build_tree_from_result(SpatialResult(snapshot=building_snapshot), {})
        assert root.find(10) is not None
        assert root.find(1) is not None
