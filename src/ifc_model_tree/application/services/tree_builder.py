"""Model Tree Builder.

Turns a classification snapshot (elements grouped by spatial container and
by entity type) into one deduplicated, nested tree under a Project root.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ifc_model_tree.domain import (
    ClassificationResult,
    ClassificationSnapshot,
    EntityGroup,
    EntityOnlyResult,
    EntityType,
    ErrorResult,
    IndexingError,
    ParentPolicy,
    SpatialGroup,
    SpatialResult,
    TreeNode,
    placeholder_name,
)
from ifc_model_tree.domain.value_objects import UNRANKED_PRIORITY, label_priority, pluralize
from ifc_model_tree.shared.config import settings
from ifc_model_tree.shared.logging import get_logger

logger = get_logger(__name__)


PLACEHOLDER_ROOT_ID = 0
PROJECT_LABEL = "Project"
ERROR_TREE_NAME = "Error loading structure"
UNTYPED_LABEL = "Element"


def error_tree() -> TreeNode:
    """Single-node tree returned when no classification could be built."""
    return TreeNode(
        id=0,
        selectable_id=0,
        name=ERROR_TREE_NAME,
        type_label=PROJECT_LABEL,
        children=[],
    )


def _sort_key(node: TreeNode) -> tuple[int, str, str, int]:
    """Containers: Project, Site, Building, Storey, Space, then others by type."""
    priority = label_priority(node.type_label)
    type_key = "" if priority < UNRANKED_PRIORITY else (node.type_label or "")
    return priority, type_key, node.name.casefold(), node.id


@dataclass
class _BuildState:
    """Per-build lookup tables."""

    name_map: Mapping[int, str]
    type_index: dict[int, EntityType] = field(default_factory=dict)
    label_order: list[str] = field(default_factory=list)
    leaves: dict[int, TreeNode] = field(default_factory=dict)
    stride: int = 1000


class TreeBuilder:
    """Builds model structure trees from classification snapshots."""

    def __init__(
        self,
        policy: ParentPolicy | str | None = None,
        stride: int | None = None,
    ) -> None:
        """Initialize builder.

        Args:
            policy: Parent rule for spatial groups listed by several containers
            stride: Id range reserved per spatial node for type group headers
        """
        self._policy = ParentPolicy.from_string(policy or settings.parent_policy)
        self._stride = stride or settings.type_group_stride

    @property
    def policy(self) -> ParentPolicy:
        return self._policy

    # =========================================================================
    # Entry Points
    # =========================================================================

    def build(
        self,
        snapshot: ClassificationSnapshot,
        name_map: Mapping[int, str],
    ) -> TreeNode:
        """Build the tree, degrading to entity-only and then to an error node.

        Never raises.
        """
        try:
            return self.build_spatial(snapshot, name_map)
        except IndexingError as e:
            logger.warning(
                "Spatial structure unavailable, using entity types",
                generation=snapshot.generation,
                reason=e.reason,
            )
        except Exception as e:
            logger.warning(
                "Spatial tree build failed, using entity types",
                generation=snapshot.generation,
                error=str(e),
            )

        return self.build_entity_only_or_error(snapshot, name_map)

    def build_entity_only_or_error(
        self,
        snapshot: ClassificationSnapshot,
        name_map: Mapping[int, str],
    ) -> TreeNode:
        """Build the flat entity tree, or the error node if that fails too."""
        try:
            return self.build_entity_only(snapshot, name_map)
        except Exception as e:
            logger.error(
                "Entity tree build failed",
                generation=snapshot.generation,
                error=str(e),
            )
            return error_tree()

    # =========================================================================
    # Spatial Build
    # =========================================================================

    def build_spatial(
        self,
        snapshot: ClassificationSnapshot,
        name_map: Mapping[int, str],
    ) -> TreeNode:
        """Build the nested spatial tree.

        Raises:
            IndexingError: If the snapshot holds no spatial groups
        """
        if not snapshot.has_spatial_structure:
            raise IndexingError(
                "no spatial groups classified",
                {"generation": snapshot.generation},
            )

        state = self._new_state(snapshot, name_map)
        project_id = snapshot.project_id()

        # Seed one node per spatial group id
        nodes: dict[int, TreeNode] = {}
        members: dict[int, set[int]] = {}
        for group in snapshot.spatial_groups:
            if group.id not in nodes:
                nodes[group.id] = self._spatial_node(group, state)
                members[group.id] = set()
            members[group.id].update(group.member_ids())
        order = list(nodes)

        parent_of = self._resolve_nesting(order, members, project_id)
        depth = {gid: self._depth(gid, parent_of) for gid in order}

        # Each element is owned by the deepest container listing it
        skip = set(nodes)
        if project_id is not None:
            skip.add(project_id)
        owner: dict[int, int] = {}
        for gid in order:
            for eid in sorted(members[gid]):
                if eid in skip:
                    continue
                current = owner.get(eid)
                if current is None or depth[gid] > depth[current]:
                    owner[eid] = gid

        direct: dict[int, list[int]] = {gid: [] for gid in order}
        for eid, gid in owner.items():
            direct[gid].append(eid)

        unplaced = [
            eid
            for entity_group in snapshot.entity_groups
            for eid in sorted(entity_group.member_ids())
            if eid not in owner and eid not in skip
        ]

        nested: dict[int, list[TreeNode]] = {gid: [] for gid in order}
        for child_id, parent_id in parent_of.items():
            nested[parent_id].append(nodes[child_id])

        for gid in order:
            if gid == project_id:
                continue
            nodes[gid].children = sorted(nested[gid], key=_sort_key) + self._type_groups(
                gid, direct[gid], state
            )

        roots = [nodes[gid] for gid in order if gid not in parent_of and gid != project_id]

        if project_id is not None and project_id in nodes:
            root = nodes[project_id]
            root.type_label = PROJECT_LABEL
            containers = nested[project_id] + roots
            root_elements = direct[project_id] + unplaced
        else:
            root = self._project_root(project_id, state)
            containers = roots
            root_elements = unplaced

        root.children = sorted(containers, key=_sort_key) + self._type_groups(
            root.id, self._dedupe(root_elements), state
        )

        logger.info(
            "Built spatial model tree",
            generation=snapshot.generation,
            spatial_nodes=len(nodes),
            elements=len(state.leaves),
            unplaced=len(unplaced),
        )
        return root

    def _resolve_nesting(
        self,
        order: list[int],
        members: dict[int, set[int]],
        project_id: int | None,
    ) -> dict[int, int]:
        """Attach spatial nodes listed in other spatial nodes' member sets.

        Consumes nested ids from every candidate parent's member set.

        Returns:
            Child id -> parent id
        """
        sizes = {gid: len(members[gid]) for gid in order}
        parent_of: dict[int, int] = {}

        for child_id in order:
            candidates = [
                pid for pid in order
                if pid != child_id and child_id in members[pid]
            ]
            for pid in candidates:
                members[pid].discard(child_id)

            if child_id == project_id:
                continue

            candidates = [
                pid for pid in candidates
                if not self._is_ancestor(child_id, pid, parent_of)
            ]
            if not candidates:
                continue

            if self._policy is ParentPolicy.INNERMOST:
                parent_id = min(candidates, key=lambda pid: (sizes[pid], order.index(pid)))
            else:
                parent_id = candidates[0]

            if len(candidates) > 1:
                logger.debug(
                    "Spatial group has several containers",
                    group=child_id,
                    candidates=candidates,
                    chosen=parent_id,
                    policy=self._policy.value,
                )
            parent_of[child_id] = parent_id

        return parent_of

    @staticmethod
    def _is_ancestor(ancestor_id: int, node_id: int, parent_of: dict[int, int]) -> bool:
        current: int | None = node_id
        while current is not None:
            if current == ancestor_id:
                return True
            current = parent_of.get(current)
        return False

    @staticmethod
    def _depth(node_id: int, parent_of: dict[int, int]) -> int:
        depth = 0
        while node_id in parent_of:
            node_id = parent_of[node_id]
            depth += 1
        return depth

    # =========================================================================
    # Entity-Only Build
    # =========================================================================

    def build_entity_only(
        self,
        snapshot: ClassificationSnapshot,
        name_map: Mapping[int, str],
    ) -> TreeNode:
        """Build a flat tree: one category per entity type under the Project root."""
        state = self._new_state(snapshot, name_map)
        project_id = snapshot.project_id()

        element_ids = [
            eid
            for entity_group in snapshot.entity_groups
            for eid in sorted(entity_group.member_ids())
            if eid != project_id
        ]

        root = self._project_root(project_id, state)
        root.children = self._type_groups(root.id, self._dedupe(element_ids), state)

        logger.info(
            "Built entity model tree",
            generation=snapshot.generation,
            categories=len(root.children),
            elements=len(state.leaves),
        )
        return root

    # =========================================================================
    # Node Construction
    # =========================================================================

    def _new_state(
        self,
        snapshot: ClassificationSnapshot,
        name_map: Mapping[int, str],
    ) -> _BuildState:
        state = _BuildState(name_map=name_map)
        for entity_group in snapshot.entity_groups:
            entity_type = entity_group.entity_type
            if entity_type.label not in state.label_order:
                state.label_order.append(entity_type.label)
            for eid in entity_group.member_ids():
                state.type_index.setdefault(eid, entity_type)
        # Counters must stay below the stride for ids to be unique per subtree
        state.stride = max(self._stride, len(state.label_order) + 2)
        return state

    def _name(self, element_id: int, state: _BuildState) -> str:
        return state.name_map.get(element_id) or placeholder_name(element_id)

    def _spatial_node(self, group: SpatialGroup, state: _BuildState) -> TreeNode:
        entity_type = state.type_index.get(group.id) or EntityType.parse(group.name)
        return TreeNode(
            id=group.id,
            selectable_id=group.id,
            name=group.name or state.name_map.get(group.id) or f"Group {group.id}",
            type_label=entity_type.label,
        )

    def _project_root(self, project_id: int | None, state: _BuildState) -> TreeNode:
        if project_id is None:
            return TreeNode(
                id=PLACEHOLDER_ROOT_ID,
                selectable_id=PLACEHOLDER_ROOT_ID,
                name=PROJECT_LABEL,
                type_label=PROJECT_LABEL,
            )
        return TreeNode(
            id=project_id,
            selectable_id=project_id,
            name=state.name_map.get(project_id) or f"Project {project_id}",
            type_label=PROJECT_LABEL,
        )

    def _leaf(self, element_id: int, state: _BuildState) -> TreeNode:
        """Get the one node representing an element, creating it on first use."""
        node = state.leaves.get(element_id)
        if node is None:
            entity_type = state.type_index.get(element_id)
            node = TreeNode(
                id=element_id,
                selectable_id=element_id,
                name=self._name(element_id, state),
                type_label=entity_type.label if entity_type else UNTYPED_LABEL,
            )
            state.leaves[element_id] = node
        return node

    def _type_groups(
        self,
        scope_id: int,
        element_ids: list[int],
        state: _BuildState,
    ) -> list[TreeNode]:
        """Group a container's direct elements under per-type header nodes.

        Header ids are ``-(scope * stride + counter)`` with the counter running
        per container, so they never collide inside one subtree.
        """
        if not element_ids:
            return []

        buckets: dict[str, list[TreeNode]] = {}
        for eid in element_ids:
            entity_type = state.type_index.get(eid)
            label = entity_type.label if entity_type else UNTYPED_LABEL
            buckets.setdefault(label, []).append(self._leaf(eid, state))

        labels = [label for label in state.label_order if label in buckets]
        if UNTYPED_LABEL in buckets and UNTYPED_LABEL not in labels:
            labels.append(UNTYPED_LABEL)

        scope = scope_id if scope_id > 0 else 0
        groups = []
        for counter, label in enumerate(labels, start=1):
            children = sorted(buckets[label], key=lambda n: (n.name.casefold(), n.name, n.id))
            group_id = -(scope * state.stride + counter)
            groups.append(
                TreeNode(
                    id=group_id,
                    selectable_id=group_id,
                    name=f"{pluralize(label)} ({len(children)})",
                    type_label=f"{label}Group",
                    children=children,
                )
            )

        groups.sort(key=lambda n: (n.name.casefold(), n.id))
        return groups

    @staticmethod
    def _dedupe(element_ids: Iterable[int]) -> list[int]:
        return list(dict.fromkeys(element_ids))


# =============================================================================
# Functional API
# =============================================================================


def _normalize_spatial(groups: Any) -> tuple[SpatialGroup, ...]:
    if groups is None:
        return ()
    if isinstance(groups, Mapping):
        return tuple(SpatialGroup.from_raw(name, raw) for name, raw in groups.items())
    return tuple(groups)


def _normalize_entities(groups: Any) -> tuple[EntityGroup, ...]:
    if groups is None:
        return ()
    if isinstance(groups, Mapping):
        return tuple(EntityGroup.from_raw(name, raw) for name, raw in groups.items())
    return tuple(groups)


def build_tree(
    spatial_groups: Mapping[str, Any] | Iterable[SpatialGroup] | None,
    entity_groups: Mapping[str, Any] | Iterable[EntityGroup] | None,
    name_map: Mapping[int, str],
    *,
    policy: ParentPolicy | str | None = None,
    stride: int | None = None,
    generation: int = 0,
) -> TreeNode:
    """Build the model tree from raw or normalized classification groups.

    Never raises: malformed spatial data degrades to the entity-only tree,
    malformed entity data to the error node.

    Args:
        spatial_groups: Group name -> ``{"id", "map"}``, or SpatialGroup objects
        entity_groups: Type name -> ``{"map"}`` or entity list, or EntityGroup objects
        name_map: Element id -> display name
        policy: Parent rule for spatial groups with several containers
        stride: Type group id stride
        generation: Load generation, for logging

    Returns:
        Single Project root
    """
    try:
        builder = TreeBuilder(policy=policy, stride=stride)
    except ValueError as e:
        logger.warning(
            "Invalid parent policy, using first match",
            generation=generation,
            policy=str(policy),
            error=str(e),
        )
        builder = TreeBuilder(policy=ParentPolicy.FIRST_MATCH, stride=stride)

    try:
        entities = _normalize_entities(entity_groups)
    except Exception as e:
        logger.error("Invalid entity classification", generation=generation, error=str(e))
        return error_tree()

    try:
        spatial = _normalize_spatial(spatial_groups)
    except Exception as e:
        logger.warning("Invalid spatial classification", generation=generation, error=str(e))
        snapshot = ClassificationSnapshot(generation=generation, entity_groups=entities)
        return builder.build_entity_only_or_error(snapshot, name_map)

    snapshot = ClassificationSnapshot(
        generation=generation,
        spatial_groups=spatial,
        entity_groups=entities,
    )
    return builder.build(snapshot, name_map)


def build_tree_from_result(
    result: ClassificationResult,
    name_map: Mapping[int, str],
    *,
    builder: TreeBuilder | None = None,
) -> TreeNode:
    """Build the model tree for a tagged classification result."""
    builder = builder or TreeBuilder()

    if isinstance(result, SpatialResult):
        return builder.build(result.snapshot, name_map)
    if isinstance(result, EntityOnlyResult):
        logger.warning(
            "Building entity-only tree",
            generation=result.generation,
            reason=result.reason,
        )
        return builder.build_entity_only_or_error(result.snapshot, name_map)
    if isinstance(result, ErrorResult):
        logger.error(
            "Classification failed",
            generation=result.generation,
            reason=result.reason,
        )
        return error_tree()

    logger.error("Unknown classification result", result_type=type(result).__name__)
    return error_tree()
