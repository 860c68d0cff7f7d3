"""Model Tree Node.

A node of the display tree handed to renderers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass(eq=False)
class TreeNode:
    """Node of the model structure tree.

    Nodes compare by identity: an element referenced from several
    classifications is represented by exactly one node object.

    Attributes:
        id: Element id (> 0) or synthetic id (<= 0)
        name: Display name
        selectable_id: Element to select when clicked; <= 0 or None is inert
        type_label: Friendly type label (e.g. "Wall", "Storey", "WallGroup")
        children: Ordered child nodes, owned exclusively by this node
    """

    id: int
    name: str
    selectable_id: int | None = None
    type_label: str | None = None
    children: list[TreeNode] = field(default_factory=list)

    @property
    def is_selectable(self) -> bool:
        """Check if clicking this node selects a real model element."""
        return self.selectable_id is not None and self.selectable_id > 0

    @property
    def is_synthetic(self) -> bool:
        """Check if this node is a header or placeholder, not a model element."""
        return self.id <= 0

    def add_child(self, child: TreeNode) -> bool:
        """Attach a child unless that exact node is already attached.

        Returns:
            True if the child was attached
        """
        if any(existing is child for existing in self.children):
            return False
        self.children.append(child)
        return True

    def walk(self) -> Iterator[TreeNode]:
        """Iterate over this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, node_id: int) -> TreeNode | None:
        """Find the first node with the given id."""
        for node in self.walk():
            if node.id == node_id:
                return node
        return None

    def count(self) -> int:
        """Count nodes in this subtree, including this node."""
        return sum(1 for _ in self.walk())

    def with_children(self, children: list[TreeNode]) -> TreeNode:
        """Return a copy of this node carrying the given children."""
        return TreeNode(
            id=self.id,
            name=self.name,
            selectable_id=self.selectable_id,
            type_label=self.type_label,
            children=children,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the subtree for renderers."""
        return {
            "id": self.id,
            "selectable_id": self.selectable_id,
            "name": self.name,
            "type": self.type_label,
            "children": [child.to_dict() for child in self.children],
        }


def placeholder_name(element_id: int) -> str:
    """Display name used when an element's name is unknown."""
    return f"Element {element_id}"
